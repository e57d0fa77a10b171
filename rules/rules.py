MIN_VALUE = 1
MAX_VALUE = 9

NO_RUN = 0
MIN_CLUE_SUM = 3
MAX_CLUE_SUM = 45

BLANK = 0
