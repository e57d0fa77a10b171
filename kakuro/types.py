from typing import Optional, Union


Clue = tuple[int, int]
RawCell = Union[Clue, list[int], int]
RawGrid = list[list[RawCell]]
Position = tuple[int, int]
TraceLog = list[str]
TraceStep = dict[str, object]
CountResult = dict[str, object]
ProgressState = dict[str, int]
Diagnosis = dict[str, object]
Deadline = Optional[float]
