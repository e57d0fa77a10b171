class PuzzleFormatError(ValueError):
    """The puzzle grid is structurally invalid and cannot be solved."""


class UnsolvablePuzzleError(ValueError):
    """The grid is well formed but admits no legal digit assignment."""


class SolveAbortedError(ValueError):
    """The search was stopped by a time budget or a stop request before it finished."""


class DuplicateValueError(RuntimeError):
    """A value was placed into a run that already holds it."""
