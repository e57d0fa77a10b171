from datetime import datetime
from typing import Optional

from .types import TraceLog


def trace(enabled: bool, trace_log: Optional[TraceLog], message: str) -> None:
    if not enabled:
        return
    if trace_log is not None:
        trace_log.append(message)
    else:
        print(message)


def indent(depth: int) -> str:
    return " " * depth


def format_values(values: list[int]) -> str:
    return ", ".join(str(value) for value in values)


def format_cell(column: int, row: int) -> str:
    return f"C:{column:2}, R:{row:2}"


SUMMARY_SEPARATOR = "-" * 100


def timing_summary(started: datetime, finished: datetime) -> list[str]:
    return [
        SUMMARY_SEPARATOR,
        f"Started: {started}",
        f"Finished: {finished}",
        f"Elapsed: {finished - started}",
    ]
