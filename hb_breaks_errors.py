"""
Error hierarchy for the Hermann-Schein break analysis.

Every failure aborts the run before any report or chart is written.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List


class BreakAnalysisError(Exception):
    """Base class for all fatal analysis errors."""


class CatalogError(BreakAnalysisError):
    """A work or period catalog is malformed (duplicate ids, bad line counts...)."""


class MalformedRowError(BreakAnalysisError):
    """An input record has a value outside its recognized encoding."""

    def __init__(
        self,
        field_name: str,
        value: object,
        *,
        row_number: int | None = None,
        work: str = "",
        book_n: str = "",
        line_n: str = "",
        n_bad: int = 1,
        detail: str = "",
        message: str = "",
    ):
        self.field_name = field_name
        self.value = value
        self.row_number = row_number
        self.work = work
        self.book_n = book_n
        self.line_n = line_n
        self.n_bad = n_bad

        if message:
            super().__init__(message)
            return

        where = f"CSV line {row_number}" if row_number is not None else "input"
        msg = (
            f"{where}: unrecognized {field_name}={value!r} "
            f"(work={work!r}, book={book_n!r}, line={line_n!r})"
        )
        if detail:
            msg += f"; {detail}"
        if n_bad > 1:
            msg += f" [{n_bad} records affected]"
        super().__init__(msg)

    @classmethod
    def missing_columns(cls, columns: List[str]) -> "MalformedRowError":
        return cls(
            "columns",
            ", ".join(columns),
            n_bad=0,
            message="input is missing required column(s): " + ", ".join(columns),
        )


@dataclass(frozen=True)
class LineViolation:
    """One line of verse whose line-level fields disagree across its words."""

    work: str
    book_n: str
    book_key: str
    line_n: str
    n_distinct: Dict[str, int] = field(default_factory=dict)

    @property
    def key(self) -> tuple:
        return (self.work, self.book_key, self.line_n)

    def bad_fields(self) -> List[str]:
        return [k for k, n in self.n_distinct.items() if n != 1]

    def describe(self) -> str:
        counts = ", ".join(f"{k}={n}" for k, n in self.n_distinct.items())
        return f"{self.work} book={self.book_n!r} line={self.line_n!r} ({counts})"


class ConsistencyViolationError(BreakAnalysisError):
    """One or more lines carry non-unique values for line-level fields."""

    def __init__(self, violations: List[LineViolation]):
        self.violations = list(violations)
        lines = "\n".join("  " + v.describe() for v in self.violations)
        super().__init__(
            f"{len(self.violations)} inconsistent line(s):\n{lines}"
        )


class UnknownWorkError(BreakAnalysisError):
    """Aggregated data references works missing from the work catalog."""

    def __init__(self, works: List[str]):
        self.works = sorted(works)
        super().__init__("Works not in catalog: " + ", ".join(self.works))
