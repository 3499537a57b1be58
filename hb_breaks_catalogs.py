# -*- coding: utf-8 -*-
"""
Reference tables for the break analysis: known works and historical periods.

The default tables below reproduce the published analysis. Pass a different
WorkCatalog / PeriodCatalog into the pipeline (or load one with from_csv) to
analyse another corpus.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Tuple

import pandas as pd

from hb_breaks_errors import CatalogError


# ============================================================
# CONFIG (EDIT THESE!)
# ============================================================

# (work, num_lines, date, work_name); negative dates are BCE
DEFAULT_WORKS = [
    ("Argon.", 5834, -350, "Argonautica"),
    ("Callim.Hymn", 941, -250, "Callimachus’ Hymns"),
    ("Dion.", 21356, 450, "Nonnus’ Dionysiaca"),
    ("Hom.Hymn", 2342, -600, "Homeric Hymns"),
    ("Il.", 15683, -750, "Iliad"),
    ("Od.", 12107, -750, "Odyssey"),
    ("Phaen.", 1155, -250, "Aratus’ Phaenomena"),
    ("Q.S.", 8801, 350, "Quintus of Smyrna’s Fall of Troy"),
    ("Sh.", 479, -550, "Shield"),
    ("Theoc.", 2527, -250, "Theocritus’ Idylls"),
    ("Theog.", 1042, -750, "Theogony"),
    ("W.D.", 831, -750, "Works and Days"),
]

# (start, end, name)
# BCE boundaries may be off by one year (there is no year 0); confirm against
# the period definitions before relying on exact edges, and use bce_offset.
DEFAULT_PERIODS = [
    (-800, -500, "Archaic"),
    (-323, -146, "Hellenistic"),
    (-100, 500, "Imperial"),
]

WORK_COLUMNS = ["work", "num_lines", "date", "work_name"]
PERIOD_COLUMNS = ["start", "end", "name"]


# ============================================================
# WORKS
# ============================================================

@dataclass(frozen=True)
class WorkEntry:
    work: str
    num_lines: int
    date: int
    work_name: str


@dataclass(frozen=True)
class WorkCatalog:
    entries: Tuple[WorkEntry, ...]
    _by_id: Dict[str, WorkEntry] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        by_id: Dict[str, WorkEntry] = {}
        names = set()
        for e in self.entries:
            if e.work in by_id:
                raise CatalogError(f"Duplicate work identifier: {e.work!r}")
            if e.work_name in names:
                raise CatalogError(f"Duplicate work name: {e.work_name!r}")
            if e.num_lines <= 0:
                raise CatalogError(f"Work {e.work!r} has non-positive line count {e.num_lines}")
            by_id[e.work] = e
            names.add(e.work_name)
        object.__setattr__(self, "_by_id", by_id)

    @classmethod
    def from_records(cls, records: Iterable[Tuple[str, int, int, str]]) -> "WorkCatalog":
        return cls(tuple(WorkEntry(str(w), int(n), int(d), str(name)) for w, n, d, name in records))

    @classmethod
    def default(cls) -> "WorkCatalog":
        return cls.from_records(DEFAULT_WORKS)

    @classmethod
    def from_csv(cls, path: Path, encoding: str = "utf-8-sig") -> "WorkCatalog":
        df = _read_table(path, WORK_COLUMNS, encoding)
        try:
            records = [
                (r["work"], int(r["num_lines"]), int(r["date"]), r["work_name"])
                for r in df.to_dict("records")
            ]
        except ValueError as e:
            raise CatalogError(f"Bad number in work catalog {path}: {e}") from e
        return cls.from_records(records)

    def __contains__(self, work: str) -> bool:
        return work in self._by_id

    def __iter__(self) -> Iterator[WorkEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def get(self, work: str) -> WorkEntry | None:
        return self._by_id.get(work)

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame([asdict(e) for e in self.entries], columns=WORK_COLUMNS)


# ============================================================
# PERIODS
# ============================================================

@dataclass(frozen=True)
class PeriodEntry:
    start: int
    end: int
    name: str


@dataclass(frozen=True)
class PeriodCatalog:
    """
    Period ranges used only to annotate the break-rate timeline.

    Ranges may overlap. bce_offset is added to every negative boundary year
    when bands are produced; 0 keeps the years exactly as configured.
    """

    entries: Tuple[PeriodEntry, ...]
    bce_offset: int = 0

    def __post_init__(self):
        for p in self.entries:
            if p.start > p.end:
                raise CatalogError(f"Period {p.name!r} starts after it ends ({p.start} > {p.end})")

    @classmethod
    def from_records(cls, records: Iterable[Tuple[int, int, str]], bce_offset: int = 0) -> "PeriodCatalog":
        return cls(tuple(PeriodEntry(int(s), int(e), str(n)) for s, e, n in records), bce_offset=bce_offset)

    @classmethod
    def default(cls, bce_offset: int = 0) -> "PeriodCatalog":
        return cls.from_records(DEFAULT_PERIODS, bce_offset=bce_offset)

    @classmethod
    def from_csv(cls, path: Path, encoding: str = "utf-8-sig", bce_offset: int = 0) -> "PeriodCatalog":
        df = _read_table(path, PERIOD_COLUMNS, encoding)
        try:
            records = [(int(r["start"]), int(r["end"]), r["name"]) for r in df.to_dict("records")]
        except ValueError as e:
            raise CatalogError(f"Bad year in period catalog {path}: {e}") from e
        return cls.from_records(records, bce_offset=bce_offset)

    def __iter__(self) -> Iterator[PeriodEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def _shift(self, year: int) -> int:
        return year + self.bce_offset if year < 0 else year

    def bands(self) -> List[PeriodEntry]:
        return [PeriodEntry(self._shift(p.start), self._shift(p.end), p.name) for p in self.entries]


# ============================================================
# HELPERS
# ============================================================

def _read_table(path: Path, columns: List[str], encoding: str) -> pd.DataFrame:
    path = Path(path)
    if not path.exists():
        raise CatalogError(f"Catalog file not found: {path.resolve()}")
    df = pd.read_csv(path, dtype=str, keep_default_na=False, encoding=encoding)
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise CatalogError(f"{path}: missing column(s) {', '.join(missing)}")
    return df[columns]
