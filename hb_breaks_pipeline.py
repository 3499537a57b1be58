# -*- coding: utf-8 -*-
"""
Core pipeline for Hermann-Schein break rates.

raw rows (one per word)
  -> normalize_rows       typed booleans, integer positions, book_key
  -> check_consistency    line-level fields must be constant within a line
  -> select_caesura_rows  one representative row per line of verse
  -> aggregate_breaks     per-work break / caesura counts
  -> join_catalog         attach line counts, dates and names

Every stage takes a DataFrame and returns a new one; nothing is modified in place.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List

import numpy as np
import pandas as pd

from hb_breaks_catalogs import WorkCatalog
from hb_breaks_errors import (
    ConsistencyViolationError,
    LineViolation,
    MalformedRowError,
    UnknownWorkError,
)

logger = logging.getLogger("hb_breaks")


# ============================================================
# INPUT ENCODINGS
# ============================================================

REQUIRED_COLUMNS = [
    "work",
    "book_n",
    "line_n",
    "word_n",
    "caesura_word_n",
    "breaks_hb_schein",
    "speaker",
    "is_speech",
    "enclitic",
]

YES_NO = {"Yes": True, "No": False}
ENCLITIC = {"Enclitic": True, "Non-enclitic": False}

BOOLEAN_FIELDS = {
    "breaks_hb_schein": YES_NO,
    "is_speech": YES_NO,
    "enclitic": ENCLITIC,
}

INTEGER_FIELDS = ["word_n", "caesura_word_n"]
INTEGER_PATTERN = r"[+-]?\d{1,9}"

LINE_KEY = ["work", "book_key", "line_n"]

# Fields annotated once per line and repeated on every word of it.
LINE_LEVEL_FIELDS = ["caesura_word_n", "breaks_hb_schein", "speaker", "is_speech"]


# ============================================================
# READING
# ============================================================

def read_rows(path: Path, encoding: str = "utf-8-sig") -> pd.DataFrame:
    """Read the annotation CSV with every column kept as text."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Input CSV not found: {path.resolve()}")
    return pd.read_csv(path, dtype=str, keep_default_na=False, encoding=encoding)


# ============================================================
# ROW NORMALIZATION
# ============================================================

def _csv_line(idx) -> int | None:
    # header is line 1; a default RangeIndex maps row 0 to line 2
    return int(idx) + 2 if isinstance(idx, (int, np.integer)) else None


def _raise_bad(df: pd.DataFrame, mask: pd.Series, col: str, detail: str = "") -> None:
    bad = df[mask]
    first_idx = bad.index[0]
    first = bad.iloc[0]
    raise MalformedRowError(
        col,
        first[col],
        row_number=_csv_line(first_idx),
        work=str(first.get("work", "")),
        book_n=str(first.get("book_n", "")),
        line_n=str(first.get("line_n", "")),
        n_bad=len(bad),
        detail=detail,
    )


def normalize_rows(raw: pd.DataFrame) -> pd.DataFrame:
    """
    Convert raw text columns into typed columns.

    - Yes/No and Enclitic/Non-enclitic become booleans; any other literal fails
    - word_n / caesura_word_n become integers
    - book_key = work + book_n (empty book label gives just the work id)
    """
    missing = [c for c in REQUIRED_COLUMNS if c not in raw.columns]
    if missing:
        raise MalformedRowError.missing_columns(missing)

    df = raw[REQUIRED_COLUMNS].copy()
    for col in ["work", "book_n", "line_n", "speaker"]:
        df[col] = df[col].astype(str)

    for col, mapping in BOOLEAN_FIELDS.items():
        known = df[col].isin(list(mapping))
        if not known.all():
            _raise_bad(df, ~known, col, detail="expected one of " + "/".join(mapping))
        df[col] = df[col].map(mapping).astype(bool)

    for col in INTEGER_FIELDS:
        # plain decimal digits only
        text = df[col].astype(str).str.strip()
        integral = text.str.fullmatch(INTEGER_PATTERN, na=False).astype(bool)
        if not integral.all():
            _raise_bad(df, ~integral, col, detail="expected an integer word position")
        df[col] = text.astype(int)

    df["book_key"] = df["work"] + df["book_n"]

    logger.debug("Normalized %d rows across %d works", len(df), df["work"].nunique())
    return df


# ============================================================
# CONSISTENCY CHECK
# ============================================================

def _n_distinct(s: pd.Series) -> int:
    return s.nunique(dropna=False)


def find_inconsistent_lines(df: pd.DataFrame) -> List[LineViolation]:
    """Return every line whose line-level fields take more than one value."""
    if len(df) == 0:
        return []

    counts = (
        df.groupby(LINE_KEY, sort=False, dropna=False)
        .agg(book_n=("book_n", "first"), **{f: (f, _n_distinct) for f in LINE_LEVEL_FIELDS})
        .reset_index()
    )
    bad = counts[(counts[LINE_LEVEL_FIELDS] != 1).any(axis=1)]

    return [
        LineViolation(
            work=r["work"],
            book_n=r["book_n"],
            book_key=r["book_key"],
            line_n=r["line_n"],
            n_distinct={f: int(r[f]) for f in LINE_LEVEL_FIELDS},
        )
        for r in bad.to_dict("records")
    ]


def check_consistency(df: pd.DataFrame) -> pd.DataFrame:
    """Raise ConsistencyViolationError listing all inconsistent lines, else pass df through."""
    violations = find_inconsistent_lines(df)
    n_lines = df.groupby(LINE_KEY, sort=False).ngroups if len(df) else 0
    if violations:
        logger.debug("Inconsistent lines: %d of %d", len(violations), n_lines)
        raise ConsistencyViolationError(violations)
    logger.info("Consistency check passed: %d lines", n_lines)
    return df


# ============================================================
# LINE SELECTION
# ============================================================

def select_caesura_rows(df: pd.DataFrame) -> pd.DataFrame:
    """Keep one representative row per line of verse: the word at the caesura."""
    rep = df[df["word_n"] == df["caesura_word_n"]].copy()
    logger.info("Representative caesura rows: %d", len(rep))
    return rep


# ============================================================
# AGGREGATION
# ============================================================

def aggregate_breaks(rep: pd.DataFrame) -> pd.DataFrame:
    """Count breaks and caesurae per work (columns: work, num_breaks, num_caesurae)."""
    if len(rep) == 0:
        return pd.DataFrame({"work": [], "num_breaks": [], "num_caesurae": []}).astype(
            {"num_breaks": int, "num_caesurae": int}
        )
    counts = (
        rep.groupby("work", sort=True)
        .agg(
            num_breaks=("breaks_hb_schein", "sum"),
            num_caesurae=("breaks_hb_schein", "size"),
        )
        .reset_index()
    )
    counts["num_breaks"] = counts["num_breaks"].astype(int)
    counts["num_caesurae"] = counts["num_caesurae"].astype(int)
    return counts


@dataclass(frozen=True)
class WorkAggregate:
    work: str
    num_breaks: int
    num_caesurae: int
    num_lines: int
    date: int
    work_name: str

    @property
    def caesura_rate(self) -> float:
        return _ratio(self.num_caesurae, self.num_lines)

    @property
    def break_per_caesura_rate(self) -> float:
        return _ratio(self.num_breaks, self.num_caesurae)

    @property
    def break_per_line_rate(self) -> float:
        return _ratio(self.num_breaks, self.num_lines)


def _ratio(num: int, den: int) -> float:
    # undefined rates are NaN; the report layer decides how to render them
    if den == 0:
        return math.nan
    return num / den


def join_catalog(counts: pd.DataFrame, works: WorkCatalog) -> List[WorkAggregate]:
    """Inner join per-work counts with the catalog; any unmatched work is fatal."""
    unknown = [w for w in counts["work"] if w not in works]
    if unknown:
        raise UnknownWorkError(unknown)

    out = []
    for r in counts.to_dict("records"):
        entry = works.get(r["work"])
        out.append(
            WorkAggregate(
                work=entry.work,
                num_breaks=int(r["num_breaks"]),
                num_caesurae=int(r["num_caesurae"]),
                num_lines=entry.num_lines,
                date=entry.date,
                work_name=entry.work_name,
            )
        )
    return out


# ============================================================
# WHOLE PIPELINE
# ============================================================

@dataclass(frozen=True)
class PipelineResult:
    rows: pd.DataFrame
    representative: pd.DataFrame
    aggregates: List[WorkAggregate]

    def by_work(self) -> Dict[str, WorkAggregate]:
        return {a.work: a for a in self.aggregates}


def run_pipeline(raw: pd.DataFrame, works: WorkCatalog) -> PipelineResult:
    logger.info("Loaded rows: %d", len(raw))
    rows = check_consistency(normalize_rows(raw))
    rep = select_caesura_rows(rows)
    aggregates = join_catalog(aggregate_breaks(rep), works)
    logger.info("Aggregated works: %d", len(aggregates))
    return PipelineResult(rows=rows, representative=rep, aggregates=aggregates)
