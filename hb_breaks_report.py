# -*- coding: utf-8 -*-
"""
Presentation of per-work break aggregates.

Tables produced here:
 - development table: raw counts + 3-decimal percentages, with a trailing "total" row
 - publication table: thousands separators, 2-decimal Breaks/Line, "(1 per N)" column
 - chart input tables for the scatter and timeline plots
 - two console cross-tabulations (enclitic x break, break x speech)

All string formatting lives in RateFormatter so the numeric tables can be tested
without caring about separators or padding.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, List

import pandas as pd

from hb_breaks_catalogs import PeriodCatalog
from hb_breaks_pipeline import LINE_KEY, WorkAggregate

DEV_COLUMNS = ["work", "L", "C", "B", "C/L%", "B/C%", "B/L%"]
PUB_COLUMNS = ["Work", "Lines", "Caesurae", "Breaks", "Breaks/Line", "_"]
CHART_COLUMNS = ["work", "work_name", "date", "break_per_caesura", "caesura_per_line", "break_per_line"]

TOTAL_LABEL = "total"
NBSP = "\u00a0"


# ============================================================
# FORMATTING
# ============================================================

@dataclass(frozen=True)
class RateFormatter:
    """Number rendering for both tables. Swap pad for " " to get plain ASCII output."""

    pad: str = NBSP
    dev_decimals: int = 3
    pub_decimals: int = 2

    def count(self, n: float) -> str:
        return f"{n:,.0f}"

    def dev_percent(self, rate: float) -> str:
        if math.isnan(rate):
            return ""
        return f"{100 * rate:.{self.dev_decimals}f}%"

    def pub_percent(self, num_breaks: int, rate: float) -> str:
        if num_breaks == 0:
            return f"{self.pad}0%"
        return f"{self.pad}{100 * rate:.{self.pub_decimals}f}%"

    def reciprocal(self, num_breaks: int, num_lines: int) -> str:
        if num_breaks == 0:
            return ""
        return f"(1{self.pad}per{self.pad}{self.count(num_lines / num_breaks)})"


def parse_percent(s: str) -> float:
    """Inverse of the percent renderings: ' 5.00%' -> 5.0 (percentage points)."""
    s = s.replace(NBSP, " ").strip()
    if not s:
        return math.nan
    return float(s.rstrip("%"))


# ============================================================
# ORDERING
# ============================================================

def sort_key(a: WorkAggregate):
    return (-a.break_per_line_rate, a.date, a.work_name)


def sort_aggregates(aggregates: Iterable[WorkAggregate]) -> List[WorkAggregate]:
    """Breaks per line descending, then date ascending, then work name ascending."""
    return sorted(aggregates, key=sort_key)


# ============================================================
# TABLES
# ============================================================

def _dev_row(label: str, num_breaks: int, num_caesurae: int, num_lines: int, fmt: RateFormatter) -> dict:
    agg = WorkAggregate(label, num_breaks, num_caesurae, num_lines, 0, label)
    return {
        "work": label,
        "L": num_lines,
        "C": num_caesurae,
        "B": num_breaks,
        "C/L%": fmt.dev_percent(agg.caesura_rate),
        "B/C%": fmt.dev_percent(agg.break_per_caesura_rate),
        "B/L%": fmt.dev_percent(agg.break_per_line_rate),
    }


def development_table(aggregates: Iterable[WorkAggregate], fmt: RateFormatter | None = None) -> pd.DataFrame:
    fmt = fmt or RateFormatter()
    ordered = sort_aggregates(aggregates)

    rows = [_dev_row(a.work, a.num_breaks, a.num_caesurae, a.num_lines, fmt) for a in ordered]
    rows.append(
        _dev_row(
            TOTAL_LABEL,
            sum(a.num_breaks for a in ordered),
            sum(a.num_caesurae for a in ordered),
            sum(a.num_lines for a in ordered),
            fmt,
        )
    )
    return pd.DataFrame(rows, columns=DEV_COLUMNS)


def publication_table(aggregates: Iterable[WorkAggregate], fmt: RateFormatter | None = None) -> pd.DataFrame:
    fmt = fmt or RateFormatter()
    rows = [
        {
            "Work": a.work_name,
            "Lines": fmt.count(a.num_lines),
            "Caesurae": fmt.count(a.num_caesurae),
            "Breaks": fmt.count(a.num_breaks),
            "Breaks/Line": fmt.pub_percent(a.num_breaks, a.break_per_line_rate),
            "_": fmt.reciprocal(a.num_breaks, a.num_lines),
        }
        for a in sort_aggregates(aggregates)
    ]
    return pd.DataFrame(rows, columns=PUB_COLUMNS)


def chart_table(aggregates: Iterable[WorkAggregate]) -> pd.DataFrame:
    """Numeric rates per work for plotting; undefined breaks-per-caesura stays NaN."""
    rows = [
        {
            "work": a.work,
            "work_name": a.work_name,
            "date": a.date,
            "break_per_caesura": a.break_per_caesura_rate,
            "caesura_per_line": a.caesura_rate,
            "break_per_line": a.break_per_line_rate,
        }
        for a in sort_aggregates(aggregates)
    ]
    return pd.DataFrame(rows, columns=CHART_COLUMNS)


def period_table(periods: PeriodCatalog) -> pd.DataFrame:
    rows = [
        {"start": p.start, "end": p.end, "name": p.name, "mid": (p.start + p.end) / 2}
        for p in periods.bands()
    ]
    return pd.DataFrame(rows, columns=["start", "end", "name", "mid"])


# ============================================================
# CROSS-TABULATIONS
# ============================================================

def enclitic_break_counts(rows: pd.DataFrame) -> pd.Series:
    """
    Lines with a break, split by whether any word in the line is enclitic.
    Index is [False, True]; both are always present.
    """
    broken = rows[rows["breaks_hb_schein"]]
    per_line = broken.groupby(LINE_KEY, sort=False)["enclitic"].any()
    counts = per_line.value_counts().reindex([False, True], fill_value=0).astype(int)
    counts.index.name = "enclitic"
    return counts.rename("lines")


def break_speech_counts(rep: pd.DataFrame) -> pd.DataFrame:
    """2x2 counts of representative rows: rows = breaks_hb_schein, columns = is_speech."""
    levels = [False, True]
    if len(rep) == 0:
        table = pd.DataFrame(0, index=levels, columns=levels)
    else:
        idx = pd.MultiIndex.from_product([levels, levels], names=["breaks_hb_schein", "is_speech"])
        table = (
            rep.groupby(["breaks_hb_schein", "is_speech"]).size()
            .reindex(idx, fill_value=0)
            .unstack("is_speech")
        )
    table = table.astype(int)
    table.index.name = "breaks_hb_schein"
    table.columns.name = "is_speech"
    return table


# ============================================================
# BUNDLE
# ============================================================

@dataclass(frozen=True)
class Reports:
    development: pd.DataFrame
    publication: pd.DataFrame
    chart: pd.DataFrame
    periods: pd.DataFrame
    enclitic: pd.Series
    speech: pd.DataFrame


def compose_reports(result, periods: PeriodCatalog, fmt: RateFormatter | None = None) -> Reports:
    """Render every table from a PipelineResult; nothing is written here."""
    fmt = fmt or RateFormatter()
    return Reports(
        development=development_table(result.aggregates, fmt),
        publication=publication_table(result.aggregates, fmt),
        chart=chart_table(result.aggregates),
        periods=period_table(periods),
        enclitic=enclitic_break_counts(result.rows),
        speech=break_speech_counts(result.representative),
    )
