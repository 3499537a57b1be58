# -*- coding: utf-8 -*-
"""
Charts for the break analysis.

Both plots read only the chart table (one row per work) and the period table
produced by hb_breaks_report.
"""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
import pandas as pd
import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
from matplotlib.patches import Rectangle
from matplotlib.ticker import FuncFormatter, PercentFormatter

logger = logging.getLogger("hb_breaks")

SCATTER_FILE = "breaks_vs_caesurae_rates.png"
TIMELINE_FILE = "break_rates_over_time.png"

# Vertical position of the period bands on the timeline (rate units).
BAND_YMIN = 0.0045
BAND_YMAX = 0.0050


def savefig(fig, outdir: Path, name: str, dpi: int = 160) -> Path:
    outdir.mkdir(parents=True, exist_ok=True)
    path = outdir / name
    fig.savefig(path, dpi=dpi)
    plt.close(fig)
    logger.info("Saved: %s", path)
    return path


def draw_breaks_vs_caesurae(chart: pd.DataFrame):
    """Scatter of breaks per caesura (x) against caesurae per line (y), one labelled point per work."""
    sub = chart.dropna(subset=["break_per_caesura", "caesura_per_line"])
    if len(sub) == 0:
        logger.warning("No works with defined rates; skipping %s", SCATTER_FILE)
        return None

    x = sub["break_per_caesura"].to_numpy(dtype=float)
    y = sub["caesura_per_line"].to_numpy(dtype=float)

    fig, ax = plt.subplots(figsize=(7, 4))
    ax.scatter(x, y, alpha=0.8)
    for xi, yi, label in zip(x, y, sub["work"]):
        ax.text(xi + 0.001, yi, label, ha="left", va="center", fontsize=8)

    ax.set_xticks(np.arange(0, x.max() + 1e-9, 0.02))
    ax.set_yticks(np.arange(0, y.max() + 1e-9, 0.02))
    ax.xaxis.set_major_formatter(PercentFormatter(xmax=1.0, decimals=0))
    ax.yaxis.set_major_formatter(PercentFormatter(xmax=1.0, decimals=0))

    # room for labels at the top and right
    ax.set_xlim(0, x.max() + 0.015)
    ax.set_ylim(0, y.max() + 0.002)

    ax.set_xlabel("rate of breaks per caesura")
    ax.set_ylabel("rate of caesurae per line")
    ax.grid(alpha=0.3)
    fig.tight_layout()
    return fig


def draw_break_rates_over_time(chart: pd.DataFrame, periods: pd.DataFrame):
    """Breaks per line against composition date, with shaded period bands."""
    if len(chart) == 0:
        logger.warning("No works to plot; skipping %s", TIMELINE_FILE)
        return None

    dates = chart["date"].to_numpy(dtype=float)
    rates = chart["break_per_line"].to_numpy(dtype=float)

    fig, ax = plt.subplots(figsize=(7, 3))

    for p in periods.to_dict("records"):
        ax.add_patch(
            Rectangle(
                (p["start"], BAND_YMIN),
                p["end"] - p["start"],
                BAND_YMAX - BAND_YMIN,
                alpha=0.2,
                color="grey",
                linewidth=0,
            )
        )
        ax.text(p["mid"], (BAND_YMIN + BAND_YMAX) / 2, p["name"], ha="center", va="center", fontsize=8)

    ax.scatter(dates, rates, alpha=0.8)
    for xi, yi, label in zip(dates, rates, chart["work"]):
        ax.text(xi + 10, yi, label, ha="left", va="center", fontsize=8)

    ax.xaxis.set_major_formatter(FuncFormatter(lambda v, _: f"{v:.0f}"))
    ax.yaxis.set_major_formatter(PercentFormatter(xmax=1.0, decimals=1))
    # bands and their labels stay inside the axes
    lo = min([dates.min() - 50] + periods["start"].tolist())
    hi = max([dates.max() + 75] + periods["end"].tolist())
    ax.set_xlim(lo, hi)
    ax.set_ylim(0, max(np.nanmax(rates), BAND_YMAX) * 1.05)

    ax.set_xlabel("year")
    ax.set_ylabel("rate of breaks per line")
    ax.grid(alpha=0.3)
    fig.tight_layout()
    return fig


def render_charts(chart: pd.DataFrame, periods: pd.DataFrame) -> dict:
    """Draw both charts in memory; returns {file name: figure} for the ones drawn."""
    figures = {
        SCATTER_FILE: draw_breaks_vs_caesurae(chart),
        TIMELINE_FILE: draw_break_rates_over_time(chart, periods),
    }
    return {name: fig for name, fig in figures.items() if fig is not None}


def save_charts(figures: dict, outdir: Path) -> list:
    return [savefig(fig, outdir, name) for name, fig in figures.items()]
