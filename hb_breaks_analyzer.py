#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
hb_breaks_analyzer.py

Hermann-Schein break rates per work, from a word-level annotation CSV.

Steps
-----
1) Read the annotation CSV (one row per word token) and type its columns
2) Check that line-level fields (caesura position, break flag, speaker, speech flag)
   are constant within every line; abort listing ALL bad lines otherwise
3) Keep the caesura word of each line, count breaks and caesurae per work
4) Join with the work catalog (line counts, dates, names); unknown works abort
5) Print the development table + cross-tabulations, write the publication table,
   chart data and the two charts

Nothing is written unless every step succeeds.

Outputs written into OUTDIR:
 - break_rates.csv               publication table
 - break_rates_dev.csv           development table (with "total" row)
 - break_rates_chart_data.csv    per-work rates used by the charts
 - periods.csv                   period bands used by the timeline
 - breaks_vs_caesurae_rates.png
 - break_rates_over_time.png

USAGE
-----
python hb_breaks_analyzer.py --csv HB_Database_Predraft.csv --outdir out

Custom catalogs:
  --works-csv works.csv        (work,num_lines,date,work_name)
  --periods-csv periods.csv    (start,end,name)
  --period-bce-offset 1        shift BCE period boundaries by one year
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List

from hb_breaks_catalogs import PeriodCatalog, WorkCatalog
from hb_breaks_errors import BreakAnalysisError
from hb_breaks_pipeline import read_rows, run_pipeline
from hb_breaks_plots import render_charts, save_charts
from hb_breaks_report import Reports, compose_reports

PUB_FILE = "break_rates.csv"
DEV_FILE = "break_rates_dev.csv"
CHART_FILE = "break_rates_chart_data.csv"
PERIOD_FILE = "periods.csv"


def parse_args(argv: List[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Hermann-Schein break rates per work")
    p.add_argument("--csv", default="HB_Database_Predraft.csv", help="Word-level annotation CSV")
    p.add_argument("--outdir", default=".", help="Output directory for tables and charts")
    p.add_argument("--works-csv", default=None, help="Work catalog CSV (default: built-in table)")
    p.add_argument("--periods-csv", default=None, help="Period catalog CSV (default: built-in table)")
    p.add_argument(
        "--period-bce-offset",
        type=int,
        default=0,
        help="Years added to negative period boundaries (BCE off-by-one is unresolved)",
    )
    p.add_argument("--encoding", default="utf-8-sig", help="CSV encoding (default utf-8-sig for Excel)")
    p.add_argument("--no-plots", action="store_true", help="Skip the two PNG charts")
    p.add_argument("--debug", action="store_true", help="Verbose logging")
    return p.parse_args(argv)


def load_catalogs(args: argparse.Namespace) -> tuple[WorkCatalog, PeriodCatalog]:
    if args.works_csv:
        works = WorkCatalog.from_csv(Path(args.works_csv), encoding=args.encoding)
    else:
        works = WorkCatalog.default()

    if args.periods_csv:
        periods = PeriodCatalog.from_csv(
            Path(args.periods_csv), encoding=args.encoding, bce_offset=args.period_bce_offset
        )
    else:
        periods = PeriodCatalog.default(bce_offset=args.period_bce_offset)
    return works, periods


def print_console_tables(reports: Reports) -> None:
    print(reports.development.to_string(index=False))
    print()
    print("lines without and with enclitic:")
    print(reports.enclitic.to_string())
    print()
    print("breaks/quasi-breaks in speech/not-speech:")
    print(reports.speech.to_string())
    print()
    print(reports.publication.to_string(index=False))


def write_tables(reports: Reports, outdir: Path, encoding: str, logger: logging.Logger) -> None:
    outdir.mkdir(parents=True, exist_ok=True)
    for df, name in [
        (reports.publication, PUB_FILE),
        (reports.development, DEV_FILE),
        (reports.chart, CHART_FILE),
        (reports.periods, PERIOD_FILE),
    ]:
        path = outdir / name
        df.to_csv(path, index=False, encoding=encoding)
        logger.info("Saved: %s", path)


def run(args: argparse.Namespace, logger: logging.Logger) -> Reports:
    works, periods = load_catalogs(args)
    logger.debug("Catalogs: %d works, %d periods (bce_offset=%d)", len(works), len(periods), periods.bce_offset)

    raw = read_rows(Path(args.csv), encoding=args.encoding)
    result = run_pipeline(raw, works)
    reports = compose_reports(result, periods)

    # figures are drawn before anything touches outdir
    figures = {} if args.no_plots else render_charts(reports.chart, reports.periods)

    outdir = Path(args.outdir)
    print_console_tables(reports)
    write_tables(reports, outdir, args.encoding, logger)
    save_charts(figures, outdir)

    logger.info("Done. All outputs are in: %s", outdir.resolve())
    return reports


def main(argv: List[str] | None = None) -> int:
    args = parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.debug else logging.INFO, format="%(levelname)s: %(message)s")
    logger = logging.getLogger("hb_breaks")

    try:
        run(args, logger)
    except BreakAnalysisError as e:
        logger.error("%s", e)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
