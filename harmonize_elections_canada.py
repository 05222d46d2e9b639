#!/usr/bin/env python3
"""
Harmonize Elections Canada poll-by-poll results (Parliaments 36-43, 1997-2019)
into one candidate-level table.

Expected layout under --data-root (as published by the authority):
- Parliament 36/*.txt, Parliament 37/*.txt          tab-delimited, one row per poll, 13 candidate slots
- Parliament 38/pollbypoll/*.csv                     one row per poll, one column per candidate
- Parliament 38/tables/table11.csv, table12.csv      winners list, candidates + party
- Parliament 39..43/pollresults/*.csv                one row per (poll, candidate)
- Parliament 40..43/tables/table_tableau11.csv       district number -> province

Outputs under --output-root:
- master/EC_1997_present.csv
- parliaments/<n>_Parliament.csv                     (unless --no-split)
- harmonize_report_<timestamp>.json                   dropped files/rows, join diagnostics,
                                                      party normalization gaps, invariant checks

Settings not given on the command line come from EC_* environment variables or .env.
"""

from __future__ import annotations

import argparse

from loguru import logger

from ec_harmonize.core.logging import setup_logging
from ec_harmonize.core.settings import get_settings
from ec_harmonize.pipeline import run_all


def main(argv=None) -> int:
    ap = argparse.ArgumentParser(description="Harmonize Elections Canada poll-by-poll results.")
    ap.add_argument("--data-root", default=None, help="Folder containing the 'Parliament <n>' folders")
    ap.add_argument("--output-root", default=None, help="Where to write the canonical table and run report")
    ap.add_argument("--parliaments", nargs="*", type=int, default=None, help="Optional list of parliaments to process (36-43)")
    ap.add_argument("--max-workers", type=int, default=None, help="Eras processed concurrently (default: 1)")
    ap.add_argument("--no-split", action="store_true", help="Do not write one file per parliament")
    ap.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING, ...")
    ap.add_argument("--log-dir", default=None, help="Also log to a rotating file in this folder")
    args = ap.parse_args(argv)

    settings = get_settings(
        data_root=args.data_root,
        output_root=args.output_root,
        parliaments=args.parliaments or None,
        max_workers=args.max_workers,
        split_by_parliament=False if args.no_split else None,
        log_level=args.log_level,
        log_dir=args.log_dir,
    )
    setup_logging(settings.log_level, settings.log_dir)

    result = run_all(
        settings.data_root,
        settings.output_root,
        parliaments=settings.parliaments,
        max_workers=settings.max_workers,
        split_by_parliament=settings.split_by_parliament,
    )
    logger.info(
        "Done: {} record(s), {} error entr(ies), {} party gap(s).",
        len(result.table),
        result.report.count(),
        len(result.report.gaps),
    )
    return 0 if len(result.table) else 1


if __name__ == "__main__":
    raise SystemExit(main())
