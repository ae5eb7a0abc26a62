"""
Command-line entry point for the table builder.

Examples:
  scs-build
  scs-build --source data/scottish_climate_survey_2024.xlsx --output data/scs_data_cleaned.csv
  scs-build --sheets T1 T3 T5 T7 T9 T11 --verbose
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from survey_core.config import OUTPUT_PATH, SHEETS, SOURCE_PATH
from survey_core.data import SurveyDataError, run_pipeline


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="scs-build",
        description="Build the cleaned long-format survey table from the survey workbook.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__.split("Examples:", 1)[1] if __doc__ else None,
    )
    parser.add_argument(
        "--source", "-s",
        type=Path,
        default=SOURCE_PATH,
        help=f"Survey workbook (default: {SOURCE_PATH})",
    )
    parser.add_argument(
        "--output", "-o",
        type=Path,
        default=OUTPUT_PATH,
        help=f"Cleaned CSV to write (default: {OUTPUT_PATH})",
    )
    parser.add_argument(
        "--sheets",
        nargs="+",
        default=list(SHEETS),
        metavar="SHEET",
        help=f"Question sheets, in output order (default: {' '.join(SHEETS)})",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Show debug logging",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if not args.source.exists():
        print(f"error: source workbook not found: {args.source}", file=sys.stderr)
        return 2

    try:
        path = run_pipeline(args.source, args.output, args.sheets)
    except SurveyDataError as exc:
        print(f"error: {exc}; nothing written", file=sys.stderr)
        return 1

    print(f"Wrote {path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
