"""
Command-line entry point: run the CPS wage and labor-force report.

Loads the extract, runs the pipeline and writes CSV tables plus
``report.html`` to the output directory.
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Optional

from .config import (
    DATA_SOURCE,
    DEFAULT_SEP,
    GLOBAL_YEAR_MAX,
    GLOBAL_YEAR_MIN,
    REPORT_DIR,
)
from .errors import CPSReportError
from .pipeline import run_pipeline
from .report import write_report

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Weighted CPS wage and labor-force participation report."
    )
    parser.add_argument(
        "--source",
        default=DATA_SOURCE,
        help="Path or URL to the CPS extract CSV (default: $CPS_DATA_SOURCE or data/).",
    )
    parser.add_argument(
        "--sep",
        default=DEFAULT_SEP,
        help=f"Delimiter used in the source file (default: '{DEFAULT_SEP}').",
    )
    parser.add_argument(
        "--year-min",
        type=int,
        default=None,
        help=f"Lower bound year to keep (data covers {GLOBAL_YEAR_MIN} onwards).",
    )
    parser.add_argument(
        "--year-max",
        type=int,
        default=None,
        help=f"Upper bound year to keep (data covers up to {GLOBAL_YEAR_MAX}).",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Abort on the first malformed record instead of excluding it.",
    )
    parser.add_argument(
        "--out-dir",
        type=Path,
        default=REPORT_DIR,
        help="Directory for the report and CSV tables (default: $CPS_REPORT_DIR or output/).",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: INFO).",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        payload = run_pipeline(
            source=args.source,
            sep=args.sep,
            year_min=args.year_min,
            year_max=args.year_max,
            errors="raise" if args.strict else "coerce",
        )
    except (CPSReportError, ValueError) as exc:
        logger.error("Report aborted: %s", exc)
        return 1

    report_path = write_report(payload, args.out_dir)

    print("\n--- CPS REPORT COMPLETE ---")
    print(
        f"Years: {payload['year_min']}–{payload['year_max']} | "
        f"Records: {payload['n_records']} | Malformed: {payload['n_malformed']}"
    )
    print(f"\nSaved outputs to {args.out_dir}/:")
    print(f"  - {report_path.name}")
    print("\nSummary head:")
    print(payload["summary"].head(8))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
