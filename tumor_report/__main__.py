"""CLI entry point: python -m tumor_report"""

import argparse
import sys

from tumor_report.config import DEFAULT_OUTPUT_DIR, DEFAULT_SCALE_FIT, SCALE_FIT_MODES
from tumor_report.pipeline import TumorReportPipeline


def main(argv: list[str] | None = None):
    parser = argparse.ArgumentParser(
        prog="tumor_report",
        description=(
            "Breast tumor classifier comparison - decision tree, "
            "bagging / random forest and KNN on the diagnostic CSV."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  python -m tumor_report data.csv\n"
            "  python -m tumor_report data.csv --output-dir ./results\n"
            "  python -m tumor_report data.csv --scale-on train --no-plots\n"
        ),
    )

    parser.add_argument(
        "csv_path",
        help="Path to the diagnostic CSV (id, diagnosis, *_mean columns)",
    )
    parser.add_argument(
        "--output-dir",
        type=str,
        default=DEFAULT_OUTPUT_DIR,
        help=f"Directory for plots and report.json (default: {DEFAULT_OUTPUT_DIR})",
    )
    parser.add_argument(
        "--scale-on",
        type=str,
        default=DEFAULT_SCALE_FIT,
        choices=list(SCALE_FIT_MODES),
        help=(
            "Rows used to fit the min-max scaler: 'full' reproduces the "
            "reference report, 'train' avoids test-set leakage "
            f"(default: {DEFAULT_SCALE_FIT})"
        ),
    )
    parser.add_argument(
        "--no-plots",
        action="store_true",
        help="Skip writing PNG figures",
    )

    args = parser.parse_args(argv)

    pipeline = TumorReportPipeline(
        csv_path=args.csv_path,
        output_dir=args.output_dir,
        scale_fit=args.scale_on,
        make_plots=not args.no_plots,
    )

    try:
        pipeline.run()
    except Exception as e:
        print(f"\nPipeline failed: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
