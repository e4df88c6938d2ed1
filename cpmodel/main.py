#!/usr/bin/env python3
"""
cpmodel command line: read (x, y) columns, fit a changepoint model, print it.

By default the fitted coefficients are printed one per line in the order of
the model's output contract; with -c the model's polyline vertices are
printed as tab-separated x/y pairs instead.
"""

import json
import logging
import os
import sys
from dataclasses import asdict, replace
from typing import List, Optional

from .config import SearchParams, get_default_params
from .models import MODEL_SHAPE_ALIASES, ModelShape
from .point_reader import PointReader
from .runner import FitResult, fit

# Configure logging for the command line only; library modules just log.
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def _build_cli_parser():
    import argparse

    model_choices = [s.value for s in ModelShape] + list(MODEL_SHAPE_ALIASES)

    parser = argparse.ArgumentParser(
        prog="cpmodel",
        description="Fit a changepoint (piecewise-linear) regression model to x/y data.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "file", nargs="?", help="Input file; use '-' to read standard input."
    )
    parser.add_argument(
        "-p",
        "--model",
        default="4",
        choices=model_choices,
        metavar="MODEL",
        help=f"Model type: {', '.join(model_choices)}.",
    )
    parser.add_argument(
        "-c",
        "--coords",
        action="store_true",
        help="Print model coordinates, not coefficients.",
    )
    parser.add_argument(
        "-d",
        "--delimiter",
        default=None,
        help="Delimiter to split lines by (default: whitespace).",
    )
    parser.add_argument("--skip", type=int, default=0, help="Skip n header records.")
    parser.add_argument("--x-col", type=int, default=1, help="1-based X column.")
    parser.add_argument("--y-col", type=int, default=2, help="1-based Y column.")
    parser.add_argument(
        "--step", type=float, default=None, help="Breakpoint search step."
    )
    parser.add_argument(
        "--max-workers",
        type=int,
        default=None,
        help="Worker threads for candidate evaluation (1 = sequential).",
    )
    parser.add_argument(
        "--print-defaults",
        action="store_true",
        help="Print default search parameters and exit.",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Show full tracebacks and debug logging (also CPMODEL_DEBUG=1).",
    )
    return parser


def _args_to_params(args) -> SearchParams:
    params = get_default_params()
    overrides = {}
    if args.step is not None:
        overrides["step"] = args.step
    if args.max_workers is not None:
        overrides["max_workers"] = args.max_workers
    return replace(params, **overrides) if overrides else params


def render_result(result: FitResult, x_min: float, x_max: float, coords: bool) -> List[str]:
    if coords:
        return [f"{x}\t{y}" for x, y in result.model_coordinates(x_min, x_max)]
    return [str(c) for c in result.coefficients]


def _defaults_payload(params: SearchParams) -> dict:
    payload = asdict(params)
    payload["four_param_bounds"] = params.four_param_bounds.name
    payload["five_param_bounds"] = params.five_param_bounds.name
    return payload


def run(argv: Optional[List[str]] = None) -> int:
    """Parse argv, fit, print. Returns the process exit code."""
    parser = _build_cli_parser()
    args = parser.parse_args(argv)

    debug_mode = bool(args.debug or os.getenv("CPMODEL_DEBUG", "") == "1")
    if debug_mode:
        logging.getLogger("cpmodel").setLevel(logging.DEBUG)

    try:
        if args.print_defaults:
            print(json.dumps(_defaults_payload(get_default_params()), indent=2))
            return 0

        if not args.file:
            print(
                "No input file was specified. Use '-' for standard input.",
                file=sys.stderr,
            )
            return 1

        params = _args_to_params(args)
        with PointReader(
            args.file,
            delimiter=args.delimiter,
            skip_rows=args.skip,
            x_col=args.x_col,
            y_col=args.y_col,
        ) as reader:
            points = reader.read_points()

        result = fit(points, args.model, params)
        xs = [p.x for p in points]
        for line in render_result(result, min(xs), max(xs), args.coords):
            print(line)
        return 0
    except (FileNotFoundError, ValueError, TypeError) as e:
        # Concise, user-facing errors for user-correctable problems
        logger.debug("User-facing error: %s", e)
        print(f"Error: {e}", file=sys.stderr)
        return 2
    except Exception as e:
        if debug_mode:
            logger.exception("Unhandled exception during execution")
        else:
            print(f"Unexpected error: {e}", file=sys.stderr)
            print(
                "Run with --debug or set CPMODEL_DEBUG=1 to see the full traceback.",
                file=sys.stderr,
            )
        return 1


def main() -> None:
    """CLI entry point."""
    sys.exit(run(sys.argv[1:]))


if __name__ == "__main__":
    main()
