"""Command-line entry point: score a CSV price history."""

import argparse
import json
import logging
import os
import sys
from typing import Any

import pandas as pd

from momentum_engine import ENGINE_VERSION, SCHEMA_VERSION
from momentum_engine.config import MLConfig, build_config
from momentum_engine.summary import momentum_summary
from momentum_engine.utils.series import looks_daily, slice_recent_years, standardize_closes

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_BAD_INPUT = 2


def _parse_horizons(text: str) -> tuple[int, ...]:
    try:
        return tuple(int(part) for part in text.split(",") if part.strip())
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"Invalid horizons '{text}': {e}") from e


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="momentum-engine",
        description="Score a daily close history with the multi-horizon momentum engine.",
    )
    parser.add_argument("path", help="CSV file with date and close columns")
    parser.add_argument("--ml", dest="ml_path", help="JSON file with an ML weight bundle")
    parser.add_argument(
        "--years",
        type=int,
        default=5,
        help="Keep only the last N years of history (default: 5, 0 = all)",
    )
    parser.add_argument(
        "--horizons",
        type=_parse_horizons,
        help="Comma-separated horizons (default: 5,10,20,40,80,160)",
    )
    parser.add_argument(
        "--series",
        action="store_true",
        help="Include every overlay and score series in the output",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {ENGINE_VERSION}")
    return parser


def load_ml_bundle(path: str) -> MLConfig | None:
    """Read an ML bundle from JSON; unreadable files are logged and ignored."""
    try:
        with open(path, encoding="utf-8") as fh:
            raw = json.load(fh)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(f"Ignoring ML bundle {path}: {e}")
        return None
    return MLConfig.from_dict(raw)


def run(args: argparse.Namespace) -> dict[str, Any]:
    """
    Load, prepare and score the price history described by args.

    Raises:
        OSError: if the CSV cannot be read
        ValueError: on an invalid config or series
    """
    history = standardize_closes(pd.read_csv(args.path))
    if not history.empty and not looks_daily(history["date"].tolist()):
        logger.warning(f"{args.path} does not look like daily bars; scores assume equal spacing")
    history = slice_recent_years(history, args.years)

    overrides: dict[str, Any] = {}
    if args.horizons is not None:
        overrides["horizons"] = args.horizons
    if args.ml_path:
        overrides["ml"] = load_ml_bundle(args.ml_path)
    config = build_config(overrides)

    return momentum_summary(
        history["close"].to_numpy(),
        dates=history["date"].tolist(),
        config=config,
        include_series=args.series,
    )


def main(argv: list[str] | None = None) -> int:
    """Run the CLI."""
    # Configure logging
    log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(level=getattr(logging, log_level, logging.INFO))

    args = build_parser().parse_args(argv)
    logger.debug(f"momentum-engine v{ENGINE_VERSION} (schema v{SCHEMA_VERSION})")

    try:
        result = run(args)
    except (OSError, ValueError, pd.errors.ParserError) as e:
        logger.error(f"Cannot score {args.path}: {e}")
        return EXIT_BAD_INPUT

    print(json.dumps(result, indent=2, default=str))
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
