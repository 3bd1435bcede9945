"""Multi-horizon momentum scoring engine."""

import os


def get_engine_version() -> str:
    """Get version with fallback for dev mode."""
    if version := os.environ.get("ENGINE_VERSION"):
        return version
    try:
        from importlib.metadata import version as pkg_version

        return pkg_version("momentum-engine")
    except Exception:
        return "dev"


ENGINE_VERSION = get_engine_version()
# Bump when the summary payload changes materially (new fields, renamed fields, structure changes)
# v1: Initial schema
SCHEMA_VERSION = "1"

from momentum_engine.config import (  # noqa: E402
    IndicatorWeights,
    MLConfig,
    MomentumConfig,
    RegimeBucket,
    build_config,
)
from momentum_engine.engine import IndicatorSeries, compute_momentum  # noqa: E402
from momentum_engine.utils.validators import InvalidSeriesError  # noqa: E402

__all__ = [
    "ENGINE_VERSION",
    "SCHEMA_VERSION",
    "IndicatorSeries",
    "IndicatorWeights",
    "InvalidSeriesError",
    "MLConfig",
    "MomentumConfig",
    "RegimeBucket",
    "build_config",
    "compute_momentum",
]
