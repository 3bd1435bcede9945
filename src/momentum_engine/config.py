"""Configuration values for the momentum engine.

Every field has a default; callers override any subset with build_config().
The optional ML bundle is parsed defensively: malformed content degrades to
"no ML" at whatever granularity it fails, it never raises.
"""

import dataclasses
import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from momentum_engine.utils.validators import check_fraction, check_horizons, check_positive

logger = logging.getLogger(__name__)

DEFAULT_HORIZONS: tuple[int, ...] = (5, 10, 20, 40, 80, 160)
DEFAULT_MIN_CONFIDENCE = 0.6

# Reserved weight-table entry, tried after the bucket and the configured fallback
DEFAULT_BUCKET_NAME = "default"


class RegimeBucket(str, Enum):
    """Coarse market regime used to pick indicator weights."""

    TREND = "trend"
    RANGE = "range"
    EXTREME = "extreme"

    @classmethod
    def parse(cls, name: Any) -> "RegimeBucket | None":
        """Map a bundle key to a bucket; unknown names (and "default") give None."""
        if isinstance(name, cls):
            return name
        if not isinstance(name, str):
            return None
        try:
            return cls(name.strip().lower())
        except ValueError:
            return None


def _finite_or_zero(value: Any) -> float:
    try:
        f = float(value)
    except (TypeError, ValueError):
        return 0.0
    return f if math.isfinite(f) else 0.0


@dataclass(frozen=True)
class IndicatorWeights:
    """Mixing weights for the band, oscillator (rsi) and impulse (macd) scores."""

    band: float = 0.0
    rsi: float = 0.0
    macd: float = 0.0

    @classmethod
    def from_mapping(cls, raw: Any) -> "IndicatorWeights | None":
        """Build from a {band, rsi, macd} mapping; missing or junk entries become 0."""
        if not isinstance(raw, Mapping):
            return None
        return cls(
            band=_finite_or_zero(raw.get("band")),
            rsi=_finite_or_zero(raw.get("rsi")),
            macd=_finite_or_zero(raw.get("macd")),
        )

    def normalized(self) -> "IndicatorWeights":
        """
        Renormalize so the weights sum to 1.

        Non-finite entries count as 0. If the sum is not positive the
        sanitized weights are returned as they are.
        """
        band = _finite_or_zero(self.band)
        rsi = _finite_or_zero(self.rsi)
        macd = _finite_or_zero(self.macd)
        total = band + rsi + macd
        if total <= 0:
            return IndicatorWeights(band=band, rsi=rsi, macd=macd)
        return IndicatorWeights(band=band / total, rsi=rsi / total, macd=macd / total)

    def as_dict(self) -> dict[str, float]:
        return {"band": self.band, "rsi": self.rsi, "macd": self.macd}


def _coerce_weights(raw: Any) -> IndicatorWeights | None:
    if isinstance(raw, IndicatorWeights):
        return raw.normalized()
    weights = IndicatorWeights.from_mapping(raw)
    return weights.normalized() if weights is not None else None


def _coerce_min_confidence(raw: Any) -> float:
    try:
        parsed = float(raw)
    except (TypeError, ValueError):
        return DEFAULT_MIN_CONFIDENCE
    return parsed if math.isfinite(parsed) else DEFAULT_MIN_CONFIDENCE


def _coerce_horizon_weights(raw: Any) -> dict[int, float] | None:
    if not isinstance(raw, Mapping):
        return None
    horizon: dict[int, float] = {}
    for key, weight in raw.items():
        try:
            h = float(key)
        except (TypeError, ValueError):
            continue
        if not math.isfinite(h) or not h.is_integer():
            continue
        horizon[int(h)] = _finite_or_zero(weight)
    return horizon


@dataclass(frozen=True)
class MLConfig:
    """
    Externally trained, confidence-scored weight bundle.

    Construction sanitizes every field the way from_dict does. Weight
    triples (or plain {band, rsi, macd} mappings) are renormalized to sum
    to 1; junk values degrade instead of raising.
    """

    confidence: float | None = None
    min_confidence: float = DEFAULT_MIN_CONFIDENCE
    indicator: Mapping[RegimeBucket, IndicatorWeights] = field(default_factory=dict)
    default_weights: IndicatorWeights | None = None
    horizon: Mapping[int, float] | None = None
    apply_per_bar: bool = True
    bucket_fallback: RegimeBucket | None = None
    as_of: str | None = None

    def __post_init__(self) -> None:
        if self.confidence is not None:
            # Unparseable confidence fails the gate rather than passing it
            object.__setattr__(self, "confidence", _finite_or_zero(self.confidence))
        object.__setattr__(self, "min_confidence", _coerce_min_confidence(self.min_confidence))

        default_weights = _coerce_weights(self.default_weights)
        indicator: dict[RegimeBucket, IndicatorWeights] = {}
        raw_indicator = self.indicator if isinstance(self.indicator, Mapping) else {}
        for name, raw_weights in raw_indicator.items():
            weights = _coerce_weights(raw_weights)
            if weights is None:
                continue
            if isinstance(name, str) and name.strip().lower() == DEFAULT_BUCKET_NAME:
                if default_weights is None:
                    default_weights = weights
                continue
            bucket = RegimeBucket.parse(name)
            if bucket is None:
                logger.debug(f"Ignoring unknown regime bucket {name!r} in ML bundle")
                continue
            indicator[bucket] = weights
        object.__setattr__(self, "indicator", indicator)
        object.__setattr__(self, "default_weights", default_weights)

        object.__setattr__(self, "horizon", _coerce_horizon_weights(self.horizon))
        # Only an explicit false disables per-bar application
        object.__setattr__(self, "apply_per_bar", self.apply_per_bar is not False)
        object.__setattr__(self, "bucket_fallback", RegimeBucket.parse(self.bucket_fallback))
        if self.as_of is not None:
            object.__setattr__(self, "as_of", str(self.as_of))

    @property
    def is_confident(self) -> bool:
        """Confidence gate; a bundle without a confidence counts as fully confident."""
        confidence = 1.0 if self.confidence is None else self.confidence
        return confidence >= self.min_confidence

    @property
    def has_indicator_weights(self) -> bool:
        return bool(self.indicator) or self.default_weights is not None

    @classmethod
    def from_dict(cls, bundle: Any) -> "MLConfig | None":
        """
        Parse a raw bundle as produced by the training pipeline.

        Accepts camelCase keys (confidence, minConfidence, indicator, horizon,
        applyPerBar, bucketFallback, asOf) and their snake_case forms.

        Args:
            bundle: Decoded JSON object

        Returns:
            MLConfig, or None if the bundle is not a mapping
        """
        if isinstance(bundle, MLConfig):
            return bundle
        if not isinstance(bundle, Mapping):
            if bundle is not None:
                logger.debug(f"Ignoring ML bundle of type {type(bundle).__name__}")
            return None

        def pick(*keys: str) -> Any:
            for key in keys:
                if key in bundle:
                    return bundle[key]
            return None

        min_confidence = pick("minConfidence", "min_confidence")
        return cls(
            confidence=pick("confidence"),
            min_confidence=DEFAULT_MIN_CONFIDENCE if min_confidence is None else min_confidence,
            indicator=pick("indicator") or {},
            horizon=pick("horizon"),
            apply_per_bar=pick("applyPerBar", "apply_per_bar"),
            bucket_fallback=pick("bucketFallback", "bucket_fallback"),
            as_of=pick("asOf", "as_of"),
        )


@dataclass(frozen=True)
class MomentumConfig:
    """Immutable engine configuration. Defaults form the reference setup."""

    horizons: tuple[int, ...] = DEFAULT_HORIZONS
    weight_by_inverse_horizon: bool = True
    horizon_blend_equal_fraction: float = 0.4

    # Band scorer
    band_squash: float = 2.0
    band_extremity_gain: float = 0.6
    band_volatility_damping: float = 2.0

    # Oscillator scorer
    oscillator_slope_scale: float = 4.0
    oscillator_adaptive: bool = True
    oscillator_overbought: float = 70.0
    oscillator_oversold: float = 30.0
    oscillator_max_shift: float = 20.0
    oscillator_shift_gain: float = 10.0

    # Trend-impulse scorer
    impulse_span_ratio: float = 4.0
    impulse_histogram_scale: float = 0.8
    impulse_signal_scale: float = 0.6
    impulse_distance_scale: float = 1.2
    impulse_edge_decay: float = 1.2

    # Regime caps on the reversion weight
    trend_strength_threshold: float = 0.30
    bandwidth_threshold: float = 0.08
    reversion_cap: float = 0.60
    reversion_cap_strong: float = 0.40

    # Agreement damping
    agreement_min_factor: float = 0.70
    agreement_threshold: float = 10.0

    # Soft normalization
    normalization_span: int = 50

    ml: MLConfig | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "horizons", check_horizons(self.horizons))
        object.__setattr__(
            self,
            "horizon_blend_equal_fraction",
            check_fraction("horizon_blend_equal_fraction", self.horizon_blend_equal_fraction),
        )
        for name in ("reversion_cap", "reversion_cap_strong", "agreement_min_factor"):
            object.__setattr__(self, name, check_fraction(name, getattr(self, name)))
        for name in (
            "band_squash",
            "oscillator_slope_scale",
            "impulse_span_ratio",
            "impulse_histogram_scale",
            "impulse_signal_scale",
            "impulse_distance_scale",
            "impulse_edge_decay",
            "normalization_span",
        ):
            check_positive(name, getattr(self, name))

        if self.ml is not None and not isinstance(self.ml, MLConfig):
            object.__setattr__(self, "ml", MLConfig.from_dict(self.ml))

    @property
    def reference_horizon(self) -> int | None:
        """Middle horizon (caller order) driving overlays and regime context."""
        if not self.horizons:
            return None
        return self.horizons[len(self.horizons) // 2]

    @property
    def active_ml(self) -> MLConfig | None:
        """The ML bundle if present and past its confidence gate."""
        if self.ml is not None and self.ml.is_confident:
            return self.ml
        return None


_CONFIG_FIELDS = frozenset(f.name for f in dataclasses.fields(MomentumConfig))


def build_config(
    overrides: Mapping[str, Any] | None = None,
    **kwargs: Any,
) -> MomentumConfig:
    """
    Build a fully populated config from a partial override.

    Args:
        overrides: Mapping of field name -> value
        **kwargs: Further field overrides (win over the mapping)

    Returns:
        MomentumConfig with defaults for every field not overridden

    Raises:
        ValueError: on unknown field names or invalid values
    """
    merged: dict[str, Any] = dict(overrides or {})
    merged.update(kwargs)

    unknown = set(merged) - _CONFIG_FIELDS
    if unknown:
        raise ValueError(f"Unknown config fields: {sorted(unknown)}")

    if "horizons" in merged:
        merged["horizons"] = tuple(merged["horizons"])
    if "ml" in merged and not isinstance(merged["ml"], MLConfig):
        merged["ml"] = MLConfig.from_dict(merged["ml"])

    return MomentumConfig(**merged)
