"""Metadata blocks for engine payloads."""

from typing import Any

from momentum_engine import ENGINE_VERSION, SCHEMA_VERSION


def build_meta(tool: str, duration_ms: float | None = None) -> dict[str, Any]:
    """
    Build standard metadata block for payloads.

    Args:
        tool: Name of the operation producing this payload
        duration_ms: Execution time in milliseconds (optional)

    Returns:
        Metadata dict with version info
    """
    meta: dict[str, Any] = {
        "engine_version": ENGINE_VERSION,
        "schema_version": SCHEMA_VERSION,
        "tool": tool,
    }
    if duration_ms is not None:
        meta["duration_ms"] = round(duration_ms, 1)
    return meta


def build_ml_provenance(ml: Any, applied: bool) -> dict[str, Any]:
    """
    Describe the ML bundle behind a composite.

    Args:
        ml: MLConfig or None
        applied: Whether the bundle passed its confidence gate

    Returns:
        Provenance dict; source is "rule_based" without an applied bundle
    """
    prov: dict[str, Any] = {
        "source": "ml" if applied else "rule_based",
        "applied": applied,
        "confidence": None,
        "min_confidence": None,
        "as_of": None,
    }
    if ml is not None:
        prov["confidence"] = ml.confidence
        prov["min_confidence"] = ml.min_confidence
        prov["as_of"] = ml.as_of
        if not applied:
            prov["warnings"] = ["ml_below_confidence"]

    # Ensure warnings list exists
    prov.setdefault("warnings", [])
    return prov
