"""
validation.py
-------------
Range checks for the numeric form fields. Runs before any vector is built;
the first failing field (in RANGES order) is reported.
"""

from __future__ import annotations

import math
import dataclasses
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from penalty.config import FIELD_LABELS, NUMERIC_FIELDS, RANGES


@dataclass(frozen=True)
class ValidationResult:
    ok: bool
    field: Optional[str] = None
    bounds: Optional[Tuple[float, float]] = None
    message: str = ""
    values: Dict[str, float] = dataclasses.field(default_factory=dict)


def _parse_number(raw: Any) -> Optional[float]:
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, str):
        raw = raw.strip().replace(",", ".")
        if not raw:
            return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(value):
        return None
    return value


def _fail(name: str, bounds: Optional[Tuple[float, float]], reason: str) -> ValidationResult:
    label = FIELD_LABELS.get(name, name)
    message = f"{label} {reason}"
    if bounds is not None:
        lo, hi = bounds
        message += f" ({lo:g}-{hi:g})"
    return ValidationResult(ok=False, field=name, bounds=bounds, message=message)


def validate_inputs(
    raw: Mapping[str, Any],
    ranges: Mapping[str, Tuple[float, float]] = RANGES,
    required: Iterable[str] = tuple(NUMERIC_FIELDS),
) -> ValidationResult:
    """Bounded fields are checked in ranges order; required fields with no
    bounds entry must still parse as numbers."""
    values: Dict[str, float] = {}
    for name, bounds in ranges.items():
        lo, hi = bounds
        value = _parse_number(raw.get(name))
        if value is None:
            return _fail(name, bounds, "no es un número válido")
        if value < lo or value > hi:
            return _fail(name, bounds, "fuera de rango")
        values[name] = value
    for name in required:
        if name in values:
            continue
        value = _parse_number(raw.get(name))
        if value is None:
            return _fail(name, None, "no es un número válido")
        values[name] = value
    return ValidationResult(ok=True, values=values)
