"""Resolution of per-hiree overrides against company defaults.

A hiree override is either ``DEFAULT`` (no override row, use the company
value) or an explicit custom value. Rates fall back to the company base rate;
gear requirement falls back to *required*.
"""

import math
import re
from dataclasses import dataclass

_DECIMAL_PREFIX = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


@dataclass(frozen=True)
class UseDefault:
    pass


DEFAULT = UseDefault()


@dataclass(frozen=True)
class CustomRate:
    rate: float
    enabled: bool = True


@dataclass(frozen=True)
class GearRequirement:
    required: bool
    notes: str = ""


RateOverride = UseDefault | CustomRate
GearOverride = UseDefault | GearRequirement


def parse_decimal_or_zero(value) -> float:
    """Lenient decimal parsing: leading numeric prefix, else 0.

    ``"120"`` -> 120.0, ``"99.5/hr"`` -> 99.5, ``"$120"`` -> 0.0, None -> 0.0.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        match = _DECIMAL_PREFIX.match(str(value))
        if not match:
            return 0.0
        number = float(match.group(1))
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


def _resolve_rate(base_rate, override: RateOverride) -> float:
    if isinstance(override, CustomRate) and override.enabled and override.rate > 0:
        return float(override.rate)
    return parse_decimal_or_zero(base_rate)


def resolve_flat_service_rate(service, override: RateOverride = DEFAULT) -> float:
    return _resolve_rate(service.rate, override)


def resolve_tiered_rate(tiered_rate, override: RateOverride = DEFAULT) -> float:
    return _resolve_rate(tiered_rate.rate, override)


def resolve_gear_required(item, override: GearOverride = DEFAULT) -> bool:
    # Custom gear carries its own flag and never has an override row
    if item.is_custom:
        return bool(item.is_required)
    if isinstance(override, GearRequirement):
        return override.required
    return True


def resolve_gear_notes(item, override: GearOverride = DEFAULT) -> str:
    if not item.is_custom and isinstance(override, GearRequirement):
        return override.notes or ""
    return item.notes or ""


def rate_override_from_row(row) -> RateOverride:
    if row is None:
        return DEFAULT
    return CustomRate(rate=parse_decimal_or_zero(row.custom_rate), enabled=bool(row.is_enabled))


def gear_override_from_row(row) -> GearOverride:
    if row is None:
        return DEFAULT
    return GearRequirement(required=bool(row.is_required), notes=row.notes or "")
