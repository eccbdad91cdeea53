"""Gas mix composition rules.

Each gas mix category constrains the fraction of oxygen (FO2). The category
check is registered first and the universal 0.04-1.0 check second, on the same
field, so when both fail the universal message is the last one registered and
is the one shown to the diver.
"""

from __future__ import annotations

from .validator import Validator, between

FO2_FIELD = "fo2"

UNIVERSAL_FO2_MIN = 0.04
UNIVERSAL_FO2_MAX = 1.0

# Inclusive (low, high) FO2 bounds keyed by lower-cased gas mix name.
GAS_MIX_FO2_BOUNDS: dict[str, tuple[float, float]] = {
    "air": (0.21, 0.21),
    "oxygen": (1.0, 1.0),
    "nitrox": (0.21, 0.60),
    "heliox": (0.04, 0.60),
    "trimix": (0.04, 0.60),
}

# Tolerance for comparing fractions submitted through forms.
_EPSILON = 1e-9


def _within(value: float, low: float, high: float) -> bool:
    return between(value, low - _EPSILON, high + _EPSILON)


def category_message(gas_mix_name: str, low: float, high: float) -> str:
    if low == high:
        return f"FO2 must be exactly {low:g} for {gas_mix_name}"
    return f"FO2 must be between {low:g} and {high:g} inclusive for {gas_mix_name}"


UNIVERSAL_MESSAGE = f"FO2 must be between {UNIVERSAL_FO2_MIN:g} and {UNIVERSAL_FO2_MAX:g} inclusive"


def check_gas_mix(v: Validator, gas_mix_name: str | None, fo2: float | None) -> None:
    """Register the category and universal FO2 checks, in that order."""
    if fo2 is None:
        v.add_field_error(FO2_FIELD, "This field cannot be blank")
        return

    bounds = GAS_MIX_FO2_BOUNDS.get((gas_mix_name or "").strip().lower())
    if bounds is not None:
        low, high = bounds
        v.check_field(_within(fo2, low, high), FO2_FIELD, category_message(gas_mix_name or "", low, high))

    v.check_field(_within(fo2, UNIVERSAL_FO2_MIN, UNIVERSAL_FO2_MAX), FO2_FIELD, UNIVERSAL_MESSAGE)
