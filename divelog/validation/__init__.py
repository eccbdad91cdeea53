"""
Input validation for dive log entities.

- validator: the Validator collector and check helpers
- gas_mix: FO2 rules per gas mix category
- forms: raw input shapes
- rules: one ruleset per entity
"""

from __future__ import annotations

from .forms import BuddyForm, CertificationForm, DiveForm, DiveSiteForm, OperatorForm, TripForm
from .gas_mix import GAS_MIX_FO2_BOUNDS, check_gas_mix
from .rules import (
    check_price,
    validate_buddy,
    validate_certification,
    validate_dive,
    validate_dive_site,
    validate_operator,
    validate_trip,
)
from .validator import ValidationFailure, Validator

__all__ = [
    # Collector
    "Validator",
    "ValidationFailure",
    # Forms
    "BuddyForm",
    "CertificationForm",
    "DiveForm",
    "DiveSiteForm",
    "OperatorForm",
    "TripForm",
    # Rules
    "GAS_MIX_FO2_BOUNDS",
    "check_gas_mix",
    "check_price",
    "validate_buddy",
    "validate_certification",
    "validate_dive",
    "validate_dive_site",
    "validate_operator",
    "validate_trip",
]
