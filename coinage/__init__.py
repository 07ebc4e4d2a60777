"""
Currency tier engine for game configuration.

This package handles ordered currency tiers, conversion between them, and
validation of tier data.
"""

from coinage.models.tier import CurrencyTier, CurrencyValue, new_tier_id
from coinage.systems.tier_store import TierStore, DuplicateTierError
from coinage.systems.conversion import Conversion, convert_all, convert_value
from coinage.systems.validation import (
    TierForm,
    ValidationIssue,
    ValidationReport,
    validate_tier_form,
    check_tier_ordering,
    check_value_references,
    validate_tiers,
)

__all__ = [
    "CurrencyTier",
    "CurrencyValue",
    "new_tier_id",
    "TierStore",
    "DuplicateTierError",
    "Conversion",
    "convert_all",
    "convert_value",
    "TierForm",
    "ValidationIssue",
    "ValidationReport",
    "validate_tier_form",
    "check_tier_ordering",
    "check_value_references",
    "validate_tiers",
]
