"""
Validation for currency tiers.

Two layers:
- validate_tier_form() checks one add/edit form and returns field -> message.
- validate_tiers() checks a whole ladder (rates, names, ordering, references
  from other configuration) and returns a ValidationReport.
"""
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional

from coinage.models.tier import CurrencyTier, CurrencyValue, RECORD_RATE_KEY

MIN_CONVERSION_RATE = 1

NAME_REQUIRED = "Name is required"
RATE_REQUIRED = "Conversion rate is required"
RATE_TOO_LOW = f"Must be at least {MIN_CONVERSION_RATE}"


def coerce_number(value: Any) -> Optional[float]:
    """Read a finite number from form or query input. Returns None otherwise."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = value
    else:
        try:
            number = float(str(value).strip())
        except ValueError:
            return None
    # NaN and infinities cannot be written as JSON
    if not math.isfinite(number):
        return None
    return number


@dataclass
class TierForm:
    """The fields a user edits for one tier."""
    name: str = ""
    conversion_to_next: Any = MIN_CONVERSION_RATE

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'TierForm':
        return cls(
            name=data.get("name", ""),
            conversion_to_next=data.get(RECORD_RATE_KEY, data.get("conversion_to_next")),
        )

    @classmethod
    def from_tier(cls, tier: CurrencyTier) -> 'TierForm':
        return cls(name=tier.name, conversion_to_next=tier.conversion_to_next)


def validate_tier_form(form: TierForm, fields: Optional[Iterable[str]] = None) -> Dict[str, str]:
    """
    Validate a tier form.

    Args:
        form: The submitted values
        fields: Only check these fields ("name", "conversion_to_next").
            Defaults to all of them, as for a new tier.

    Returns:
        dict: field -> message for every failing field (empty when valid)
    """
    checked = set(fields) if fields is not None else {"name", "conversion_to_next"}
    errors: Dict[str, str] = {}

    if "name" in checked:
        if not isinstance(form.name, str) or not form.name.strip():
            errors["name"] = NAME_REQUIRED

    if "conversion_to_next" in checked:
        rate = coerce_number(form.conversion_to_next)
        if rate is None:
            errors["conversion_to_next"] = RATE_REQUIRED
        elif rate < MIN_CONVERSION_RATE:
            errors["conversion_to_next"] = RATE_TOO_LOW

    return errors


# --- Ladder validation ---

@dataclass
class ValidationIssue:
    severity: str  # "error" or "warning"
    category: str
    message: str
    entity_type: Optional[str] = None
    entity_id: Optional[str] = None
    entity_name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {"severity": self.severity, "category": self.category, "message": self.message}
        if self.entity_type:
            data["entityType"] = self.entity_type
            data["entityId"] = self.entity_id
            data["entityName"] = self.entity_name
        return data


@dataclass
class ValidationReport:
    errors: List[ValidationIssue] = field(default_factory=list)
    warnings: List[ValidationIssue] = field(default_factory=list)
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    @property
    def is_valid(self) -> bool:
        """Warnings do not make a ladder invalid."""
        return not self.errors

    def to_dict(self) -> Dict[str, Any]:
        return {
            "isValid": self.is_valid,
            "errors": [issue.to_dict() for issue in self.errors],
            "warnings": [issue.to_dict() for issue in self.warnings],
            "timestamp": self.timestamp,
        }


def check_tier_fields(tiers: Iterable[CurrencyTier]) -> List[ValidationIssue]:
    """Report tiers whose stored name or rate would fail the edit form."""
    issues = []
    for tier in tiers:
        for field_name, message in validate_tier_form(TierForm.from_tier(tier)).items():
            issues.append(ValidationIssue(
                severity="error",
                category="Currency Validation",
                message=f'Currency tier "{tier.name}" {field_name}: {message}',
                entity_type="currencyTier",
                entity_id=tier.id,
                entity_name=tier.name,
            ))
    return issues


def check_tier_ordering(tiers: Iterable[CurrencyTier]) -> List[ValidationIssue]:
    """
    Report duplicate ranks, gaps, and a ladder that does not start at 0.

    These are warnings: conversion skips missing rungs, so a gapped ladder
    still converts, just not the way the author probably meant.
    """
    orders = [tier.order for tier in tiers]
    warnings = []
    if not orders:
        return warnings

    if len(orders) != len(set(orders)):
        warnings.append(ValidationIssue(
            severity="warning",
            category="Data Consistency",
            message="Currency tiers have duplicate order values",
        ))

    sorted_orders = sorted(set(orders))
    if sorted_orders[0] != 0:
        warnings.append(ValidationIssue(
            severity="warning",
            category="Data Consistency",
            message=f"Currency tier ordering starts at {sorted_orders[0]} instead of 0",
        ))
    for lower, upper in zip(sorted_orders, sorted_orders[1:]):
        if upper - lower > 1:
            warnings.append(ValidationIssue(
                severity="warning",
                category="Data Consistency",
                message=f"Currency tier ordering has gaps between {lower} and {upper}",
            ))
    return warnings


def check_value_references(values: Mapping[str, CurrencyValue],
                           tiers: Iterable[CurrencyTier]) -> List[ValidationIssue]:
    """
    Report currency values that point at a tier which does not exist.

    Args:
        values: label -> CurrencyValue, e.g. {'Material "Iron" level 2': value}
        tiers: The ladder
    """
    tier_ids = {tier.id for tier in tiers}
    return [
        ValidationIssue(
            severity="error",
            category="Reference Validation",
            message=f"{label} references non-existent currency tier: {value.tier_id}",
        )
        for label, value in values.items()
        if value.tier_id not in tier_ids
    ]


def validate_tiers(tiers: Iterable[CurrencyTier],
                   values: Optional[Mapping[str, CurrencyValue]] = None) -> ValidationReport:
    """Run every ladder check and collect the results into one report."""
    tiers = list(tiers)
    report = ValidationReport()
    report.errors.extend(check_tier_fields(tiers))
    if values:
        report.errors.extend(check_value_references(values, tiers))
    report.warnings.extend(check_tier_ordering(tiers))
    return report
