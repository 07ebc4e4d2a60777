"""
Tests for tier form validation and ladder consistency checks.
"""
import pytest

from coinage.models.tier import CurrencyTier, CurrencyValue
from coinage.systems.validation import (
    TierForm,
    check_tier_ordering,
    check_value_references,
    coerce_number,
    validate_tier_form,
    validate_tiers,
)


def test_valid_form_has_no_errors():
    assert validate_tier_form(TierForm("Copper", 100)) == {}
    assert validate_tier_form(TierForm("Copper", "12.5")) == {}


@pytest.mark.parametrize("name", ["", "   ", None])
def test_name_required(name):
    assert validate_tier_form(TierForm(name, 10)) == {"name": "Name is required"}


@pytest.mark.parametrize("rate", [None, "", "abc", float("nan"), True, "inf", "-inf", "1e400", float("inf")])
def test_rate_required(rate):
    errors = validate_tier_form(TierForm("Copper", rate))
    assert errors == {"conversion_to_next": "Conversion rate is required"}


@pytest.mark.parametrize("rate", [0, 0.5, -3, "0.99"])
def test_rate_minimum(rate):
    errors = validate_tier_form(TierForm("Copper", rate))
    assert errors == {"conversion_to_next": "Must be at least 1"}


def test_partial_form_checks_only_given_fields():
    form = TierForm("", 0)
    assert validate_tier_form(form, ["conversion_to_next"]) == {
        "conversion_to_next": "Must be at least 1"
    }
    assert validate_tier_form(form, []) == {}


def test_form_from_record():
    form = TierForm.from_dict({"name": "Gold", "conversionToNext": 3})
    assert form == TierForm("Gold", 3)


def test_coerce_number():
    assert coerce_number(4) == 4
    assert coerce_number(" 2.5 ") == 2.5
    assert coerce_number("x") is None
    assert coerce_number(False) is None


def test_contiguous_ladder_has_no_warnings():
    tiers = [CurrencyTier("A", 2, order=i) for i in range(3)]
    assert check_tier_ordering(tiers) == []
    assert check_tier_ordering([]) == []


def test_ordering_gaps_and_duplicates():
    tiers = [
        CurrencyTier("A", 2, order=1),
        CurrencyTier("B", 2, order=1),
        CurrencyTier("C", 2, order=4),
    ]
    messages = [issue.message for issue in check_tier_ordering(tiers)]
    assert messages == [
        "Currency tiers have duplicate order values",
        "Currency tier ordering starts at 1 instead of 0",
        "Currency tier ordering has gaps between 1 and 4",
    ]


def test_dangling_value_reference():
    tiers = [CurrencyTier("Copper", 10, order=0, id="copper")]
    values = {
        'Material "Iron" level 1': CurrencyValue("copper", 5),
        'Material "Iron" level 2': CurrencyValue("gold", 1),
    }
    issues = check_value_references(values, tiers)
    assert len(issues) == 1
    assert issues[0].message == 'Material "Iron" level 2 references non-existent currency tier: gold'
    assert issues[0].category == "Reference Validation"


def test_report_collects_errors_and_warnings():
    tiers = [
        CurrencyTier("Copper", 0, order=0, id="copper"),
        CurrencyTier("Gold", 1, order=2, id="gold"),
    ]
    report = validate_tiers(tiers)
    assert not report.is_valid
    assert len(report.errors) == 1
    assert report.errors[0].entity_id == "copper"
    assert len(report.warnings) == 1

    data = report.to_dict()
    assert data["isValid"] is False
    assert data["errors"][0]["entityType"] == "currencyTier"
    assert "entityType" not in data["warnings"][0]
    assert data["timestamp"]


def test_warnings_alone_keep_report_valid():
    tiers = [CurrencyTier("Copper", 10, order=1)]
    report = validate_tiers(tiers)
    assert report.is_valid
    assert report.warnings
