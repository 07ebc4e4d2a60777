import math

import pytest

from coinage.models.tier import CurrencyTier, CurrencyValue
from coinage.systems.conversion import convert_all, convert_value
from coinage.systems.tier_store import TierStore


@pytest.fixture
def ladder():
    store = TierStore()
    store.add(CurrencyTier("Copper", 100, id="copper"))
    store.add(CurrencyTier("Silver", 50, id="silver"))
    store.add(CurrencyTier("Gold", 1, id="gold"))
    return store.sorted_view()


def as_map(conversions):
    return {tier.id: amount for tier, amount in conversions}


def test_chain_scenario(ladder):
    assert as_map(convert_all(ladder, "copper", 100))["silver"] == 1
    assert as_map(convert_all(ladder, "silver", 1))["gold"] == pytest.approx(0.02)
    assert as_map(convert_all(ladder, "gold", 1))["copper"] == 5000
    assert as_map(convert_all(ladder, "copper", 250))["gold"] == pytest.approx(0.05)


def test_source_tier_is_identity(ladder):
    for tier in ladder:
        for amount in (0, 1, 3.75, -12):
            assert as_map(convert_all(ladder, tier.id, amount))[tier.id] == amount


def test_round_trip_through_other_tier(ladder):
    for source in ladder:
        for target in ladder:
            there = convert_value(ladder, CurrencyValue(source.id, 123.45), target.id)
            back = convert_value(ladder, CurrencyValue(target.id, there), source.id)
            assert back == pytest.approx(123.45)


def test_output_follows_input_order(ladder):
    shuffled = [ladder[2], ladder[0], ladder[1]]
    result = convert_all(shuffled, "silver", 2)
    assert [c.tier.id for c in result] == ["gold", "copper", "silver"]
    assert [c.amount for c in result] == [pytest.approx(0.04), 200, 2]


def test_unknown_source_gives_empty_result(ladder):
    assert convert_all(ladder, "platinum", 10) == []


def test_single_tier_only_identity():
    only = [CurrencyTier("Shell", 1, order=0, id="shell")]
    assert convert_all(only, "shell", 7) == [(only[0], 7)]


def test_highest_tier_rate_is_never_used(ladder):
    ladder[2].conversion_to_next = 0
    assert as_map(convert_all(ladder, "copper", 5000))["gold"] == pytest.approx(1)
    assert as_map(convert_all(ladder, "gold", 1))["copper"] == 5000


def test_missing_rung_is_skipped():
    tiers = [
        CurrencyTier("Copper", 10, order=0, id="c"),
        CurrencyTier("Gold", 1, order=2, id="g"),
    ]
    # Order 1 is empty, so only Copper's rate applies.
    assert as_map(convert_all(tiers, "c", 100))["g"] == 10
    assert as_map(convert_all(tiers, "g", 1))["c"] == 10


def test_duplicate_order_uses_first_tier():
    tiers = [
        CurrencyTier("Copper", 10, order=0, id="c"),
        CurrencyTier("Tin", 4, order=0, id="t"),
        CurrencyTier("Silver", 1, order=1, id="s"),
    ]
    assert as_map(convert_all(tiers, "t", 20))["s"] == 2


def test_results_are_reproducible(ladder):
    first = [c.amount for c in convert_all(ladder, "copper", 0.1)]
    second = [c.amount for c in convert_all(ladder, "copper", 0.1)]
    assert first == second


def test_convert_value_matches_convert_all(ladder):
    expected = as_map(convert_all(ladder, "copper", 333.3))
    for tier in ladder:
        assert convert_value(ladder, CurrencyValue("copper", 333.3), tier.id) == expected[tier.id]


def test_convert_value_unknown_ids(ladder):
    assert convert_value(ladder, CurrencyValue("nope", 1), "gold") is None
    assert convert_value(ladder, CurrencyValue("gold", 1), "nope") is None


def test_invalid_rates_are_not_rejected():
    tiers = [
        CurrencyTier("Copper", 0, order=0, id="c"),
        CurrencyTier("Silver", -2, order=1, id="s"),
        CurrencyTier("Gold", 1, order=2, id="g"),
    ]
    assert as_map(convert_all(tiers, "c", 5))["s"] == math.inf
    assert as_map(convert_all(tiers, "c", -5))["s"] == -math.inf
    assert math.isnan(as_map(convert_all(tiers, "c", 0))["s"])
    assert as_map(convert_all(tiers, "s", 3))["g"] == -1.5
