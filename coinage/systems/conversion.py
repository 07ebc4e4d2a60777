"""
Currency conversion across an ordered tier ladder.

Each tier's conversion_to_next says how many of it make one of the tier
ranked directly above. Converting upward divides by each rung's rate,
converting downward multiplies:

    Copper (100) -> Silver (50) -> Gold
    250 copper = 250 / 100 / 50 = 0.05 gold
    1 gold     = 1 * 100 * 50   = 5000 copper

No rounding is applied here; formatting for display is the caller's job.
"""
import logging
import math
from typing import Dict, Iterable, List, NamedTuple, Optional, Sequence

from coinage.models.tier import CurrencyTier, CurrencyValue

logger = logging.getLogger(__name__)


class Conversion(NamedTuple):
    tier: CurrencyTier
    amount: float


def _index_by_order(tiers: Iterable[CurrencyTier]) -> Dict[int, CurrencyTier]:
    """Map order -> tier. The first tier seen at an order wins."""
    by_order: Dict[int, CurrencyTier] = {}
    for tier in tiers:
        by_order.setdefault(tier.order, tier)
    return by_order


def _divide(amount: float, rate: float) -> float:
    # IEEE division: a zero rate gives a signed infinity (NaN for 0 / 0).
    try:
        return amount / rate
    except ZeroDivisionError:
        if amount == 0 or math.isnan(amount):
            return math.nan
        return math.copysign(math.inf, amount) * math.copysign(1.0, rate)


def _walk(by_order: Dict[int, CurrencyTier], amount: float,
          source: CurrencyTier, target: CurrencyTier) -> float:
    """
    Convert `amount` of `source` into `target` one rung at a time.

    A rung with no tier at its order is skipped.
    """
    if target.id == source.id:
        return amount

    converted = amount
    if target.order > source.order:
        for order in range(source.order, target.order):
            rung = by_order.get(order)
            if rung is not None:
                converted = _divide(converted, rung.conversion_to_next)
    elif target.order < source.order:
        for order in range(target.order, source.order):
            rung = by_order.get(order)
            if rung is not None:
                converted = converted * rung.conversion_to_next
    return converted


def _find(tiers: Iterable[CurrencyTier], tier_id: str) -> Optional[CurrencyTier]:
    for tier in tiers:
        if tier.id == tier_id:
            return tier
    return None


def convert_all(tiers: Sequence[CurrencyTier], from_tier_id: str, amount: float) -> List[Conversion]:
    """
    Convert an amount held in one tier into every tier of the ladder.

    Args:
        tiers: The ladder, in any order. Results follow this order.
        from_tier_id: Id of the tier `amount` is expressed in
        amount: Any number; it is not validated

    Returns:
        list of Conversion(tier, amount), one per input tier, or an empty
        list if `from_tier_id` is not in `tiers`
    """
    source = _find(tiers, from_tier_id)
    if source is None:
        logger.debug(f"[CONVERT] Unknown source tier {from_tier_id!r}")
        return []

    by_order = _index_by_order(tiers)
    return [Conversion(tier, _walk(by_order, amount, source, tier)) for tier in tiers]


def convert_value(tiers: Sequence[CurrencyTier], value: CurrencyValue, to_tier_id: str) -> Optional[float]:
    """
    Convert a single CurrencyValue into another tier.

    Returns None if either tier id is unknown. Agrees exactly with the
    matching entry of convert_all().
    """
    source = _find(tiers, value.tier_id)
    target = _find(tiers, to_tier_id)
    if source is None or target is None:
        return None
    return _walk(_index_by_order(tiers), value.amount, source, target)
