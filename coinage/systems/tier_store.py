"""
Tier Store - Holds the ordered currency ladder and keeps its ranking intact.

Every tier carries an `order` rank. After any add, delete, reorder or move
completes, the ranks in sorted_view() are exactly 0..N-1 in list position.

Lookups by unknown id are quiet no-ops: the caller owns the authoritative
list and is expected to check existence first.
"""
import logging
from typing import Any, Dict, Iterable, Iterator, List, Optional

from coinage.models.tier import CurrencyTier, RECORD_RATE_KEY

logger = logging.getLogger(__name__)


class DuplicateTierError(ValueError):
    """Raised when a tier id is added twice."""

    def __init__(self, tier_id: str):
        super().__init__(f"Currency tier id already exists: {tier_id}")
        self.tier_id = tier_id


def _record_order(value) -> Optional[int]:
    """Read an order from a record. Returns None unless it is an integer or integer string."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    try:
        return int(str(value).strip())
    except ValueError:
        logger.warning(f"[TIERS] Ignoring non-integer order {value!r} in loaded record")
        return None


class TierStore:
    """
    The ordered collection of currency tiers for one configuration.

    Owned by a single coordinating component (the editor service) and passed
    to whoever needs it. There is no shared module-level ladder.
    """

    def __init__(self, tiers: Optional[Iterable[CurrencyTier]] = None):
        self._tiers: List[CurrencyTier] = []
        for tier in tiers or []:
            self.add(tier)

    def __len__(self) -> int:
        return len(self._tiers)

    def __contains__(self, tier_id: object) -> bool:
        return self.get(tier_id) is not None

    def __iter__(self) -> Iterator[CurrencyTier]:
        return iter(self.sorted_view())

    def get(self, tier_id) -> Optional[CurrencyTier]:
        """Return the tier with this id, or None."""
        for tier in self._tiers:
            if tier.id == tier_id:
                return tier
        return None

    def sorted_view(self) -> List[CurrencyTier]:
        """Return the tiers ascending by order. Built fresh on every call."""
        return sorted(self._tiers, key=lambda t: t.order)

    # --- Mutations ---

    def add(self, tier: CurrencyTier) -> CurrencyTier:
        """
        Append a tier at the highest rank.

        Any order set by the caller is replaced with the current tier count.

        Raises:
            DuplicateTierError: if a tier with the same id is already stored
        """
        if self.get(tier.id) is not None:
            logger.warning(f"[TIERS] Rejected duplicate tier id {tier.id!r} ({tier.name})")
            raise DuplicateTierError(tier.id)

        tier.order = len(self._tiers)
        self._tiers.append(tier)
        logger.debug(f"[TIERS] Added {tier.name!r} at order {tier.order}")
        return tier

    def create_tier(self, name: str, conversion_to_next: float = 1) -> CurrencyTier:
        """Build a tier with a fresh id and append it."""
        return self.add(CurrencyTier(name=name, conversion_to_next=conversion_to_next))

    def update(self, tier_id: str, partial: Dict[str, Any]) -> bool:
        """
        Merge fields from `partial` into the tier with this id.

        Recognised keys: name, conversion_to_next (or conversionToNext), order.
        The id itself is never rewritten. Returns False if no tier matched.
        """
        tier = self.get(tier_id)
        if tier is None:
            logger.debug(f"[TIERS] Update ignored, unknown tier {tier_id!r}")
            return False

        if "name" in partial:
            tier.name = partial["name"]
        if "conversion_to_next" in partial:
            tier.conversion_to_next = partial["conversion_to_next"]
        elif RECORD_RATE_KEY in partial:
            tier.conversion_to_next = partial[RECORD_RATE_KEY]
        if "order" in partial:
            tier.order = partial["order"]

        logger.debug(f"[TIERS] Updated {tier_id!r}: {sorted(partial)}")
        return True

    def delete(self, tier_id: str) -> bool:
        """
        Remove the tier with this id and close the gap it leaves.

        Survivors keep their relative order and are renumbered 0..N-1.
        Returns False if no tier matched.
        """
        tier = self.get(tier_id)
        if tier is None:
            logger.debug(f"[TIERS] Delete ignored, unknown tier {tier_id!r}")
            return False

        self._tiers.remove(tier)
        self.renumber()
        logger.debug(f"[TIERS] Deleted {tier.name!r}, {len(self._tiers)} tiers remain")
        return True

    def reorder(self, from_index: int, to_index: int) -> bool:
        """
        Move the tier at `from_index` of the sorted view to `to_index`.

        Splice semantics: the tier is taken out first, then inserted into the
        shortened list at `to_index` (clamped to its bounds). Every tier's
        order is then rewritten to its new position.

        Returns True if anything moved.
        """
        if from_index == to_index:
            return False

        ordered = self.sorted_view()
        if not 0 <= from_index < len(ordered):
            logger.debug(f"[TIERS] Reorder ignored, index {from_index} out of range")
            return False

        moved = ordered.pop(from_index)
        to_index = max(0, min(to_index, len(ordered)))
        ordered.insert(to_index, moved)
        self._assign_positions(ordered)

        logger.debug(f"[TIERS] Moved {moved.name!r} from {from_index} to {to_index}")
        return True

    def move_up(self, index: int) -> bool:
        """Swap the tier at `index` with the one ranked below it. No-op at the bottom."""
        if index > 0:
            return self.reorder(index, index - 1)
        return False

    def move_down(self, index: int) -> bool:
        """Swap the tier at `index` with the one ranked above it. No-op at the top."""
        if index < len(self._tiers) - 1:
            return self.reorder(index, index + 1)
        return False

    def renumber(self):
        """Rewrite every order to the tier's position in the sorted view."""
        self._assign_positions(self.sorted_view())

    def _assign_positions(self, ordered: List[CurrencyTier]):
        for position, tier in enumerate(ordered):
            tier.order = position
        self._tiers = ordered

    # --- Records ---

    def load(self, records: Iterable[Dict[str, Any]]):
        """
        Replace the ladder with tiers hydrated from configuration records.

        Orders are kept as given so inconsistent data stays visible to the
        validator; records without an integer order are appended. Call
        renumber() to repair.

        Raises:
            DuplicateTierError: if two records share an id
        """
        tiers: List[CurrencyTier] = []
        seen = set()
        for record in records:
            tier = CurrencyTier.from_dict(record)
            tier.order = _record_order(tier.order)
            if tier.id in seen:
                raise DuplicateTierError(tier.id)
            seen.add(tier.id)
            tiers.append(tier)

        next_order = max((t.order for t in tiers if t.order is not None), default=-1) + 1
        for tier in tiers:
            if tier.order is None:
                tier.order = next_order
                next_order += 1

        self._tiers = tiers
        logger.info(f"[TIERS] Loaded {len(tiers)} currency tiers")

    def to_list(self) -> List[Dict[str, Any]]:
        """Serialize the sorted ladder to configuration records."""
        return [tier.to_dict() for tier in self.sorted_view()]
