"""
Currency Tier Model
Defines the records that make up a monetary ladder (Copper -> Silver -> Gold).
"""
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

# Field names as they appear in configuration records.
RECORD_RATE_KEY = "conversionToNext"


def new_tier_id() -> str:
    """Return a fresh opaque tier identifier."""
    return str(uuid.uuid4())


@dataclass
class CurrencyTier:
    """
    One denomination in the monetary ladder.

    `order` is the zero-based rank (0 = lowest value). It stays None until the
    tier is added to a TierStore, which assigns it.
    `conversion_to_next` is how many units of this tier make 1 unit of the tier
    ranked directly above it. It is ignored for the highest tier.
    """
    name: str
    conversion_to_next: float = 1
    order: Optional[int] = None
    id: str = field(default_factory=new_tier_id)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a configuration record."""
        return {
            "id": self.id,
            "name": self.name,
            "order": self.order,
            RECORD_RATE_KEY: self.conversion_to_next,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CurrencyTier':
        """Load from a configuration record. Accepts camelCase or snake_case rate keys."""
        rate = data.get(RECORD_RATE_KEY, data.get("conversion_to_next", 1))
        tier = cls(
            name=data.get("name", ""),
            conversion_to_next=rate,
            order=data.get("order"),
        )
        if data.get("id"):
            tier.id = data["id"]
        return tier


@dataclass
class CurrencyValue:
    """An amount expressed in a specific currency tier (e.g. a material's price)."""
    tier_id: str
    amount: float

    def to_dict(self) -> Dict[str, Any]:
        return {"tierId": self.tier_id, "amount": self.amount}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CurrencyValue':
        return cls(
            tier_id=data.get("tierId", data.get("tier_id", "")),
            amount=data.get("amount", 0),
        )
