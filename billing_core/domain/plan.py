"""Plan Catalog

Static table of plan tiers: monthly price, registration limit, ordinal rank
and display name. Built once from configuration and passed to every
component that needs plan data.
"""

from enum import Enum
from typing import Any, Dict, Mapping, Optional
from pydantic import BaseModel, ConfigDict


class PlanTier(str, Enum):
    """Plan tiers, in ascending order"""
    FREE = "free"
    STANDARD = "standard"
    ENTERPRISE = "enterprise"


PLAN_RANKS: Dict[PlanTier, int] = {
    PlanTier.FREE: 0,
    PlanTier.STANDARD: 1,
    PlanTier.ENTERPRISE: 2,
}

PLAN_NAMES: Dict[PlanTier, str] = {
    PlanTier.FREE: "Free",
    PlanTier.STANDARD: "Standard",
    PlanTier.ENTERPRISE: "Enterprise",
}

DEFAULT_PLAN_PRICING_CENTS: Dict[str, int] = {
    "free": 0,
    "standard": 1900,
    "enterprise": 9900,
}

DEFAULT_PLAN_REGISTRATION_LIMITS: Dict[str, int] = {
    "free": 100,
    "standard": 5000,
    "enterprise": 50000,
}


class PlanDefinition(BaseModel):
    model_config = ConfigDict(frozen=True)

    tier: PlanTier
    display_name: str
    monthly_price_cents: int
    registration_limit: int
    rank: int


class PlanCatalog(BaseModel):
    """
    Immutable plan catalogue

    An unknown tier is a programming error and raises KeyError/ValueError;
    callers validate tiers at the API boundary.
    """

    model_config = ConfigDict(frozen=True)

    plans: Dict[PlanTier, PlanDefinition]
    currency: str = "USD"

    @classmethod
    def build(
        cls,
        pricing_cents: Optional[Mapping[str, int]] = None,
        registration_limits: Optional[Mapping[str, int]] = None,
        currency: str = "USD",
    ) -> "PlanCatalog":
        pricing = {**DEFAULT_PLAN_PRICING_CENTS, **(pricing_cents or {})}
        limits = {**DEFAULT_PLAN_REGISTRATION_LIMITS, **(registration_limits or {})}

        plans = {
            tier: PlanDefinition(
                tier=tier,
                display_name=PLAN_NAMES[tier],
                monthly_price_cents=int(pricing[tier.value]),
                registration_limit=int(limits[tier.value]),
                rank=PLAN_RANKS[tier],
            )
            for tier in PlanTier
        }
        return cls(plans=plans, currency=currency)

    @classmethod
    def from_config(cls, config: Any) -> "PlanCatalog":
        """Build the catalogue from an ApplicationConfig-like object"""
        return cls.build(
            pricing_cents=getattr(config, "PLAN_PRICING_CENTS", None),
            registration_limits=getattr(config, "PLAN_REGISTRATION_LIMITS", None),
            currency=getattr(config, "DEFAULT_CURRENCY", "USD"),
        )

    def get(self, tier: PlanTier) -> PlanDefinition:
        return self.plans[PlanTier(tier)]

    def monthly_price(self, tier: PlanTier) -> int:
        return self.get(tier).monthly_price_cents

    def registration_limit(self, tier: PlanTier) -> int:
        return self.get(tier).registration_limit

    def rank(self, tier: PlanTier) -> int:
        return self.get(tier).rank

    def display_name(self, tier: PlanTier) -> str:
        return self.get(tier).display_name

    @property
    def free_limit(self) -> int:
        return self.registration_limit(PlanTier.FREE)


def format_cents(amount_cents: int) -> str:
    """Render minor units as a dollar string, e.g. 1900 -> "$19.00" """
    return f"${amount_cents / 100:.2f}"
