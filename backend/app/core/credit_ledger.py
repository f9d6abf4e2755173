"""Credit Ledger — pure boost pricing, credit split and expiry policy.

Invariants:
    - split_boost_cost never returns a split that overdraws either pool
    - premium_used + standard_used == cost exactly
    - Insufficient combined balance raises BEFORE the shell writes anything
    - BOOST_PLANS is the single source of truth for plan pricing

Design Decisions:
    - Premium-first by default: purchased credits are consumed before earned ones
    - Stacking is a setting: EXTEND adds time to a running boost,
      REPLACE restarts the window from now
"""

from dataclasses import dataclass
from datetime import datetime, timedelta

from app.core.clock import as_utc
from app.core.domain_types import BoostStacking, CreditPreference
from app.core.errors import (
    ErrorContext, InsufficientCreditsError, UnknownBoostPlanError,
)


@dataclass(frozen=True)
class BoostPlan:
    """A purchasable boost: cost, window and advertised multiplier."""
    plan_id: str
    label: str
    credits_required: int
    duration_hours: int
    multiplier: float


@dataclass(frozen=True)
class CreditSplit:
    """How a cost is drawn from the two credit pools."""
    premium_used: int
    standard_used: int

    @property
    def total(self) -> int:
        return self.premium_used + self.standard_used


# One cost per plan, split across both pools by split_boost_cost.
BOOST_PLANS: dict[str, BoostPlan] = {
    p.plan_id: p for p in (
        BoostPlan("boost_24h", "24h Boost", 3, 24, 1.5),
        BoostPlan("boost_72h", "3 Day Boost", 8, 72, 2.0),
        BoostPlan("boost_week", "Week Boost", 15, 168, 3.0),
    )
}


def get_boost_plan(plan_id: str) -> BoostPlan:
    plan = BOOST_PLANS.get(plan_id)
    if plan is None:
        raise UnknownBoostPlanError(plan_id)
    return plan


def split_boost_cost(
    premium_balance: int,
    standard_balance: int,
    cost: int,
    preference: CreditPreference = CreditPreference.PREMIUM_FIRST,
    context: ErrorContext | None = None,
) -> CreditSplit:
    """Draw cost from the preferred pool first, the shortfall from the other.

    Raises InsufficientCreditsError when the second pool cannot cover the
    shortfall. Nothing is deducted here; the shell applies the split.
    """
    if cost < 0:
        raise ValueError(f"cost must be >= 0, got {cost}")
    premium_balance = max(premium_balance or 0, 0)
    standard_balance = max(standard_balance or 0, 0)

    if preference == CreditPreference.STANDARD_FIRST:
        standard_used = min(standard_balance, cost)
        premium_used = cost - standard_used
        short = premium_balance < premium_used
    else:
        premium_used = min(premium_balance, cost)
        standard_used = cost - premium_used
        short = standard_balance < standard_used

    if short:
        raise InsufficientCreditsError(
            cost, premium_balance + standard_balance, context,
        )
    return CreditSplit(premium_used=premium_used, standard_used=standard_used)


def compute_boost_expiry(
    existing_expiry: datetime | None,
    now: datetime,
    duration_hours: int,
    stacking: BoostStacking = BoostStacking.EXTEND,
) -> datetime:
    """New boost_expires for a track receiving a boost at `now`."""
    now = as_utc(now)
    start = now
    existing = as_utc(existing_expiry)
    if stacking == BoostStacking.EXTEND and existing is not None:
        start = max(existing, now)
    return start + timedelta(hours=duration_hours)


def is_boost_active(expires: datetime | None, now: datetime) -> bool:
    expires = as_utc(expires)
    return expires is not None and as_utc(now) < expires
