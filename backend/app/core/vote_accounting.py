"""Vote Accounting — pure allocation and monthly allowance policy.

Invariants:
    - plan_vote_allocation is PURE: returns a VoteAllocation, shell applies it
    - requested_count must be >= 1 and <= monthly votes remaining
    - Correcting a vote spent this period consumes total_votes_delta (a lowered
      allocation refunds votes); correcting a vote carried over from an earlier
      period consumes the full new count and refunds nothing
    - remaining never exceeds the monthly allowance
    - Reset dates are always the first instant of a calendar month, UTC

Design Decisions:
    - Allowance reset applied lazily when the voter next acts, not by a cron
      job: there is no scheduler in this service
"""

from dataclasses import dataclass
from datetime import datetime

from app.core.clock import as_utc
from app.core.errors import ErrorContext, InsufficientVotesError


@dataclass(frozen=True)
class VoteAllocation:
    """Effect of one vote request on the tally and the voter's allowance."""
    new_count: int
    previous_count: int | None
    total_votes_delta: int
    votes_consumed: int

    @property
    def is_new(self) -> bool:
        return self.previous_count is None


@dataclass(frozen=True)
class AllowanceState:
    """Voter allowance after any due monthly reset."""
    remaining: int
    reset_date: datetime
    was_reset: bool


def plan_vote_allocation(
    requested_count: int,
    previous_count: int | None,
    votes_remaining: int,
    context: ErrorContext | None = None,
    previous_in_period: bool = True,
) -> VoteAllocation:
    """Compute the delta for creating or correcting a voter's allocation.

    `previous_in_period` says whether the existing allocation was paid for
    out of the current allowance. Only then is a lowered count refunded.
    """
    if requested_count < 1:
        raise ValueError(f"vote count must be >= 1, got {requested_count}")
    if requested_count > votes_remaining:
        raise InsufficientVotesError(requested_count, votes_remaining, context)

    if previous_count is None:
        return VoteAllocation(
            new_count=requested_count,
            previous_count=None,
            total_votes_delta=requested_count,
            votes_consumed=requested_count,
        )
    delta = requested_count - previous_count
    return VoteAllocation(
        new_count=requested_count,
        previous_count=previous_count,
        total_votes_delta=delta,
        votes_consumed=delta if previous_in_period else requested_count,
    )


def next_reset_date(now: datetime) -> datetime:
    """First instant of the calendar month after `now`."""
    now = as_utc(now)
    if now.month == 12:
        return now.replace(
            year=now.year + 1, month=1, day=1,
            hour=0, minute=0, second=0, microsecond=0,
        )
    return now.replace(
        month=now.month + 1, day=1, hour=0, minute=0, second=0, microsecond=0,
    )


def apply_monthly_reset(
    remaining: int,
    reset_date: datetime | None,
    now: datetime,
    allowance: int,
) -> AllowanceState:
    """Refill the allowance if the reset date is unset or has passed."""
    reset_date = as_utc(reset_date)
    if reset_date is None or reset_date <= as_utc(now):
        return AllowanceState(
            remaining=allowance, reset_date=next_reset_date(now), was_reset=True,
        )
    return AllowanceState(
        remaining=remaining, reset_date=reset_date, was_reset=False,
    )


def current_period_start(now: datetime) -> datetime:
    """First instant of the calendar month containing `now`."""
    return as_utc(now).replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def spent_in_current_period(
    last_updated: datetime | None, now: datetime, allowance: AllowanceState,
) -> bool:
    """Whether an existing allocation was charged to the current allowance.

    A refill during this request means every earlier allocation belongs to
    the previous period, whatever its timestamp.
    """
    if allowance.was_reset or last_updated is None:
        return False
    return as_utc(last_updated) >= current_period_start(now)
