"""Vote Accounting — tests for pure allocation planning and monthly reset."""

from datetime import datetime, timedelta, timezone

import pytest

from app.core.errors import InsufficientVotesError
from app.core.vote_accounting import (
    AllowanceState,
    apply_monthly_reset,
    current_period_start,
    next_reset_date,
    plan_vote_allocation,
    spent_in_current_period,
)

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


def test_new_vote_consumes_full_amount():
    allocation = plan_vote_allocation(3, None, votes_remaining=10)
    assert allocation.is_new
    assert allocation.new_count == 3
    assert allocation.total_votes_delta == 3
    assert allocation.votes_consumed == 3


def test_lowering_allocation_refunds_difference():
    allocation = plan_vote_allocation(1, previous_count=3, votes_remaining=7)
    assert not allocation.is_new
    assert allocation.total_votes_delta == -2
    assert allocation.votes_consumed == -2


def test_lowering_carried_over_allocation_refunds_nothing():
    allocation = plan_vote_allocation(
        1, previous_count=10, votes_remaining=10, previous_in_period=False,
    )
    assert allocation.total_votes_delta == -9
    assert allocation.votes_consumed == 1


def test_raising_carried_over_allocation_consumes_new_count():
    allocation = plan_vote_allocation(
        6, previous_count=2, votes_remaining=10, previous_in_period=False,
    )
    assert allocation.total_votes_delta == 4
    assert allocation.votes_consumed == 6


def test_raising_allocation_consumes_difference():
    allocation = plan_vote_allocation(5, previous_count=2, votes_remaining=8)
    assert allocation.total_votes_delta == 3
    assert allocation.votes_consumed == 3


def test_same_allocation_is_noop_delta():
    allocation = plan_vote_allocation(4, previous_count=4, votes_remaining=6)
    assert allocation.total_votes_delta == 0


def test_request_above_remaining_rejected():
    with pytest.raises(InsufficientVotesError) as exc:
        plan_vote_allocation(5, None, votes_remaining=2)
    assert exc.value.requested == 5
    assert exc.value.remaining == 2
    assert exc.value.code == "INSUFFICIENT_VOTES"


def test_request_equal_to_remaining_allowed():
    assert plan_vote_allocation(2, None, votes_remaining=2).votes_consumed == 2


def test_zero_vote_count_rejected():
    with pytest.raises(ValueError):
        plan_vote_allocation(0, None, votes_remaining=10)


def test_next_reset_is_first_of_next_month():
    assert next_reset_date(NOW) == datetime(2026, 11, 1, tzinfo=timezone.utc)


def test_next_reset_rolls_over_year():
    december = datetime(2026, 12, 31, 23, 59, tzinfo=timezone.utc)
    assert next_reset_date(december) == datetime(2027, 1, 1, tzinfo=timezone.utc)


def test_unset_reset_date_refills_allowance():
    state = apply_monthly_reset(0, None, NOW, allowance=10)
    assert state.was_reset
    assert state.remaining == 10
    assert state.reset_date == datetime(2026, 11, 1, tzinfo=timezone.utc)


def test_past_reset_date_refills_allowance():
    past = datetime(2026, 10, 1, tzinfo=timezone.utc)
    state = apply_monthly_reset(1, past, NOW, allowance=10)
    assert state.was_reset
    assert state.remaining == 10


def test_future_reset_date_keeps_remaining():
    future = datetime(2026, 11, 1, tzinfo=timezone.utc)
    state = apply_monthly_reset(4, future, NOW, allowance=10)
    assert not state.was_reset
    assert state.remaining == 4
    assert state.reset_date == future


# ─── current period ──────────────────────────────────────────────

KEPT = AllowanceState(
    remaining=4, reset_date=datetime(2026, 11, 1, tzinfo=timezone.utc),
    was_reset=False,
)
REFILLED = AllowanceState(
    remaining=10, reset_date=datetime(2026, 11, 1, tzinfo=timezone.utc),
    was_reset=True,
)


def test_period_starts_on_first_of_month():
    assert current_period_start(NOW) == datetime(2026, 10, 1, tzinfo=timezone.utc)


def test_vote_updated_this_month_is_in_period():
    assert spent_in_current_period(NOW - timedelta(days=3), NOW, KEPT)


def test_vote_from_last_month_is_carried_over():
    last_month = datetime(2026, 9, 30, 23, 59, tzinfo=timezone.utc)
    assert not spent_in_current_period(last_month, NOW, KEPT)


def test_refill_during_request_carries_every_vote_over():
    assert not spent_in_current_period(NOW - timedelta(minutes=1), NOW, REFILLED)


def test_naive_timestamp_compared_as_utc():
    naive = datetime(2026, 10, 1, 0, 0)
    assert spent_in_current_period(naive, NOW, KEPT)
