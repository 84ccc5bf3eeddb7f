from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from domain.common.exceptions import (
    ContestFullException,
    ContestNotConfirmedException,
    DeadlineNotPassedException,
    DeadlinePassedException,
    DomainValidationException,
)
from domain.common.time_utils import ensure_utc
from domain.contest.entity import Contest, ContestStatus
from domain.payment.entity import Payment
from tests.factories import future


def _contest(**kwargs):
    fields = dict(
        id=1, name="Logo", price=Decimal("25"), prize_money=Decimal("100"),
        deadline=future(), creator_id=1, status=ContestStatus.CONFIRMED,
    )
    fields.update(kwargs)
    return Contest(**fields)


def test_admission_checks_run_status_capacity_deadline():
    closed = _contest(status=ContestStatus.PENDING, participation_limit=1, participants_count=1)
    with pytest.raises(ContestNotConfirmedException):
        closed.ensure_open_for_admission(closed.deadline + timedelta(days=1))

    full = _contest(participation_limit=1, participants_count=1)
    with pytest.raises(ContestFullException):
        full.ensure_open_for_admission(full.deadline + timedelta(days=1))

    late = _contest()
    with pytest.raises(DeadlinePassedException):
        late.ensure_open_for_admission(late.deadline + timedelta(seconds=1))


def test_deadline_instant_is_still_open():
    c = _contest()
    c.ensure_open_for_admission(c.deadline)
    with pytest.raises(DeadlineNotPassedException):
        c.ensure_winner_declarable(c.deadline - timedelta(seconds=1))
    c.ensure_winner_declarable(c.deadline)


def test_zero_limit_means_unlimited():
    assert _contest(participation_limit=0, participants_count=10_000).has_capacity()


def test_negative_values_are_rejected():
    with pytest.raises(DomainValidationException):
        _contest(price=Decimal("-1"))
    with pytest.raises(DomainValidationException):
        _contest(participation_limit=-1)


def test_apply_update_ignores_counters_and_unknown_fields():
    c = _contest(participants_count=3)
    c.apply_update({"participants_count": 0, "winner_user_id": 7, "name": "New", "price": None})
    assert c.participants_count == 3
    assert c.winner_user_id is None
    assert c.name == "New"
    assert c.price == Decimal("25")
    assert c.status == ContestStatus.PENDING


def test_entities_read_naive_timestamps_as_utc():
    naive = datetime(2026, 3, 1, 12, 0)
    contest = _contest(deadline=naive)
    payment = Payment(
        id=1, user_id=1, contest_id=1, amount=Decimal("25"), gateway_intent_ref="pi_1", created_at=naive
    )

    assert contest.deadline == datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
    assert payment.created_at == contest.deadline
    assert ensure_utc(None) is None
