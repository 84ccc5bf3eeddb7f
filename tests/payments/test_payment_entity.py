from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from domain.common.exceptions import DomainValidationException
from domain.payment.entity import Payment, PaymentStatus, PaymentType
from domain.payment.service import PaymentDomainService


def _payment(**kwargs):
    fields = dict(id=1, user_id=1, contest_id=1, amount=Decimal("25"), gateway_intent_ref="pi_1")
    fields.update(kwargs)
    return Payment(**fields)


def test_amount_and_currency_are_validated():
    with pytest.raises(DomainValidationException):
        _payment(amount=Decimal("0"))
    with pytest.raises(DomainValidationException):
        _payment(currency="dollars")


def test_only_pending_payments_can_be_reissued():
    p = _payment()
    p.reissue("pi_2", Decimal("30"))
    assert p.gateway_intent_ref == "pi_2"
    assert p.amount == Decimal("30")

    with pytest.raises(DomainValidationException):
        _payment(status=PaymentStatus.COMPLETED).reissue("pi_3", Decimal("25"))


def test_only_completed_entry_payments_fund_a_participation():
    assert _payment(status=PaymentStatus.COMPLETED).funds_entry(1, 1)
    assert not _payment(status=PaymentStatus.PENDING).funds_entry(1, 1)
    assert not _payment(status=PaymentStatus.COMPLETED, payment_type=PaymentType.UPDATE).funds_entry(1, 1)
    assert not _payment(status=PaymentStatus.COMPLETED).funds_entry(2, 1)


def test_one_per_contest_prefers_completed_then_newest():
    t0 = datetime(2026, 1, 1, tzinfo=timezone.utc)
    failed = _payment(id=1, status=PaymentStatus.FAILED, created_at=t0 + timedelta(minutes=5))
    paid = _payment(id=2, status=PaymentStatus.COMPLETED, created_at=t0)
    old = _payment(id=3, contest_id=2, created_at=t0)
    new = _payment(id=4, contest_id=2, created_at=t0 + timedelta(minutes=1))

    chosen = PaymentDomainService.one_per_contest([failed, paid, old, new])

    assert [p.id for p in chosen] == [4, 2]
