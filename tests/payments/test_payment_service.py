from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from application.dtos.payments import ConfirmPaymentRequest, CreateIntentRequest
from application.services.payment_service import PaymentApplicationService
from domain.common.exceptions import (
    ContestNotFoundException,
    DomainValidationException,
    ForbiddenException,
    PaymentAlreadyCompletedException,
    PaymentNotCompletedException,
    PaymentNotFoundException,
    PriceMismatchException,
)
from domain.payment.entity import PaymentStatus, PaymentType
from domain.user.entity import Role
from infrastructure.external.payments.exceptions import PaymentProviderError, PaymentSignatureError
from tests.factories import identity_of, make_contest, make_payment, make_user
from tests.fakes import signed_headers, webhook_body


def _service(uow_factory, gateway):
    return PaymentApplicationService(uow_factory, gateway, update_fee=Decimal("10"), currency="usd")


async def _setup(uow_factory, **contest_kwargs):
    creator = await make_user(uow_factory, "Carol", role=Role.CREATOR)
    user = await make_user(uow_factory, "Alice")
    contest = await make_contest(uow_factory, creator, **contest_kwargs)
    return creator, user, contest


async def _stored(uow_factory, payment_id):
    async with uow_factory(readonly=True) as uow:
        return await uow.payment_repository.get_by_id(payment_id)


@pytest.mark.asyncio
async def test_create_intent_records_pending_payment(uow_factory, gateway):
    _, user, contest = await _setup(uow_factory)
    svc = _service(uow_factory, gateway)

    res = await svc.create_intent(identity_of(user), CreateIntentRequest(contest_id=contest.id, price=Decimal("25")))

    assert res.client_secret == "pi_test_1_secret"
    payment = await _stored(uow_factory, res.payment_id)
    assert payment.status == PaymentStatus.PENDING
    assert payment.amount == Decimal("25")
    assert payment.gateway_intent_ref == "pi_test_1"
    sent = gateway.created[0]
    assert sent["metadata"] == {"user_id": str(user.id), "contest_id": str(contest.id), "payment_type": "entry"}
    assert sent["idempotency_key"]


@pytest.mark.asyncio
@pytest.mark.parametrize("price", [None, Decimal("0"), Decimal("-5")])
async def test_create_intent_requires_positive_price(uow_factory, gateway, price):
    _, user, contest = await _setup(uow_factory)
    with pytest.raises(DomainValidationException) as exc:
        await _service(uow_factory, gateway).create_intent(
            identity_of(user), CreateIntentRequest(contest_id=contest.id, price=price)
        )
    assert exc.value.message == "Valid price is required"
    assert gateway.created == []


@pytest.mark.asyncio
async def test_create_intent_rejects_price_mismatch(uow_factory, gateway):
    _, user, contest = await _setup(uow_factory)
    with pytest.raises(PriceMismatchException):
        await _service(uow_factory, gateway).create_intent(
            identity_of(user), CreateIntentRequest(contest_id=contest.id, price=Decimal("20"))
        )
    assert gateway.created == []


@pytest.mark.asyncio
async def test_create_intent_unknown_contest(uow_factory, gateway):
    user = await make_user(uow_factory, "Alice")
    with pytest.raises(ContestNotFoundException):
        await _service(uow_factory, gateway).create_intent(
            identity_of(user), CreateIntentRequest(contest_id=999, price=Decimal("25"))
        )


@pytest.mark.asyncio
async def test_update_fee_is_flat_and_repeatable(uow_factory, gateway):
    _, user, contest = await _setup(uow_factory)
    svc = _service(uow_factory, gateway)
    req = CreateIntentRequest(contest_id=contest.id, price=Decimal("10"), payment_type=PaymentType.UPDATE)

    first = await svc.create_intent(identity_of(user), req)
    second = await svc.create_intent(identity_of(user), req)

    assert first.payment_id != second.payment_id
    with pytest.raises(PriceMismatchException):
        await svc.create_intent(
            identity_of(user),
            CreateIntentRequest(contest_id=contest.id, price=Decimal("25"), payment_type=PaymentType.UPDATE),
        )


@pytest.mark.asyncio
async def test_second_intent_reuses_pending_row(uow_factory, gateway):
    _, user, contest = await _setup(uow_factory)
    svc = _service(uow_factory, gateway)
    req = CreateIntentRequest(contest_id=contest.id, price=Decimal("25"))

    first = await svc.create_intent(identity_of(user), req)
    second = await svc.create_intent(identity_of(user), req)

    assert first.payment_id == second.payment_id
    payment = await _stored(uow_factory, second.payment_id)
    assert payment.gateway_intent_ref == "pi_test_2"
    async with uow_factory(readonly=True) as uow:
        assert len(await uow.payment_repository.list_by_user(user.id)) == 1


@pytest.mark.asyncio
async def test_failed_row_is_not_reused(uow_factory, gateway):
    _, user, contest = await _setup(uow_factory)
    failed = await make_payment(uow_factory, user, contest, status=PaymentStatus.FAILED)

    res = await _service(uow_factory, gateway).create_intent(
        identity_of(user), CreateIntentRequest(contest_id=contest.id, price=Decimal("25"))
    )

    assert res.payment_id != failed.id
    assert (await _stored(uow_factory, failed.id)).status == PaymentStatus.FAILED


@pytest.mark.asyncio
async def test_already_paid_entry_is_rejected(uow_factory, gateway):
    _, user, contest = await _setup(uow_factory)
    await make_payment(uow_factory, user, contest)

    with pytest.raises(PaymentAlreadyCompletedException):
        await _service(uow_factory, gateway).create_intent(
            identity_of(user), CreateIntentRequest(contest_id=contest.id, price=Decimal("25"))
        )
    assert gateway.created == []


@pytest.mark.asyncio
async def test_gateway_failure_persists_nothing(uow_factory, gateway):
    _, user, contest = await _setup(uow_factory)
    gateway.create_error = PaymentProviderError("card_declined", provider="stub", provider_code="card_declined")

    with pytest.raises(PaymentProviderError) as exc:
        await _service(uow_factory, gateway).create_intent(
            identity_of(user), CreateIntentRequest(contest_id=contest.id, price=Decimal("25"))
        )

    assert exc.value.details["upstream_message"] == "card_declined"
    async with uow_factory(readonly=True) as uow:
        assert await uow.payment_repository.list_by_user(user.id) == []


@pytest.mark.asyncio
async def test_confirm_completes_when_gateway_succeeded(uow_factory, gateway):
    _, user, contest = await _setup(uow_factory)
    svc = _service(uow_factory, gateway)
    created = await svc.create_intent(identity_of(user), CreateIntentRequest(contest_id=contest.id, price=Decimal("25")))

    dto = await svc.confirm(identity_of(user), ConfirmPaymentRequest(payment_id=created.payment_id, transaction_id="tx_1"))

    assert dto.status == PaymentStatus.COMPLETED
    assert dto.transaction_ref == "tx_1"
    assert dto.paid_at is not None


@pytest.mark.asyncio
async def test_confirm_is_idempotent_for_completed_payment(uow_factory, gateway):
    _, user, contest = await _setup(uow_factory)
    payment = await make_payment(uow_factory, user, contest)

    dto = await _service(uow_factory, gateway).confirm(
        identity_of(user), ConfirmPaymentRequest(payment_id=payment.id, transaction_id="tx_other")
    )

    assert dto.status == PaymentStatus.COMPLETED
    assert dto.transaction_ref == "tx_seed"
    assert gateway.retrieved == []


@pytest.mark.asyncio
async def test_confirm_marks_failed_when_gateway_did_not_succeed(uow_factory, gateway):
    _, user, contest = await _setup(uow_factory)
    payment = await make_payment(uow_factory, user, contest, status=PaymentStatus.PENDING)
    gateway.status = "failed"

    with pytest.raises(PaymentNotCompletedException):
        await _service(uow_factory, gateway).confirm(identity_of(user), ConfirmPaymentRequest(payment_id=payment.id))

    assert (await _stored(uow_factory, payment.id)).status == PaymentStatus.FAILED


@pytest.mark.asyncio
async def test_confirm_rejects_other_users_payment(uow_factory, gateway):
    _, user, contest = await _setup(uow_factory)
    mallory = await make_user(uow_factory, "Mallory")
    payment = await make_payment(uow_factory, user, contest, status=PaymentStatus.PENDING)

    with pytest.raises(ForbiddenException):
        await _service(uow_factory, gateway).confirm(identity_of(mallory), ConfirmPaymentRequest(payment_id=payment.id))
    assert (await _stored(uow_factory, payment.id)).status == PaymentStatus.PENDING


@pytest.mark.asyncio
async def test_confirm_unknown_payment(uow_factory, gateway):
    user = await make_user(uow_factory, "Alice")
    with pytest.raises(PaymentNotFoundException):
        await _service(uow_factory, gateway).confirm(identity_of(user), ConfirmPaymentRequest(payment_id=404))


@pytest.mark.asyncio
async def test_webhook_completes_once(uow_factory, gateway):
    _, user, contest = await _setup(uow_factory)
    svc = _service(uow_factory, gateway)
    created = await svc.create_intent(identity_of(user), CreateIntentRequest(contest_id=contest.id, price=Decimal("25")))

    ack = await svc.handle_webhook(signed_headers(), webhook_body("pi_test_1"))
    assert ack.received is True
    first = await _stored(uow_factory, created.payment_id)
    assert first.status == PaymentStatus.COMPLETED

    await svc.handle_webhook(signed_headers(), webhook_body("pi_test_1", event_id="evt_2"))
    replayed = await _stored(uow_factory, created.payment_id)
    assert replayed.paid_at == first.paid_at
    assert replayed.transaction_ref == first.transaction_ref


@pytest.mark.asyncio
async def test_webhook_unknown_intent_is_acknowledged(uow_factory, gateway):
    ack = await _service(uow_factory, gateway).handle_webhook(signed_headers(), webhook_body("pi_unknown"))
    assert ack.received is True


@pytest.mark.asyncio
async def test_webhook_ignores_other_event_types(uow_factory, gateway):
    _, user, contest = await _setup(uow_factory)
    payment = await make_payment(uow_factory, user, contest, status=PaymentStatus.PENDING, intent_ref="pi_x")

    await _service(uow_factory, gateway).handle_webhook(
        signed_headers(), webhook_body("pi_x", event_type="payment_intent.payment_failed")
    )

    assert (await _stored(uow_factory, payment.id)).status == PaymentStatus.PENDING


@pytest.mark.asyncio
async def test_webhook_rejects_bad_signature(uow_factory, gateway):
    _, user, contest = await _setup(uow_factory)
    payment = await make_payment(uow_factory, user, contest, status=PaymentStatus.PENDING, intent_ref="pi_x")

    with pytest.raises(PaymentSignatureError):
        await _service(uow_factory, gateway).handle_webhook({"x-stub-signature": "forged"}, webhook_body("pi_x"))
    assert (await _stored(uow_factory, payment.id)).status == PaymentStatus.PENDING


@pytest.mark.asyncio
async def test_list_my_payments_one_per_contest(uow_factory, gateway):
    creator, user, contest_a = await _setup(uow_factory)
    contest_b = await make_contest(uow_factory, creator, name="Poster")
    await make_payment(uow_factory, user, contest_a, status=PaymentStatus.FAILED)
    paid = await make_payment(uow_factory, user, contest_a)
    pending = await make_payment(uow_factory, user, contest_b, status=PaymentStatus.PENDING)

    items = await _service(uow_factory, gateway).list_my_payments(identity_of(user))

    assert {p.id for p in items} == {paid.id, pending.id}


@pytest.mark.asyncio
async def test_reconcile_completes_only_succeeded_intents(uow_factory, gateway):
    _, user, contest = await _setup(uow_factory)
    bob = await make_user(uow_factory, "Bob")
    dave = await make_user(uow_factory, "Dave")
    settled = await make_payment(uow_factory, user, contest, status=PaymentStatus.PENDING, intent_ref="pi_ok")
    waiting = await make_payment(uow_factory, bob, contest, status=PaymentStatus.PENDING, intent_ref="pi_wait")
    broken = await make_payment(uow_factory, dave, contest, status=PaymentStatus.PENDING, intent_ref="pi_err")
    gateway.statuses = {"pi_ok": "succeeded", "pi_wait": "failed"}
    gateway.retrieve_errors = {"pi_err": PaymentProviderError("boom", provider="stub")}

    completed = await _service(uow_factory, gateway).reconcile_pending(timedelta(0), limit=10)

    assert completed == 1
    assert (await _stored(uow_factory, settled.id)).status == PaymentStatus.COMPLETED
    # reconciliation never fails a payment
    assert (await _stored(uow_factory, waiting.id)).status == PaymentStatus.PENDING
    assert (await _stored(uow_factory, broken.id)).status == PaymentStatus.PENDING


@pytest.mark.asyncio
async def test_reconcile_reaches_payments_behind_abandoned_checkouts(uow_factory, gateway):
    _, user, contest = await _setup(uow_factory)
    bob = await make_user(uow_factory, "Bob")
    for ref in ("pi_abandoned_a", "pi_abandoned_b"):
        await make_payment(uow_factory, user, contest, status=PaymentStatus.PENDING, intent_ref=ref)
    lost = await make_payment(uow_factory, bob, contest, status=PaymentStatus.PENDING, intent_ref="pi_lost_webhook")
    gateway.status = "requires_payment_method"
    gateway.statuses = {"pi_lost_webhook": "succeeded"}

    completed = await _service(uow_factory, gateway).reconcile_pending(timedelta(0), limit=2)

    assert completed == 1
    assert gateway.retrieved == ["pi_abandoned_a", "pi_abandoned_b", "pi_lost_webhook"]
    assert (await _stored(uow_factory, lost.id)).status == PaymentStatus.COMPLETED


@pytest.mark.asyncio
async def test_reconcile_skips_rows_outside_the_window(uow_factory, gateway):
    _, user, contest = await _setup(uow_factory)
    ancient = await make_payment(
        uow_factory, user, contest,
        status=PaymentStatus.PENDING,
        intent_ref="pi_ancient",
        created_at=datetime.now(timezone.utc) - timedelta(days=30),
    )

    completed = await _service(uow_factory, gateway).reconcile_pending(
        timedelta(0), limit=10, max_age=timedelta(hours=72)
    )

    assert completed == 0
    assert gateway.retrieved == []
    assert (await _stored(uow_factory, ancient.id)).status == PaymentStatus.PENDING
