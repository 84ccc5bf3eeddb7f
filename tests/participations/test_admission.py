from decimal import Decimal

import pytest

from application.dtos.participations import AdmitRequest, UpdateSubmissionRequest
from application.services.participation_service import ParticipationApplicationService
from domain.common.exceptions import (
    AlreadyJoinedException,
    ContestFullException,
    ContestNotConfirmedException,
    ContestNotFoundException,
    DeadlinePassedException,
    ForbiddenException,
    PaymentNotFoundException,
    SubmissionNotFoundException,
)
from domain.contest.entity import ContestStatus
from domain.participation.entity import Participation
from domain.payment.entity import PaymentStatus, PaymentType
from domain.user.entity import Role
from tests.factories import identity_of, make_contest, make_payment, make_user, past


def _service(uow_factory):
    return ParticipationApplicationService(uow_factory, enforce_capacity=True)


async def _count(uow_factory, contest_id):
    async with uow_factory(readonly=True) as uow:
        return (await uow.contest_repository.get_by_id(contest_id)).participants_count


async def _join(uow_factory, user, contest, **payment_kwargs):
    payment = await make_payment(uow_factory, user, contest, **payment_kwargs)
    return await _service(uow_factory).admit(
        identity_of(user),
        AdmitRequest(contest_id=contest.id, payment_id=payment.id, submission_link="https://example.com/work"),
    )


@pytest.mark.asyncio
async def test_admit_with_completed_payment(uow_factory):
    creator = await make_user(uow_factory, "Carol", role=Role.CREATOR)
    alice = await make_user(uow_factory, "Alice")
    contest = await make_contest(uow_factory, creator)

    dto = await _join(uow_factory, alice, contest)

    assert dto.payment_status == "paid"
    assert dto.user_name == "Alice"
    assert dto.user_email == "alice@example.com"
    assert dto.submission_link == "https://example.com/work"
    assert await _count(uow_factory, contest.id) == 1


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payment_kwargs",
    [
        {"status": PaymentStatus.PENDING},
        {"status": PaymentStatus.FAILED},
        {"payment_type": PaymentType.UPDATE},
    ],
)
async def test_admit_requires_completed_entry_payment(uow_factory, payment_kwargs):
    creator = await make_user(uow_factory, "Carol", role=Role.CREATOR)
    alice = await make_user(uow_factory, "Alice")
    contest = await make_contest(uow_factory, creator)

    with pytest.raises(PaymentNotFoundException) as exc:
        await _join(uow_factory, alice, contest, **payment_kwargs)
    assert exc.value.message == "Payment not found or not completed"
    assert await _count(uow_factory, contest.id) == 0


@pytest.mark.asyncio
async def test_admit_rejects_someone_elses_payment(uow_factory):
    creator = await make_user(uow_factory, "Carol", role=Role.CREATOR)
    alice = await make_user(uow_factory, "Alice")
    bob = await make_user(uow_factory, "Bob")
    contest = await make_contest(uow_factory, creator)
    payment = await make_payment(uow_factory, alice, contest)

    with pytest.raises(PaymentNotFoundException):
        await _service(uow_factory).admit(
            identity_of(bob), AdmitRequest(contest_id=contest.id, payment_id=payment.id)
        )


@pytest.mark.asyncio
async def test_admit_rejects_payment_for_another_contest(uow_factory):
    creator = await make_user(uow_factory, "Carol", role=Role.CREATOR)
    alice = await make_user(uow_factory, "Alice")
    contest = await make_contest(uow_factory, creator)
    other = await make_contest(uow_factory, creator, name="Poster")
    payment = await make_payment(uow_factory, alice, other)

    with pytest.raises(PaymentNotFoundException):
        await _service(uow_factory).admit(
            identity_of(alice), AdmitRequest(contest_id=contest.id, payment_id=payment.id)
        )


@pytest.mark.asyncio
async def test_admit_requires_confirmed_contest(uow_factory):
    creator = await make_user(uow_factory, "Carol", role=Role.CREATOR)
    alice = await make_user(uow_factory, "Alice")
    contest = await make_contest(uow_factory, creator, status=ContestStatus.PENDING)

    with pytest.raises(ContestNotConfirmedException):
        await _join(uow_factory, alice, contest)


@pytest.mark.asyncio
async def test_admit_after_deadline(uow_factory):
    creator = await make_user(uow_factory, "Carol", role=Role.CREATOR)
    alice = await make_user(uow_factory, "Alice")
    contest = await make_contest(uow_factory, creator, deadline=past())

    with pytest.raises(DeadlinePassedException):
        await _join(uow_factory, alice, contest)
    assert await _count(uow_factory, contest.id) == 0


@pytest.mark.asyncio
async def test_capacity_limit_is_enforced(uow_factory):
    creator = await make_user(uow_factory, "Carol", role=Role.CREATOR)
    contest = await make_contest(uow_factory, creator, participation_limit=2)
    users = [await make_user(uow_factory, name) for name in ("Alice", "Bob", "Dave")]

    await _join(uow_factory, users[0], contest)
    await _join(uow_factory, users[1], contest)
    with pytest.raises(ContestFullException):
        await _join(uow_factory, users[2], contest)

    assert await _count(uow_factory, contest.id) == 2
    async with uow_factory(readonly=True) as uow:
        assert len(await uow.participation_repository.list_by_contest(contest.id)) == 2


@pytest.mark.asyncio
async def test_second_admission_is_rejected(uow_factory):
    creator = await make_user(uow_factory, "Carol", role=Role.CREATOR)
    alice = await make_user(uow_factory, "Alice")
    contest = await make_contest(uow_factory, creator)
    first = await _join(uow_factory, alice, contest)

    with pytest.raises(AlreadyJoinedException):
        await _service(uow_factory).admit(
            identity_of(alice), AdmitRequest(contest_id=contest.id, payment_id=first.payment_id)
        )
    assert await _count(uow_factory, contest.id) == 1


@pytest.mark.asyncio
async def test_duplicate_insert_is_translated(uow_factory):
    creator = await make_user(uow_factory, "Carol", role=Role.CREATOR)
    alice = await make_user(uow_factory, "Alice")
    contest = await make_contest(uow_factory, creator)
    payment = await make_payment(uow_factory, alice, contest)

    def _row():
        return Participation(id=None, contest_id=contest.id, user_id=alice.id, payment_id=payment.id)

    async with uow_factory() as uow:
        await uow.participation_repository.create(_row())

    with pytest.raises(AlreadyJoinedException):
        async with uow_factory() as uow:
            await uow.participation_repository.create(_row())


@pytest.mark.asyncio
async def test_end_to_end_single_seat_contest(uow_factory, gateway):
    """Price 25, one seat: Alice pays and joins, Bob pays but finds it full."""
    from application.dtos.payments import ConfirmPaymentRequest, CreateIntentRequest
    from application.services.payment_service import PaymentApplicationService

    creator = await make_user(uow_factory, "Carol", role=Role.CREATOR)
    alice = await make_user(uow_factory, "Alice")
    bob = await make_user(uow_factory, "Bob")
    contest = await make_contest(uow_factory, creator, price=Decimal("25"), participation_limit=1)
    payments = PaymentApplicationService(uow_factory, gateway)
    participations = _service(uow_factory)

    async def pay(user):
        created = await payments.create_intent(
            identity_of(user), CreateIntentRequest(contest_id=contest.id, price=Decimal("25"))
        )
        return await payments.confirm(identity_of(user), ConfirmPaymentRequest(payment_id=created.payment_id))

    alice_payment = await pay(alice)
    joined = await participations.admit(
        identity_of(alice), AdmitRequest(contest_id=contest.id, payment_id=alice_payment.id)
    )
    assert joined.contest_id == contest.id

    bob_payment = await pay(bob)
    with pytest.raises(ContestFullException):
        await participations.admit(identity_of(bob), AdmitRequest(contest_id=contest.id, payment_id=bob_payment.id))

    assert await _count(uow_factory, contest.id) == 1
    mine = await participations.list_my_participations(identity_of(alice))
    assert [p.id for p in mine] == [joined.id]
    assert await participations.list_my_participations(identity_of(bob)) == []


@pytest.mark.asyncio
async def test_update_submission_before_deadline(uow_factory):
    creator = await make_user(uow_factory, "Carol", role=Role.CREATOR)
    alice = await make_user(uow_factory, "Alice")
    contest = await make_contest(uow_factory, creator)
    joined = await _join(uow_factory, alice, contest)

    dto = await _service(uow_factory).update_submission(
        identity_of(alice), joined.id, UpdateSubmissionRequest(submission_text="final draft")
    )

    assert dto.submission_text == "final draft"
    assert dto.submission_link == "https://example.com/work"


@pytest.mark.asyncio
async def test_update_submission_rules(uow_factory):
    creator = await make_user(uow_factory, "Carol", role=Role.CREATOR)
    alice = await make_user(uow_factory, "Alice")
    bob = await make_user(uow_factory, "Bob")
    contest = await make_contest(uow_factory, creator)
    joined = await _join(uow_factory, alice, contest)
    svc = _service(uow_factory)
    req = UpdateSubmissionRequest(submission_link="https://example.com/v2")

    with pytest.raises(ForbiddenException):
        await svc.update_submission(identity_of(bob), joined.id, req)
    with pytest.raises(SubmissionNotFoundException):
        await svc.update_submission(identity_of(alice), 9999, req)

    async with uow_factory() as uow:
        stored = await uow.contest_repository.get_by_id(contest.id)
        stored.deadline = past()
        await uow.contest_repository.update(stored)

    with pytest.raises(DeadlinePassedException) as exc:
        await svc.update_submission(identity_of(alice), joined.id, req)
    assert exc.value.message == "Cannot update submission after contest deadline"


@pytest.mark.asyncio
async def test_contest_submissions_visible_to_owner_only(uow_factory):
    creator = await make_user(uow_factory, "Carol", role=Role.CREATOR)
    rival = await make_user(uow_factory, "Rita", role=Role.CREATOR)
    alice = await make_user(uow_factory, "Alice")
    contest = await make_contest(uow_factory, creator)
    await _join(uow_factory, alice, contest)
    svc = _service(uow_factory)

    items = await svc.list_contest_submissions(identity_of(creator), contest.id)
    assert [p.user_id for p in items] == [alice.id]
    with pytest.raises(ForbiddenException):
        await svc.list_contest_submissions(identity_of(rival), contest.id)
    with pytest.raises(ContestNotFoundException):
        await svc.list_contest_submissions(identity_of(creator), 9999)
