import pytest
from datetime import datetime, timezone as dt_timezone
from unittest.mock import patch

from training_pay.exceptions import (
    DuplicateProcessError, InitialStateError, PrecursorNotTerminalError, StaleStateError,
    TerminalStateError, ValidationError,
)
from training_pay.models import AuditLog, ClawbackProcess, DisbursementProcess, TrainingSession
from training_pay.repositories import settlement_repository
from training_pay.services import compensation_service, settlement_service as settlement, transport_service

T0 = datetime(2025, 3, 10, 9, 0, tzinfo=dt_timezone.utc)
T1 = datetime(2025, 3, 11, 9, 0, tzinfo=dt_timezone.utc)

DISB = "DISBURSEMENT"
CLAW = "CLAWBACK"


def _finish_disbursement(process_id):
    for _ in range(3):
        settlement.advance(DISB, process_id)


@pytest.fixture
def disbursement(db, batch, sessions):
    return settlement.create(DISB, batch.id, actor=1, title="March reserve training")


@pytest.mark.django_db
def test_disbursement_requires_counting_session(batch):
    TrainingSession.objects.create(batch=batch, title="Briefing", date=batch.start_date,
                                   counts_toward_hours=False)
    with pytest.raises(ValidationError):
        settlement.create(DISB, batch.id)
    assert settlement.ensure_disbursement(batch.id) is None


@pytest.mark.django_db
def test_create_disbursement_is_idempotent(batch, sessions):
    first = settlement.create(DISB, batch.id, title="A")
    second = settlement.create(DISB, batch.id)
    assert first.id == second.id
    assert first.status == "DOC_DRAFT"
    assert all(v is None for v in first.milestone_values().values())
    assert AuditLog.objects.filter(action="disbursement.create").count() == 1


@pytest.mark.django_db
def test_advance_is_monotonic_and_stamps_milestones(disbursement):
    p = settlement.advance(DISB, disbursement.id, now=T0)
    assert p.status == "DOC_APPROVED" and p.doc_approved_at == T0

    p = settlement.advance(DISB, disbursement.id, now=T1)
    assert p.status == "CMS_DRAFT" and p.cms_draft_at == T1
    assert p.doc_approved_at == T0

    p = settlement.advance(DISB, disbursement.id, actor=7)
    assert p.status == "CMS_APPROVED" and p.is_terminal and p.cms_approved_at is not None

    log = AuditLog.objects.filter(action="disbursement.advance").order_by("id").last()
    assert log.actor == 7
    assert log.before["status"] == "CMS_DRAFT" and log.after["status"] == "CMS_APPROVED"


@pytest.mark.django_db
def test_advance_at_terminal_changes_nothing(disbursement):
    _finish_disbursement(disbursement.id)
    before = DisbursementProcess.objects.get(id=disbursement.id)

    with pytest.raises(TerminalStateError):
        settlement.advance(DISB, disbursement.id)

    after = DisbursementProcess.objects.get(id=disbursement.id)
    assert after.status == "CMS_APPROVED"
    assert after.milestone_values() == before.milestone_values()


@pytest.mark.django_db
def test_revert_clears_stage_being_left(disbursement):
    settlement.advance(DISB, disbursement.id, now=T0)
    settlement.advance(DISB, disbursement.id, now=T1)

    p = settlement.revert(DISB, disbursement.id)
    assert p.status == "DOC_APPROVED"
    assert p.cms_draft_at is None and p.doc_approved_at == T0


@pytest.mark.django_db
def test_revert_at_initial_raises(disbursement):
    with pytest.raises(InitialStateError):
        settlement.revert(DISB, disbursement.id)
    assert DisbursementProcess.objects.get(id=disbursement.id).status == "DOC_DRAFT"


@pytest.mark.django_db
def test_full_round_trip_clears_every_milestone(disbursement):
    _finish_disbursement(disbursement.id)
    for _ in range(3):
        settlement.revert(DISB, disbursement.id)
    p = DisbursementProcess.objects.get(id=disbursement.id)
    assert p.status == "DOC_DRAFT"
    assert all(v is None for v in p.milestone_values().values())


@pytest.mark.django_db
def test_lost_race_raises_stale_and_writes_nothing(disbursement):
    with patch.object(settlement_repository, "update_status_if", return_value=0):
        with pytest.raises(StaleStateError):
            settlement.advance(DISB, disbursement.id)
    p = DisbursementProcess.objects.get(id=disbursement.id)
    assert p.status == "DOC_DRAFT" and p.doc_approved_at is None
    assert not AuditLog.objects.filter(action="disbursement.advance").exists()


@pytest.mark.django_db
def test_clawback_requires_terminal_disbursement(batch, disbursement):
    with pytest.raises(PrecursorNotTerminalError):
        settlement.create(CLAW, batch.id, reason="absent on day 2")
    settlement.advance(DISB, disbursement.id)
    with pytest.raises(PrecursorNotTerminalError):
        settlement.create(CLAW, batch.id)
    assert not ClawbackProcess.objects.exists()


@pytest.mark.django_db
def test_clawback_lifecycle(batch, disbursement):
    _finish_disbursement(disbursement.id)
    claw = settlement.create(CLAW, batch.id, reason="left early", compensation_refund=37_500)
    assert claw.status == "REQUESTED" and claw.requested_at is not None

    with pytest.raises(DuplicateProcessError):
        settlement.create(CLAW, batch.id)

    settlement.advance(CLAW, claw.id)
    claw = settlement.advance(CLAW, claw.id)
    assert claw.status == "COMPLETED"
    assert claw.deposit_confirmed_at is not None and claw.completed_at is not None

    claw = settlement.revert(CLAW, claw.id)
    assert claw.status == "DEPOSIT_CONFIRMED" and claw.completed_at is None


@pytest.mark.django_db
def test_update_metadata(disbursement):
    p = settlement.update_metadata(DISB, disbursement.id, {"amount": 250_000, "note": "paid via CMS"}, actor=2)
    assert (p.amount, p.note) == (250_000, "paid via CMS")
    log = AuditLog.objects.get(action="disbursement.update")
    assert log.before["amount"] is None and log.after["amount"] == 250_000

    with pytest.raises(ValidationError):
        settlement.update_metadata(DISB, disbursement.id, {"status": "CMS_APPROVED"})
    with pytest.raises(ValidationError):
        settlement.update_metadata(DISB, disbursement.id, {"amount": -1})


@pytest.mark.django_db
def test_unknown_kind_rejected(batch, sessions):
    with pytest.raises(ValidationError):
        settlement.create("refund", batch.id)


@pytest.mark.django_db
def test_summary_nets_refunds_against_ledger(batch, assignment, present_everywhere):
    compensation_service.sync(batch.id)
    transport_service.set_manual(assignment.trainee_id, batch.id, 12_000)
    disbursement = settlement_repository.find_for_batch(DISB, batch.id)
    _finish_disbursement(disbursement.id)
    settlement.create(CLAW, batch.id, compensation_refund=87_500, transport_refund=2_000)

    s = settlement.settlement_summary(batch.id)
    assert s["compensation_total"] == 200_000
    assert s["transport_total"] == 12_000
    assert s["ledger_total"] == 212_000
    assert s["refund_total"] == 89_500
    assert s["net"] == 122_500
    assert s["disbursement"].status == "CMS_APPROVED"
