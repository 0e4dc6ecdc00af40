import pytest

from training_pay.exceptions import InitialStateError, TerminalStateError, ValidationError
from training_pay.services.settlement_fsm import CLAWBACK, DISBURSEMENT, machine_for


def test_disbursement_forward_chain_and_stamps():
    status, stamps = DISBURSEMENT.initial, []
    while not DISBURSEMENT.is_terminal(status):
        step = DISBURSEMENT.next(status)
        stamps.append(step.stamp)
        assert DISBURSEMENT.index(step.target) == DISBURSEMENT.index(status) + 1
        status = step.target
    assert status == "CMS_APPROVED"
    assert stamps == ["doc_approved_at", "cms_draft_at", "cms_approved_at"]


def test_next_at_terminal_raises():
    with pytest.raises(TerminalStateError):
        DISBURSEMENT.next("CMS_APPROVED")
    with pytest.raises(TerminalStateError):
        CLAWBACK.next("COMPLETED")


def test_previous_clears_stage_being_left():
    step = CLAWBACK.previous("COMPLETED")
    assert (step.source, step.target, step.clear, step.stamp) == ("COMPLETED", "DEPOSIT_CONFIRMED", "completed_at", None)


def test_previous_at_initial_raises():
    with pytest.raises(InitialStateError):
        DISBURSEMENT.previous("DOC_DRAFT")
    with pytest.raises(InitialStateError):
        CLAWBACK.previous("REQUESTED")


def test_initial_stage_has_no_milestone():
    assert DISBURSEMENT.initial not in DISBURSEMENT.milestones
    assert CLAWBACK.initial not in CLAWBACK.milestones


def test_unknown_stage_and_kind():
    with pytest.raises(ValidationError):
        DISBURSEMENT.next("PAID")
    with pytest.raises(ValidationError):
        machine_for("refund")
    assert machine_for("clawback") is CLAWBACK
