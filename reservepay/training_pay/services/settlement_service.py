# -*- coding: utf-8 -*-
"""
Settlement workflow service (Disbursement, Clawback).

- Transitions go through the stage machines in settlement_fsm; no branching, no skipping.
- advance/revert lock the row, then write conditionally on the status that was read.
  A lost race raises StaleStateError and nothing is written.
- Ledger totals are displayed next to the workflow but never gate a transition.
"""
from __future__ import annotations
from typing import Dict, Optional
import logging

from django.db import transaction
from django.utils import timezone

from training_pay.exceptions import (
    DuplicateProcessError, PrecursorNotTerminalError, StaleStateError, ValidationError,
)
from training_pay.models import DisbursementProcess
from training_pay.repositories import settlement_repository as repo
from training_pay.selectors import directory_selector as directory
from training_pay.services import audit_service
from training_pay.services.settlement_fsm import CLAWBACK, DISBURSEMENT, machine_for

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = {
    DISBURSEMENT.kind: {"title", "amount", "bank_info", "note"},
    CLAWBACK.kind: {"reason", "note", "bank_info", "compensation_refund", "transport_refund"},
}


def _clean_fields(kind: str, fields: Dict) -> Dict:
    allowed = EDITABLE_FIELDS[kind]
    unknown = set(fields) - allowed
    if unknown:
        raise ValidationError(f"Fields not editable on {kind}: {', '.join(sorted(unknown))}")
    for name in ("amount", "compensation_refund", "transport_refund"):
        value = fields.get(name)
        if value is not None and int(value) < 0:
            raise ValidationError(f"{name} must be >= 0")
    return dict(fields)


def _snapshot(process) -> Dict:
    data = {"status": process.status}
    for name, value in process.milestone_values().items():
        data[name] = value.isoformat() if value else None
    return data


# ============================
# Creation
# ============================
def ensure_disbursement(batch_id: int) -> Optional[DisbursementProcess]:
    """Create the batch's disbursement once it has a counting session."""
    if not directory.has_counting_session(batch_id):
        return None
    process, created = repo.get_or_create_disbursement(batch_id)
    if created:
        logger.info("[settlement] disbursement auto-created batch=%s", batch_id)
    return process


def create(kind: str, batch_id: int, actor: Optional[int] = None, **fields):
    machine = machine_for(kind)
    directory.get_batch(batch_id)
    fields = _clean_fields(machine.kind, fields)

    if machine is DISBURSEMENT:
        if not directory.has_counting_session(batch_id):
            raise ValidationError("Batch has no session that counts toward hours.")
        process, created = repo.get_or_create_disbursement(batch_id, **fields)
        if not created and fields:
            process = repo.update_fields(process, fields)
    else:
        disbursement = repo.find_for_batch(DISBURSEMENT.kind, batch_id)
        if disbursement is None or not disbursement.is_terminal:
            raise PrecursorNotTerminalError(
                f"Disbursement must be at {DISBURSEMENT.terminal} before a clawback can be requested.",
                batch_id=batch_id,
            )
        if repo.find_for_batch(CLAWBACK.kind, batch_id) is not None:
            raise DuplicateProcessError(batch_id=batch_id)
        process = repo.create_clawback(batch_id, requested_at=timezone.now(), **fields)
        created = True

    if created:
        audit_service.log_action(
            actor=actor, action=f"{machine.kind.lower()}.create", object_type=type(process).__name__,
            object_id=process.id, after=_snapshot(process),
        )
    return process


# ============================
# Transitions
# ============================
def _transition(kind: str, process_id: int, *, forward: bool, actor: Optional[int], now=None):
    machine = machine_for(kind)
    now = now or timezone.now()

    with transaction.atomic():
        process = repo.get_locked(machine.kind, process_id)
        before = _snapshot(process)
        step = machine.next(process.status) if forward else machine.previous(process.status)

        changes = {}
        if step.stamp and getattr(process, step.stamp) is None:
            changes[step.stamp] = now
        if step.clear:
            changes[step.clear] = None

        written = repo.update_status_if(
            machine.kind, process.id, expected=step.source, status=step.target, changes=changes,
        )
        if written == 0:
            raise StaleStateError(process_id=process_id, expected=step.source)

        process.refresh_from_db()
        audit_service.log_action(
            actor=actor, action=f"{machine.kind.lower()}.{'advance' if forward else 'revert'}",
            object_type=type(process).__name__, object_id=process.id,
            before=before, after=_snapshot(process),
        )

    logger.info("[settlement] %s #%s %s -> %s", machine.kind, process_id, step.source, step.target)
    return process


def advance(kind: str, process_id: int, actor: Optional[int] = None, now=None):
    return _transition(kind, process_id, forward=True, actor=actor, now=now)


def revert(kind: str, process_id: int, actor: Optional[int] = None, now=None):
    return _transition(kind, process_id, forward=False, actor=actor, now=now)


@transaction.atomic
def update_metadata(kind: str, process_id: int, fields: Dict, actor: Optional[int] = None):
    machine = machine_for(kind)
    fields = _clean_fields(machine.kind, fields)
    process = repo.get_locked(machine.kind, process_id)
    if not fields:
        return process
    before = {k: getattr(process, k) for k in fields}
    process = repo.update_fields(process, fields)
    audit_service.log_action(
        actor=actor, action=f"{machine.kind.lower()}.update", object_type=type(process).__name__,
        object_id=process.id, before=before, after={k: getattr(process, k) for k in fields},
    )
    return process


# ============================
# Summary
# ============================
def settlement_summary(batch_id: int) -> Dict:
    from training_pay.services import compensation_service, transport_service

    directory.get_batch(batch_id)
    disbursement = repo.find_for_batch(DISBURSEMENT.kind, batch_id)
    clawback = repo.find_for_batch(CLAWBACK.kind, batch_id)

    compensation_total = compensation_service.total_for_batch(batch_id)
    transport_total = transport_service.total_for_batch(batch_id)
    ledger_total = compensation_total + transport_total
    refund_total = clawback.refund_total if clawback else 0

    return {
        "batch_id": batch_id,
        "disbursement": disbursement,
        "clawback": clawback,
        "compensation_total": compensation_total,
        "transport_total": transport_total,
        "ledger_total": ledger_total,
        "refund_total": refund_total,
        "net": ledger_total - refund_total,
    }
