# -*- coding: utf-8 -*-
"""
Compensation ledger service:
- sync(batch_id): recompute one row per (trainee, eligible session), keep overrides verbatim,
  delete rows whose session vanished or stopped counting
- set_override / totals
- per-row failures become zero-hour rows with sync_error; the batch never aborts
"""
from __future__ import annotations
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Optional, Tuple
import logging

from django.db import transaction
from django.db.models import Sum, F, Case, When, IntegerField, Value
from django.db.models.functions import Coalesce

from training_pay.conf import CompensationConfig, compensation_config_from_settings
from training_pay.exceptions import ValidationError
from training_pay.models import AttendanceOutcome, BatchTrainee, CompensationRow, TrainingSession
from training_pay.repositories import compensation_repository as repo
from training_pay.selectors import directory_selector as directory
from training_pay.services import audit_service, time_window
from training_pay.services.rate_table import rate

logger = logging.getLogger(__name__)

FINAL_RATE = Case(
    When(override_rate__isnull=False, then=F("override_rate")),
    default=F("daily_rate"),
    output_field=IntegerField(),
)


@dataclass
class RowResult:
    trainee_id: int
    session_id: int
    hours: Decimal = Decimal("0.00")
    is_weekend: bool = False
    daily_rate: int = 0
    final_rate: int = 0
    created: bool = False
    error: str = ""

    @property
    def ok(self) -> bool:
        return not self.error


@dataclass
class SyncResult:
    batch_id: int
    rows: List[RowResult] = field(default_factory=list)
    deleted: int = 0

    @property
    def failed(self) -> List[RowResult]:
        return [r for r in self.rows if r.error]

    @property
    def synced(self) -> int:
        return len(self.rows)


# ============================
# Eligibility
# ============================
def _eligible_pairs(batch_id: int) -> List[Tuple[int, TrainingSession]]:
    """
    (trainee, session) pairs that get a row:
    counting session AND (PRESENT outcome if attendance is taken, else assigned and not ABSENT).
    With attendance taken, a missing or PENDING outcome is unpaid until it resolves to PRESENT.
    """
    sessions = list(directory.list_sessions(batch_id, counting_only=True))
    if not sessions:
        return []
    assignments = list(directory.list_assignments(batch_id))
    outcomes = directory.attendance_map(batch_id)

    pairs = []
    for session in sessions:
        for a in assignments:
            if session.attendance_enabled:
                if outcomes.get((a.trainee_id, session.id)) != AttendanceOutcome.Status.PRESENT:
                    continue
            elif a.status == BatchTrainee.Status.ABSENT:
                continue
            pairs.append((a.trainee_id, session))
    return pairs


def _compute(session: TrainingSession, cfg: CompensationConfig) -> Tuple[time_window.WindowResult, int]:
    window = time_window.calculate(
        session.date, session.start_time, session.end_time, cfg.lunch_window(session.lunch_window),
    )
    return window, rate(window.hours, window.is_weekend, cfg)


# ============================
# Operations
# ============================
def sync(batch_id: int, config: Optional[CompensationConfig] = None, actor: Optional[int] = None) -> SyncResult:
    """Idempotent: a second run with unchanged inputs writes the same values."""
    cfg = config or compensation_config_from_settings()
    directory.get_batch(batch_id)  # DoesNotExist -> 404 at the view

    result = SyncResult(batch_id=batch_id)
    pairs = _eligible_pairs(batch_id)
    wanted = set()

    for trainee_id, session in pairs:
        wanted.add((trainee_id, session.id))
        item = RowResult(trainee_id=trainee_id, session_id=session.id)
        try:
            window, amount = _compute(session, cfg)
            item.hours, item.is_weekend, item.daily_rate = window.hours, window.is_weekend, amount
        except ValidationError as e:
            item.error = e.detail
            item.is_weekend = time_window.is_weekend_day(session.date)
            logger.warning("[ledger] batch=%s trainee=%s session=%s: %s", batch_id, trainee_id, session.id, e)

        outcome = repo.upsert_computed(
            trainee_id=trainee_id, session_id=session.id, training_hours=item.hours,
            is_weekend=item.is_weekend, daily_rate=item.daily_rate, sync_error=item.error,
        )
        row = outcome.row
        item.created = outcome.created
        item.final_rate = row.final_rate

        if row.is_overridden and outcome.previous_daily_rate not in (None, row.daily_rate):
            # the override now hides a different computed amount
            audit_service.log_action(
                actor=actor, action="ledger.recomputed_under_override", object_type="CompensationRow",
                object_id=row.id,
                before={"daily_rate": outcome.previous_daily_rate, "override_rate": row.override_rate},
                after={"daily_rate": row.daily_rate, "override_rate": row.override_rate},
            )
        result.rows.append(item)

    stale = repo.keys_for_batch(batch_id) - wanted
    result.deleted = repo.delete_pairs(batch_id, stale) if stale else 0

    if pairs:
        from training_pay.services import settlement_service
        settlement_service.ensure_disbursement(batch_id)

    logger.info(
        "[ledger] sync batch=%s rows=%s failed=%s deleted=%s",
        batch_id, result.synced, len(result.failed), result.deleted,
    )
    return result


@transaction.atomic
def set_override(trainee_id: int, session_id: int, amount: Optional[int], actor: Optional[int] = None) -> CompensationRow:
    if amount is not None and int(amount) < 0:
        raise ValidationError("Override amount must be >= 0")
    row, previous = repo.set_override(
        trainee_id=trainee_id, session_id=session_id, amount=None if amount is None else int(amount),
    )
    audit_service.log_action(
        actor=actor, action="ledger.override_cleared" if amount is None else "ledger.override_set",
        object_type="CompensationRow", object_id=row.id,
        before={"override_rate": previous, "daily_rate": row.daily_rate},
        after={"override_rate": row.override_rate, "daily_rate": row.daily_rate},
    )
    return row


def _sum_final(qs) -> int:
    return int(qs.aggregate(total=Coalesce(Sum(FINAL_RATE), Value(0)))["total"])


def total_for_batch(batch_id: int) -> int:
    return _sum_final(repo.rows_for_batch(batch_id))


def total_for_trainee(trainee_id: int, batch_id: int) -> int:
    return _sum_final(repo.rows_for_trainee(trainee_id, batch_id))


def totals_by_trainee(batch_id: int) -> Dict[int, int]:
    rows = (
        repo.rows_for_batch(batch_id)
        .order_by()
        .values("trainee_id")
        .annotate(total=Sum(FINAL_RATE))
    )
    return {r["trainee_id"]: int(r["total"] or 0) for r in rows}
