# -*- coding: utf-8 -*-
"""
Repository layer for CompensationRow (pure DB):
- upsert keyed by (trainee, session) under a row lock
- stale row cleanup, override writes, sums
- no business rules: the ledger service decides what to write
"""
from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Optional, Set, Tuple

from django.db import transaction, IntegrityError
from django.db.models import QuerySet
from django.utils import timezone

from training_pay.models import CompensationRow
from training_pay.utils.db import for_update


@dataclass
class UpsertOutcome:
    row: CompensationRow
    created: bool
    previous_daily_rate: Optional[int]


# ============================
# Base queries
# ============================
def base_qs() -> QuerySet[CompensationRow]:
    return CompensationRow.objects.select_related("session", "trainee")


def rows_for_batch(batch_id: int) -> QuerySet[CompensationRow]:
    return base_qs().filter(session__batch_id=batch_id, session__counts_toward_hours=True)


def rows_for_trainee(trainee_id: int, batch_id: int) -> QuerySet[CompensationRow]:
    return rows_for_batch(batch_id).filter(trainee_id=trainee_id)


def keys_for_batch(batch_id: int) -> Set[Tuple[int, int]]:
    return set(CompensationRow.objects.filter(session__batch_id=batch_id).values_list("trainee_id", "session_id"))


def get_locked(trainee_id: int, session_id: int) -> CompensationRow:
    return for_update(CompensationRow.objects).get(trainee_id=trainee_id, session_id=session_id)


# ============================
# Mutations
# ============================
@transaction.atomic
def upsert_computed(
    *, trainee_id: int, session_id: int, training_hours: Decimal, is_weekend: bool,
    daily_rate: int, sync_error: str = "",
) -> UpsertOutcome:
    """Write computed fields; override_rate is never touched here."""
    computed = {
        "training_hours": training_hours,
        "is_weekend": is_weekend,
        "daily_rate": daily_rate,
        "sync_error": (sync_error or "")[:255],
        "synced_at": timezone.now(),
    }
    row = for_update(CompensationRow.objects).filter(trainee_id=trainee_id, session_id=session_id).first()
    if row is None:
        try:
            with transaction.atomic():
                row = CompensationRow.objects.create(trainee_id=trainee_id, session_id=session_id, **computed)
            return UpsertOutcome(row=row, created=True, previous_daily_rate=None)
        except IntegrityError:
            # created concurrently; fall through to update
            row = get_locked(trainee_id, session_id)

    previous = row.daily_rate
    for k, v in computed.items():
        setattr(row, k, v)
    row.save(update_fields=[*computed.keys(), "updated_at"])
    return UpsertOutcome(row=row, created=False, previous_daily_rate=previous)


@transaction.atomic
def delete_pairs(batch_id: int, pairs: Iterable[Tuple[int, int]]) -> int:
    deleted = 0
    for trainee_id, session_id in pairs:
        n, _ = CompensationRow.objects.filter(
            session__batch_id=batch_id, trainee_id=trainee_id, session_id=session_id,
        ).delete()
        deleted += n
    return deleted


def delete_for_session(session_id: int) -> int:
    n, _ = CompensationRow.objects.filter(session_id=session_id).delete()
    return n


@transaction.atomic
def set_override(*, trainee_id: int, session_id: int, amount: Optional[int]) -> Tuple[CompensationRow, Optional[int]]:
    row = get_locked(trainee_id, session_id)
    previous = row.override_rate
    row.override_rate = amount
    row.save(update_fields=["override_rate", "updated_at"])
    return row, previous
