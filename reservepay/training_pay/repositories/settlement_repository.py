# -*- coding: utf-8 -*-
"""
Repository layer for settlement processes (pure DB).
Status writes are conditional on the status the caller read.
"""
from __future__ import annotations
from typing import Dict, Optional, Type, Union

from django.db import transaction
from django.utils import timezone

from training_pay.models import ClawbackProcess, DisbursementProcess
from training_pay.utils.db import for_update

Process = Union[DisbursementProcess, ClawbackProcess]

MODELS: Dict[str, Type[Process]] = {
    "DISBURSEMENT": DisbursementProcess,
    "CLAWBACK": ClawbackProcess,
}


def model_for(kind: str) -> Type[Process]:
    return MODELS[str(kind).upper()]


def get(kind: str, process_id: int) -> Process:
    return model_for(kind).objects.select_related("batch").get(id=process_id)


def get_locked(kind: str, process_id: int) -> Process:
    return for_update(model_for(kind).objects).get(id=process_id)


def find_for_batch(kind: str, batch_id: int) -> Optional[Process]:
    return model_for(kind).objects.filter(batch_id=batch_id).first()


@transaction.atomic
def get_or_create_disbursement(batch_id: int, **fields) -> tuple[DisbursementProcess, bool]:
    return DisbursementProcess.objects.get_or_create(batch_id=batch_id, defaults=fields)


@transaction.atomic
def create_clawback(batch_id: int, **fields) -> ClawbackProcess:
    return ClawbackProcess.objects.create(batch_id=batch_id, **fields)


def update_status_if(kind: str, process_id: int, *, expected: str, status: str, changes: Dict) -> int:
    """
    UPDATE ... WHERE id=? AND status=expected. Returns the number of rows written (0 or 1).
    Must run inside the caller's transaction.
    """
    return (
        model_for(kind).objects
        .filter(id=process_id, status=expected)
        .update(status=status, updated_at=timezone.now(), **changes)
    )


@transaction.atomic
def update_fields(process: Process, fields: Dict) -> Process:
    for k, v in fields.items():
        setattr(process, k, v)
    process.save(update_fields=[*fields.keys(), "updated_at"])
    return process
