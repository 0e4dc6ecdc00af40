# -*- coding: utf-8 -*-
"""
Repository layer for TransportRecord (pure DB): one record per (trainee, batch).
"""
from __future__ import annotations
from typing import Dict

from django.db import transaction, IntegrityError
from django.db.models import QuerySet

from training_pay.models import TransportRecord
from training_pay.utils.db import for_update


def records_for_batch(batch_id: int) -> QuerySet[TransportRecord]:
    return TransportRecord.objects.filter(batch_id=batch_id).select_related("trainee")


def saved_by_trainee(batch_id: int) -> Dict[int, TransportRecord]:
    return {r.trainee_id: r for r in records_for_batch(batch_id)}


@transaction.atomic
def upsert(*, trainee_id: int, batch_id: int, fields: Dict) -> tuple[TransportRecord, bool]:
    rec = for_update(TransportRecord.objects).filter(trainee_id=trainee_id, batch_id=batch_id).first()
    if rec is None:
        try:
            with transaction.atomic():
                return TransportRecord.objects.create(trainee_id=trainee_id, batch_id=batch_id, **fields), True
        except IntegrityError:
            rec = for_update(TransportRecord.objects).get(trainee_id=trainee_id, batch_id=batch_id)
    for k, v in fields.items():
        setattr(rec, k, v)
    rec.save(update_fields=[*fields.keys(), "updated_at"])
    return rec, False
