# -*- coding: utf-8 -*-
"""
Repository layer for CommutingRecord / GeoReferenceLocation (pure DB).
"""
from __future__ import annotations
from datetime import date as date_type
from typing import Dict, Optional

from django.db import transaction, IntegrityError
from django.db.models import QuerySet

from training_pay.models import CommutingRecord, GeoReferenceLocation
from training_pay.utils.db import for_update


def active_locations() -> QuerySet[GeoReferenceLocation]:
    return GeoReferenceLocation.objects.filter(is_active=True)


def get_day_locked(trainee_id: int, day: date_type) -> Optional[CommutingRecord]:
    return for_update(CommutingRecord.objects).filter(trainee_id=trainee_id, date=day).first()


def create(**fields) -> CommutingRecord:
    # savepoint so a unique (trainee, date) clash does not poison the outer transaction
    with transaction.atomic():
        return CommutingRecord.objects.create(**fields)


@transaction.atomic
def upsert_day(*, trainee_id: int, day: date_type, fields: Dict) -> tuple[CommutingRecord, bool]:
    rec = get_day_locked(trainee_id, day)
    if rec is None:
        try:
            return create(trainee_id=trainee_id, date=day, **fields), True
        except IntegrityError:
            rec = for_update(CommutingRecord.objects).get(trainee_id=trainee_id, date=day)
    for k, v in fields.items():
        setattr(rec, k, v)
    rec.save(update_fields=[*fields.keys(), "updated_at"])
    return rec, False


def save(rec: CommutingRecord, fields: Dict) -> CommutingRecord:
    for k, v in fields.items():
        setattr(rec, k, v)
    rec.save(update_fields=[*fields.keys(), "updated_at"])
    return rec
