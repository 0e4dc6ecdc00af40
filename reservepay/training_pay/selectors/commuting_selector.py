# -*- coding: utf-8 -*-
from __future__ import annotations
from datetime import date as date_type
from typing import Dict, List, Optional

from django.db.models import Q, QuerySet

from training_pay.models import CommutingRecord, GeoReferenceLocation
from training_pay.selectors import directory_selector as directory


def list_locations(active_only: bool = False) -> QuerySet[GeoReferenceLocation]:
    qs = GeoReferenceLocation.objects.all()
    return qs.filter(is_active=True) if active_only else qs


def commuting_records(
    *, batch_id: Optional[int] = None, trainee_id: Optional[int] = None, day: Optional[date_type] = None,
) -> QuerySet[CommutingRecord]:
    qs = CommutingRecord.objects.select_related("trainee", "batch")
    if day is not None:
        qs = qs.filter(date=day)
    if trainee_id is not None:
        qs = qs.filter(trainee_id=trainee_id)
    elif batch_id is not None:
        assigned = directory.list_assignments(batch_id).values_list("trainee_id", flat=True)
        qs = qs.filter(Q(batch_id=batch_id) | Q(batch__isnull=True, trainee_id__in=list(assigned)))
    return qs.order_by("-date", "trainee__name")


def commuting_summary(batch_id: int) -> List[Dict]:
    """Every record of the batch with a `counted` flag; uncounted rows carry the reason."""
    batch = directory.get_batch(batch_id)
    absent = directory.absent_days(batch_id)

    rows = []
    for rec in commuting_records(batch_id=batch_id):
        reason = ""
        if not batch.covers(rec.date):
            reason = "outside batch window"
        elif (rec.trainee_id, rec.date) in absent:
            reason = "absent"
        rows.append({"record": rec, "counted": not reason, "reason": reason})
    return rows
