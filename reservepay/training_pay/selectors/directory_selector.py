# -*- coding: utf-8 -*-
"""
Read-only access to the batch/trainee directory and the attendance source.
"""
from __future__ import annotations
from datetime import date as date_type
from typing import Dict, List, Optional, Set, Tuple

from django.db.models import QuerySet

from training_pay.models import (
    Batch, BatchTrainee, Trainee, TrainingSession, AttendanceOutcome, Unit,
)


def get_batch(batch_id: int) -> Batch:
    return Batch.objects.select_related("unit").get(id=batch_id)


def get_trainee(trainee_id: int) -> Trainee:
    return Trainee.objects.get(id=trainee_id)


def is_assigned(trainee_id: int, batch_id: int) -> bool:
    return BatchTrainee.objects.filter(trainee_id=trainee_id, batch_id=batch_id).exists()


def list_assignments(batch_id: int) -> QuerySet[BatchTrainee]:
    return (
        BatchTrainee.objects
        .filter(batch_id=batch_id)
        .select_related("trainee")
        .order_by("trainee__name", "trainee_id")
    )


def list_batch_trainees(batch_id: int) -> List[Trainee]:
    return [a.trainee for a in list_assignments(batch_id)]


def list_sessions(batch_id: int, counting_only: bool = False) -> QuerySet[TrainingSession]:
    qs = TrainingSession.objects.filter(batch_id=batch_id)
    if counting_only:
        qs = qs.filter(counts_toward_hours=True)
    return qs.order_by("date", "start_time", "id")


def has_counting_session(batch_id: int) -> bool:
    return TrainingSession.objects.filter(batch_id=batch_id, counts_toward_hours=True).exists()


def attendance_map(batch_id: int) -> Dict[Tuple[int, int], str]:
    rows = AttendanceOutcome.objects.filter(session__batch_id=batch_id).values_list("trainee_id", "session_id", "status")
    return {(t, s): status for t, s, status in rows}


def absent_days(batch_id: int) -> Set[Tuple[int, date_type]]:
    """(trainee_id, date) pairs where the trainee is ABSENT for a session on that day."""
    rows = (
        AttendanceOutcome.objects
        .filter(session__batch_id=batch_id, status=AttendanceOutcome.Status.ABSENT)
        .values_list("trainee_id", "session__date")
    )
    return {(t, d) for t, d in rows}


def unit_for_batch(batch: Batch) -> Optional[Unit]:
    if batch.unit_id and batch.unit.has_coordinates:
        return batch.unit
    return (
        Unit.objects
        .filter(latitude__isnull=False, longitude__isnull=False)
        .order_by("id")
        .first()
    )


def active_batch_for(trainee_id: int, day: date_type) -> Optional[Batch]:
    a = (
        BatchTrainee.objects
        .filter(trainee_id=trainee_id, batch__start_date__lte=day, batch__end_date__gte=day)
        .select_related("batch")
        .order_by("-batch__start_date", "-batch_id")
        .first()
    )
    return a.batch if a else None


def attendance_summary(batch_id: int) -> Dict[str, list]:
    trainees = list_batch_trainees(batch_id)
    sessions = list(list_sessions(batch_id))
    amap = attendance_map(batch_id)
    Status = AttendanceOutcome.Status

    by_trainee = []
    for t in trainees:
        counts = {Status.PRESENT: 0, Status.ABSENT: 0, Status.PENDING: 0}
        for s in sessions:
            st = amap.get((t.id, s.id))
            if st:
                counts[st] += 1
        total = sum(counts.values())
        by_trainee.append({
            "trainee_id": t.id,
            "name": t.name,
            "rank": t.rank,
            "present": counts[Status.PRESENT],
            "absent": counts[Status.ABSENT],
            "pending": counts[Status.PENDING],
            "total": total,
            "rate": round(counts[Status.PRESENT] * 100 / total) if total else 0,
        })

    by_session = []
    for s in sessions:
        statuses = [st for (tid, sid), st in amap.items() if sid == s.id]
        present = sum(1 for st in statuses if st == Status.PRESENT)
        by_session.append({
            "session_id": s.id,
            "title": s.title,
            "date": s.date,
            "present": present,
            "total": len(statuses),
            "rate": round(present * 100 / len(statuses)) if statuses else 0,
        })

    return {"by_trainee": by_trainee, "by_session": by_session}
