# -*- coding: utf-8 -*-
"""
Read side of the compensation ledger: per-trainee rows and a per-session overview.
"""
from __future__ import annotations
from collections import OrderedDict
from decimal import Decimal
from typing import Dict, List

from training_pay.models import CompensationRow
from training_pay.selectors import directory_selector as directory


def ledger_rows(batch_id: int) -> List[Dict]:
    """One entry per trainee of the batch, with that trainee's rows and total."""
    rows = (
        CompensationRow.objects
        .filter(session__batch_id=batch_id)
        .select_related("session")
        .order_by("session__date", "session__start_time", "session_id")
    )
    by_trainee: Dict[int, List[CompensationRow]] = {}
    for r in rows:
        by_trainee.setdefault(r.trainee_id, []).append(r)

    out = []
    for trainee in directory.list_batch_trainees(batch_id):
        mine = by_trainee.get(trainee.id, [])
        out.append({
            "trainee": trainee,
            "rows": mine,
            "hours": sum((r.training_hours for r in mine), Decimal("0.00")),
            "total": sum(r.final_rate for r in mine),
        })
    return out


def ledger_overview(batch_id: int) -> List[Dict]:
    """Per counting session: hours, weekend flag, computed rate, overrides, final total."""
    overview: "OrderedDict[int, Dict]" = OrderedDict()
    for s in directory.list_sessions(batch_id, counting_only=True):
        overview[s.id] = {
            "session": s,
            "hours": None,
            "is_weekend": None,
            "daily_rate": None,
            "trainees": 0,
            "overridden": 0,
            "errors": 0,
            "total": 0,
        }

    rows = CompensationRow.objects.filter(session__batch_id=batch_id, session__counts_toward_hours=True)
    for r in rows:
        entry = overview.get(r.session_id)
        if entry is None:
            continue
        entry["hours"] = r.training_hours
        entry["is_weekend"] = r.is_weekend
        entry["daily_rate"] = r.daily_rate
        entry["trainees"] += 1
        entry["overridden"] += int(r.is_overridden)
        entry["errors"] += int(bool(r.sync_error))
        entry["total"] += r.final_rate
    return list(overview.values())
