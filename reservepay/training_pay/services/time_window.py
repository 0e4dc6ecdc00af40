# -*- coding: utf-8 -*-
"""
Training session time window -> billable hours + weekend flag.

Billable minutes = (end - start) minus the minute overlap with the session's
lunch window. Missing times give zero hours; a non-positive window is treated
as zero minutes.
"""
from __future__ import annotations
from dataclasses import dataclass
from datetime import date as date_type, datetime, time
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Union

from training_pay.conf import LunchWindow, parse_hhmm
from training_pay.exceptions import ValidationError

TimeLike = Union[str, time, None]


@dataclass(frozen=True)
class WindowResult:
    hours: Decimal
    is_weekend: bool
    raw_minutes: int = 0
    lunch_minutes: int = 0


def _to_minutes(value: TimeLike, field_name: str) -> Optional[int]:
    if value is None or value == "":
        return None
    if isinstance(value, time):
        return value.hour * 60 + value.minute
    try:
        t = parse_hhmm(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Malformed {field_name}: {value!r} (expected HH:MM)")
    return t.hour * 60 + t.minute


def _mins_overlap(a_start: int, a_end: int, b_start: int, b_end: int) -> int:
    return max(0, min(a_end, b_end) - max(a_start, b_start))


def is_weekend_day(day) -> bool:
    # Saturday=5, Sunday=6 on the local civil date
    if isinstance(day, datetime):
        from django.utils import timezone
        day = timezone.localdate(day) if timezone.is_aware(day) else day.date()
    return day.weekday() >= 5


def billable_minutes(start: TimeLike, end: TimeLike, lunch: Optional[LunchWindow] = None) -> tuple[int, int]:
    """Return (raw_minutes, lunch_overlap_minutes)."""
    s = _to_minutes(start, "start_time")
    e = _to_minutes(end, "end_time")
    if s is None or e is None:
        return 0, 0
    raw = max(0, e - s)
    if raw == 0 or lunch is None:
        return raw, 0
    overlap = _mins_overlap(s, e, _to_minutes(lunch.start, "lunch_start"), _to_minutes(lunch.end, "lunch_end"))
    return raw, overlap


def calculate(day: date_type, start: TimeLike, end: TimeLike, lunch: Optional[LunchWindow] = None) -> WindowResult:
    weekend = is_weekend_day(day)
    raw, lunch_min = billable_minutes(start, end, lunch)
    minutes = max(0, raw - lunch_min)
    hours = (Decimal(minutes) / Decimal(60)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return WindowResult(hours=hours, is_weekend=weekend, raw_minutes=raw, lunch_minutes=lunch_min)
