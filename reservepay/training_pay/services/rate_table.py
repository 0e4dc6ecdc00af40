# -*- coding: utf-8 -*-
"""
Rate table: billable hours + weekend flag -> base amount.

A full standard day pays the weekday/weekend anchor; shorter days are prorated
and rounded half-up to a whole currency unit; longer days are capped at the anchor.
"""
from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Union

from training_pay.conf import CompensationConfig

DEFAULT_CONFIG = CompensationConfig()


def rate(hours, is_weekend: bool, config: Optional[CompensationConfig] = None) -> int:
    cfg = config or DEFAULT_CONFIG
    h = Decimal(str(hours or 0))
    if h <= 0:
        return 0
    base = cfg.base_rate(is_weekend)
    full_day = Decimal(cfg.standard_day_hours)
    if h >= full_day:
        return base
    amount = Decimal(base) * h / full_day
    return int(amount.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


# ---- Rate = Computed(amount) | Overridden(amount) ----
@dataclass(frozen=True)
class Computed:
    amount: int
    is_override = False


@dataclass(frozen=True)
class Overridden:
    amount: int
    computed: int
    is_override = True


Rate = Union[Computed, Overridden]


def resolve(daily_rate: int, override_rate: Optional[int]) -> Rate:
    if override_rate is None:
        return Computed(int(daily_rate or 0))
    return Overridden(int(override_rate), computed=int(daily_rate or 0))
