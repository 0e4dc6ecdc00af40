# -*- coding: utf-8 -*-
"""
Engine configuration as explicit, immutable structs.

Calculators take a config argument; only the service edge reads Django
settings (settings.TRAINING_PAY) to build the defaults.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from datetime import time
from decimal import Decimal
from typing import Any, Dict, Mapping, Optional, Tuple

from django.conf import settings


def parse_hhmm(value: str) -> time:
    """'HH:MM' -> time. Raises ValueError on malformed input."""
    hh, mm = str(value).strip().split(":")
    return time(int(hh), int(mm))


@dataclass(frozen=True)
class LunchWindow:
    start: time
    end: time

    @classmethod
    def from_strings(cls, start: str, end: str) -> "LunchWindow":
        return cls(parse_hhmm(start), parse_hhmm(end))


@dataclass(frozen=True)
class CompensationConfig:
    standard_day_hours: int = 8
    weekday_base_rate: int = 100_000
    weekend_base_rate: int = 150_000
    lunch_windows: Mapping[str, LunchWindow] = field(default_factory=lambda: {
        "STANDARD": LunchWindow(time(11, 30), time(12, 30)),
        "EARLY": LunchWindow(time(11, 0), time(12, 0)),
    })

    def base_rate(self, is_weekend: bool) -> int:
        return self.weekend_base_rate if is_weekend else self.weekday_base_rate

    def lunch_window(self, kind: Optional[str]) -> Optional[LunchWindow]:
        if not kind:
            return None
        return self.lunch_windows.get(str(kind).upper())


@dataclass(frozen=True)
class TransportConfig:
    flat_fee: int = 4_000
    short_distance_km: Decimal = Decimal("30")
    fuel_price_per_liter: Decimal = Decimal("1486")
    fuel_efficiency_km_per_liter: Decimal = Decimal("13.3")
    toll_estimate_base: Decimal = Decimal("900")
    toll_estimate_per_km: Decimal = Decimal("44.3")
    max_workers: int = 4


def _engine_settings() -> Dict[str, Any]:
    return dict(getattr(settings, "TRAINING_PAY", {}) or {})


def compensation_config_from_settings() -> CompensationConfig:
    raw = _engine_settings()
    defaults = CompensationConfig()
    windows: Dict[str, LunchWindow] = dict(defaults.lunch_windows)
    for kind, bounds in (raw.get("LUNCH_WINDOWS") or {}).items():
        start, end = bounds
        windows[str(kind).upper()] = LunchWindow.from_strings(start, end)
    return CompensationConfig(
        standard_day_hours=int(raw.get("STANDARD_DAY_HOURS", defaults.standard_day_hours)),
        weekday_base_rate=int(raw.get("WEEKDAY_BASE_RATE", defaults.weekday_base_rate)),
        weekend_base_rate=int(raw.get("WEEKEND_BASE_RATE", defaults.weekend_base_rate)),
        lunch_windows=windows,
    )


def transport_config_from_settings() -> TransportConfig:
    raw = _engine_settings()
    d = TransportConfig()
    return TransportConfig(
        flat_fee=int(raw.get("TRANSPORT_FLAT_FEE", d.flat_fee)),
        short_distance_km=Decimal(str(raw.get("TRANSPORT_SHORT_DISTANCE_KM", d.short_distance_km))),
        fuel_price_per_liter=Decimal(str(raw.get("FUEL_PRICE_PER_LITER", d.fuel_price_per_liter))),
        fuel_efficiency_km_per_liter=Decimal(str(raw.get("FUEL_EFFICIENCY_KM_PER_LITER", d.fuel_efficiency_km_per_liter))),
        toll_estimate_base=Decimal(str(raw.get("TOLL_ESTIMATE_BASE", d.toll_estimate_base))),
        toll_estimate_per_km=Decimal(str(raw.get("TOLL_ESTIMATE_PER_KM", d.toll_estimate_per_km))),
        max_workers=int(raw.get("TRANSPORT_MAX_WORKERS", d.max_workers)),
    )


def maps_settings() -> Tuple[str, Dict[str, Any]]:
    raw = _engine_settings()
    return raw.get("MAPS_CLIENT", "training_pay.clients.naver_maps.NaverMapsClient"), raw
