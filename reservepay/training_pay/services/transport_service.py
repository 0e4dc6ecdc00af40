# -*- coding: utf-8 -*-
"""
Transport reimbursement:
- calculate(): NO_ADDRESS -> geocode (GEO_FAIL) -> route (ROUTE_FAIL) -> formula
- calculate_for_batch(): per-trainee results, concurrent lookups, partial success, nothing persisted
- commit() persists accepted results; set_manual() bypasses the pipeline
"""
from __future__ import annotations
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field, asdict
from decimal import Decimal, ROUND_HALF_UP
from threading import Event
from typing import Dict, Iterable, List, Optional, Tuple
import logging

from django.db import transaction
from django.utils import timezone

from training_pay.clients.naver_maps import GeoPoint, RouteResult, get_maps_client
from training_pay.conf import TransportConfig, transport_config_from_settings
from training_pay.exceptions import GeocodeFailure, RouteFailure, ValidationError
from training_pay.models import TransportRecord, TransportStatus
from training_pay.repositories import transport_repository as repo
from training_pay.selectors import directory_selector as directory
from training_pay.services import audit_service

logger = logging.getLogger(__name__)


@dataclass
class TransportResult:
    status: str
    trainee_id: Optional[int] = None
    name: str = ""
    rank: str = ""
    address: str = ""
    distance_km: Optional[Decimal] = None
    amount: Optional[int] = None
    fuel_cost: Optional[int] = None
    toll_cost: Optional[int] = None
    error: str = ""
    saved_amount: Optional[int] = None
    is_manual: bool = False

    @property
    def ok(self) -> bool:
        return self.status == TransportStatus.OK

    def as_dict(self) -> Dict:
        return asdict(self)


@dataclass
class BatchCalculation:
    batch_id: int
    unit_name: str
    results: List[TransportResult] = field(default_factory=list)
    cancelled: bool = False

    def counts(self) -> Dict[str, int]:
        out: Dict[str, int] = {}
        for r in self.results:
            out[r.status] = out.get(r.status, 0) + 1
        return out


# ============================
# Formula
# ============================
def _round_unit(value: Decimal) -> int:
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def toll_for(route: RouteResult, config: TransportConfig) -> int:
    if route.toll_fare:
        return int(route.toll_fare)
    if route.has_toll_road:
        return _round_unit(config.toll_estimate_base + config.toll_estimate_per_km * route.distance_km)
    return 0


def amount_for(distance_km, toll: int, config: Optional[TransportConfig] = None) -> Tuple[int, int, int]:
    """(amount, fuel_cost, toll_cost). Short trips pay the flat fee with no fuel/toll split."""
    cfg = config or transport_config_from_settings()
    km = Decimal(str(distance_km))
    if km <= cfg.short_distance_km:
        return cfg.flat_fee, 0, 0
    fuel = _round_unit(km * cfg.fuel_price_per_liter / cfg.fuel_efficiency_km_per_liter)
    return fuel + int(toll), fuel, int(toll)


# ============================
# Pipeline
# ============================
def calculate(address: str, destination: GeoPoint, client, config: Optional[TransportConfig] = None) -> TransportResult:
    cfg = config or transport_config_from_settings()
    address = (address or "").strip()
    if not address:
        return TransportResult(status=TransportStatus.NO_ADDRESS)

    try:
        origin = client.geocode(address)
    except GeocodeFailure as e:
        return TransportResult(status=TransportStatus.GEO_FAIL, address=address, error=str(e))

    try:
        route = client.route(origin, destination)
    except RouteFailure as e:
        return TransportResult(status=TransportStatus.ROUTE_FAIL, address=address, error=str(e))

    amount, fuel, toll = amount_for(route.distance_km, toll_for(route, cfg), cfg)
    return TransportResult(
        status=TransportStatus.OK, address=address, distance_km=route.distance_km,
        amount=amount, fuel_cost=fuel, toll_cost=toll,
    )


def _quote(trainee, destination: GeoPoint, client, cfg: TransportConfig, cancel_event: Event) -> Optional[TransportResult]:
    if cancel_event.is_set():
        return None
    try:
        res = calculate(trainee.address, destination, client, cfg)
    except Exception as e:  # itemized, siblings keep running
        logger.exception("[transport] trainee=%s unexpected failure", trainee.id)
        res = TransportResult(status=TransportStatus.ERROR, error=str(e))
    res.trainee_id = trainee.id
    res.name = trainee.name
    res.rank = trainee.rank
    res.address = trainee.full_address
    return res


def calculate_for_batch(
    batch_id: int, client=None, config: Optional[TransportConfig] = None,
    cancel_event: Optional[Event] = None,
) -> BatchCalculation:
    cfg = config or transport_config_from_settings()
    cancel_event = cancel_event or Event()

    batch = directory.get_batch(batch_id)
    unit = directory.unit_for_batch(batch)
    if unit is None:
        raise ValidationError("No unit with coordinates is registered.")
    trainees = directory.list_batch_trainees(batch_id)
    if not trainees:
        raise ValidationError("Batch has no trainees.")
    saved = repo.saved_by_trainee(batch_id)

    client = client or get_maps_client()
    destination = GeoPoint(lat=float(unit.latitude), lng=float(unit.longitude))

    with ThreadPoolExecutor(max_workers=max(1, cfg.max_workers)) as pool:
        futures = [pool.submit(_quote, t, destination, client, cfg, cancel_event) for t in trainees]
        quotes = [f.result() for f in futures]

    out = BatchCalculation(batch_id=batch_id, unit_name=unit.name, cancelled=cancel_event.is_set())
    for res in quotes:
        if res is None:
            continue
        rec = saved.get(res.trainee_id)
        if rec is not None:
            res.saved_amount, res.is_manual = rec.amount, rec.is_manual
        if not res.ok:
            logger.warning("[transport] batch=%s trainee=%s %s %s", batch_id, res.trainee_id, res.status, res.error)
        out.results.append(res)

    logger.info("[transport] batch=%s calculated=%s cancelled=%s %s",
                batch_id, len(out.results), out.cancelled, out.counts())
    return out


# ============================
# Persistence
# ============================
@transaction.atomic
def commit(batch_id: int, records: Iterable[Dict], actor: Optional[int] = None) -> Dict[str, list]:
    """
    Persist accepted calculation results. Overwrites manual values and clears is_manual.
    Non-OK entries and trainees outside the batch are skipped.
    """
    directory.get_batch(batch_id)
    assigned = {t.id for t in directory.list_batch_trainees(batch_id)}
    now = timezone.now()
    saved, skipped = [], []

    for rec in records:
        trainee_id = rec.get("trainee_id")
        status = rec.get("status", TransportStatus.OK)
        if trainee_id not in assigned:
            skipped.append({"trainee_id": trainee_id, "reason": "not assigned to batch"})
            continue
        if status != TransportStatus.OK or rec.get("amount") is None:
            skipped.append({"trainee_id": trainee_id, "reason": f"status {status}"})
            continue
        obj, _ = repo.upsert(trainee_id=trainee_id, batch_id=batch_id, fields={
            "amount": int(rec["amount"]),
            "address": rec.get("address") or "",
            "distance_km": rec.get("distance_km"),
            "fuel_cost": rec.get("fuel_cost"),
            "toll_cost": rec.get("toll_cost"),
            "status": TransportStatus.OK,
            "is_manual": False,
            "calculated_at": now,
        })
        saved.append(obj)

    audit_service.log_action(
        actor=actor, action="transport.commit", object_type="Batch", object_id=batch_id,
        after={"saved": [r.trainee_id for r in saved], "skipped": skipped},
    )
    logger.info("[transport] commit batch=%s saved=%s skipped=%s", batch_id, len(saved), len(skipped))
    return {"saved": saved, "skipped": skipped}


@transaction.atomic
def set_manual(
    trainee_id: int, batch_id: int, amount: int, address: Optional[str] = None,
    note: str = "", actor: Optional[int] = None,
) -> TransportRecord:
    if amount is None or int(amount) < 0:
        raise ValidationError("Amount must be >= 0")
    if not directory.is_assigned(trainee_id, batch_id):
        raise ValidationError(f"Trainee {trainee_id} is not assigned to batch {batch_id}")
    previous = repo.records_for_batch(batch_id).filter(trainee_id=trainee_id).first()
    fields = {"amount": int(amount), "is_manual": True, "status": TransportStatus.OK, "note": note or ""}
    if address is not None:
        fields["address"] = address
    rec, _ = repo.upsert(trainee_id=trainee_id, batch_id=batch_id, fields=fields)
    audit_service.log_action(
        actor=actor, action="transport.manual", object_type="TransportRecord", object_id=rec.id,
        before={"amount": previous.amount, "is_manual": previous.is_manual} if previous else None,
        after={"amount": rec.amount, "is_manual": True, "note": rec.note},
    )
    return rec


def total_for_batch(batch_id: int) -> int:
    return sum(r.amount for r in repo.records_for_batch(batch_id))
