# -*- coding: utf-8 -*-
"""
Geofenced commuting capture:
- validate_and_record(): geofence check, then check-in / check-out on the trainee's local day
- record_manual(): admin entry, no geofence, same one-record-per-day rule
- reference location CRUD
"""
from __future__ import annotations
from dataclasses import dataclass
from datetime import date as date_type, datetime
from typing import Dict, Optional
import logging

from django.db import transaction, IntegrityError
from django.utils import timezone

from training_pay.exceptions import SequenceError, ValidationError
from training_pay.models import CommutingRecord, GeoReferenceLocation
from training_pay.repositories import commuting_repository as repo
from training_pay.selectors import directory_selector as directory
from training_pay.services import audit_service, geofence
from training_pay.services.geofence import Position

logger = logging.getLogger(__name__)

CHECK_IN = "CHECK_IN"
CHECK_OUT = "CHECK_OUT"
CAPTURE_TYPES = (CHECK_IN, CHECK_OUT)


@dataclass
class Capture:
    record: CommutingRecord
    location: GeoReferenceLocation
    distance_m: float


def validate_and_record(trainee_id: int, position: Position, type: str, now: Optional[datetime] = None) -> Capture:
    """
    A second check-in on the same day and a check-out without an open check-in
    both raise SequenceError; the stored record is left as it was.
    """
    kind = str(type or "").upper()
    if kind not in CAPTURE_TYPES:
        raise ValidationError(f"type must be one of {', '.join(CAPTURE_TYPES)}")

    directory.get_trainee(trainee_id)
    now = now or timezone.now()
    day = timezone.localdate(now)
    match = geofence.validate(position, repo.active_locations())

    with transaction.atomic():
        rec = repo.get_day_locked(trainee_id, day)
        if kind == CHECK_IN:
            if rec is not None and rec.check_in_at is not None:
                raise SequenceError("Already checked in today.", trainee_id=trainee_id, date=str(day))
            fields = {
                "check_in_at": now,
                "check_in_lat": position.lat,
                "check_in_lng": position.lng,
                "check_in_location": match.location,
            }
            if rec is None:
                batch = directory.active_batch_for(trainee_id, day)
                try:
                    rec = repo.create(trainee_id=trainee_id, date=day, batch=batch, **fields)
                except IntegrityError:
                    raise SequenceError("Already checked in today.", trainee_id=trainee_id, date=str(day))
            else:
                rec = repo.save(rec, fields)
        else:
            if rec is None or rec.check_in_at is None:
                raise SequenceError("No check-in recorded today.", trainee_id=trainee_id, date=str(day))
            if rec.check_out_at is not None:
                raise SequenceError("Already checked out today.", trainee_id=trainee_id, date=str(day))
            rec = repo.save(rec, {
                "check_out_at": now,
                "check_out_lat": position.lat,
                "check_out_lng": position.lng,
                "check_out_location": match.location,
            })

    logger.info("[commuting] %s trainee=%s day=%s at %s (%s)",
                kind, trainee_id, day, match.location.name, geofence.format_distance(match.distance_m))
    return Capture(record=rec, location=match.location, distance_m=match.distance_m)


@transaction.atomic
def record_manual(
    trainee_id: int, day: date_type, check_in: Optional[datetime] = None, check_out: Optional[datetime] = None,
    note: str = "", batch_id: Optional[int] = None, actor: Optional[int] = None,
) -> CommutingRecord:
    if check_in is None and check_out is None:
        raise ValidationError("check_in or check_out is required")
    directory.get_trainee(trainee_id)

    existing = repo.get_day_locked(trainee_id, day)
    merged_in = check_in or (existing.check_in_at if existing else None)
    merged_out = check_out or (existing.check_out_at if existing else None)
    if merged_in and merged_out and merged_out < merged_in:
        raise ValidationError("check_out must not be before check_in")

    fields: Dict = {"is_manual": True, "note": note or ""}
    if check_in is not None:
        fields["check_in_at"] = check_in
    if check_out is not None:
        fields["check_out_at"] = check_out
    if batch_id is not None:
        fields["batch_id"] = batch_id
    elif existing is None or existing.batch_id is None:
        batch = directory.active_batch_for(trainee_id, day)
        fields["batch_id"] = batch.id if batch else None

    rec, created = repo.upsert_day(trainee_id=trainee_id, day=day, fields=fields)
    audit_service.log_action(
        actor=actor, action="commuting.manual", object_type="CommutingRecord", object_id=rec.id,
        before=None if created else {
            "check_in_at": existing.check_in_at.isoformat() if existing and existing.check_in_at else None,
            "check_out_at": existing.check_out_at.isoformat() if existing and existing.check_out_at else None,
        },
        after={
            "check_in_at": rec.check_in_at.isoformat() if rec.check_in_at else None,
            "check_out_at": rec.check_out_at.isoformat() if rec.check_out_at else None,
            "note": rec.note,
        },
    )
    return rec


# ============================
# Reference locations
# ============================
def _check_location(data: Dict) -> None:
    if "latitude" in data or "longitude" in data:
        Position(data.get("latitude", 0), data.get("longitude", 0))
    if "radius_m" in data and int(data["radius_m"]) <= 0:
        raise ValidationError("radius_m must be > 0")


def create_location(data: Dict) -> GeoReferenceLocation:
    _check_location(data)
    return GeoReferenceLocation.objects.create(**data)


def update_location(location: GeoReferenceLocation, data: Dict) -> GeoReferenceLocation:
    _check_location(data)
    for name in ("name", "latitude", "longitude", "radius_m", "is_active"):
        if name in data:
            setattr(location, name, data[name])
    location.save()
    return location


def activate_location(location: GeoReferenceLocation) -> GeoReferenceLocation:
    location.is_active = True
    location.save(update_fields=["is_active", "updated_at"])
    return location


def deactivate_location(location: GeoReferenceLocation) -> GeoReferenceLocation:
    location.is_active = False
    location.save(update_fields=["is_active", "updated_at"])
    return location


def delete_location(location: GeoReferenceLocation) -> None:
    location.delete()
