import pytest
from datetime import date, datetime, timedelta
from math import degrees
from zoneinfo import ZoneInfo

from training_pay.exceptions import NoActiveLocationError, OutOfRangeError, SequenceError, ValidationError
from training_pay.models import AttendanceOutcome, AuditLog, CommutingRecord, GeoReferenceLocation
from training_pay.selectors import commuting_selector
from training_pay.services import commuting_service as commuting
from training_pay.services.geofence import EARTH_RADIUS_M, Position

KST = ZoneInfo("Asia/Seoul")
MORNING = datetime(2025, 3, 7, 8, 40, tzinfo=KST)
EVENING = datetime(2025, 3, 7, 17, 10, tzinfo=KST)
GATE = Position(37.4, 127.1)


def north(meters):
    return Position(GATE.lat + degrees(meters / EARTH_RADIUS_M), GATE.lng)


@pytest.mark.django_db
def test_check_in_at_center_opens_record(assignment, location):
    cap = commuting.validate_and_record(assignment.trainee_id, GATE, "CHECK_IN", now=MORNING)
    rec = cap.record
    assert cap.location.id == location.id and cap.distance_m == pytest.approx(0)
    assert rec.date == date(2025, 3, 7)
    assert rec.batch_id == assignment.batch_id
    assert rec.is_open and rec.check_in_location_id == location.id


@pytest.mark.django_db
def test_outside_radius_rejected_without_record(assignment, location):
    with pytest.raises(OutOfRangeError):
        commuting.validate_and_record(assignment.trainee_id, north(201), "CHECK_IN", now=MORNING)
    assert not CommutingRecord.objects.exists()


@pytest.mark.django_db
def test_no_active_location(assignment, location):
    GeoReferenceLocation.objects.update(is_active=False)
    with pytest.raises(NoActiveLocationError):
        commuting.validate_and_record(assignment.trainee_id, GATE, "CHECK_IN", now=MORNING)


@pytest.mark.django_db
def test_unknown_capture_type(assignment, location):
    with pytest.raises(ValidationError):
        commuting.validate_and_record(assignment.trainee_id, GATE, "LUNCH", now=MORNING)


@pytest.mark.django_db
def test_check_out_closes_record(assignment, location):
    commuting.validate_and_record(assignment.trainee_id, GATE, "CHECK_IN", now=MORNING)
    cap = commuting.validate_and_record(assignment.trainee_id, north(150), "CHECK_OUT", now=EVENING)
    assert cap.record.check_out_at == EVENING and not cap.record.is_open
    assert CommutingRecord.objects.count() == 1


@pytest.mark.django_db
def test_check_out_without_check_in(assignment, location):
    with pytest.raises(SequenceError):
        commuting.validate_and_record(assignment.trainee_id, GATE, "CHECK_OUT", now=EVENING)
    assert not CommutingRecord.objects.exists()


@pytest.mark.django_db
def test_second_check_in_rejected_and_record_unchanged(assignment, location):
    commuting.validate_and_record(assignment.trainee_id, GATE, "CHECK_IN", now=MORNING)
    with pytest.raises(SequenceError):
        commuting.validate_and_record(assignment.trainee_id, north(50), "CHECK_IN", now=MORNING + timedelta(hours=1))
    rec = CommutingRecord.objects.get()
    assert rec.check_in_at == MORNING


@pytest.mark.django_db
def test_second_check_out_rejected(assignment, location):
    commuting.validate_and_record(assignment.trainee_id, GATE, "CHECK_IN", now=MORNING)
    commuting.validate_and_record(assignment.trainee_id, GATE, "CHECK_OUT", now=EVENING)
    with pytest.raises(SequenceError):
        commuting.validate_and_record(assignment.trainee_id, GATE, "CHECK_OUT", now=EVENING + timedelta(minutes=5))
    assert CommutingRecord.objects.get().check_out_at == EVENING


@pytest.mark.django_db
def test_day_follows_local_time_zone(assignment, location):
    # 23:30 UTC on the 6th is 08:30 on the 7th in Seoul
    late_utc = datetime(2025, 3, 6, 23, 30, tzinfo=ZoneInfo("UTC"))
    rec = commuting.validate_and_record(assignment.trainee_id, GATE, "CHECK_IN", now=late_utc).record
    assert rec.date == date(2025, 3, 7)


@pytest.mark.django_db
def test_manual_entry_merges_into_one_record_per_day(assignment):
    day = date(2025, 3, 7)
    commuting.record_manual(assignment.trainee_id, day, check_in=MORNING, note="gate scanner down")
    rec = commuting.record_manual(assignment.trainee_id, day, check_out=EVENING, actor=4)

    assert CommutingRecord.objects.filter(trainee_id=assignment.trainee_id, date=day).count() == 1
    assert (rec.check_in_at, rec.check_out_at, rec.is_manual) == (MORNING, EVENING, True)
    assert rec.batch_id == assignment.batch_id
    assert AuditLog.objects.filter(action="commuting.manual").count() == 2


@pytest.mark.django_db
def test_manual_entry_validation(assignment):
    day = date(2025, 3, 7)
    with pytest.raises(ValidationError):
        commuting.record_manual(assignment.trainee_id, day)
    with pytest.raises(ValidationError):
        commuting.record_manual(assignment.trainee_id, day, check_in=EVENING, check_out=MORNING)
    commuting.record_manual(assignment.trainee_id, day, check_in=EVENING)
    with pytest.raises(ValidationError):
        commuting.record_manual(assignment.trainee_id, day, check_out=MORNING)


@pytest.mark.django_db
def test_summary_flags_uncounted_days(batch, assignment, sessions):
    tid = assignment.trainee_id
    commuting.record_manual(tid, date(2025, 3, 7), check_in=MORNING)
    commuting.record_manual(tid, date(2025, 3, 8), check_in=MORNING + timedelta(days=1))
    commuting.record_manual(tid, date(2025, 3, 9), check_in=MORNING + timedelta(days=2), batch_id=batch.id)
    AttendanceOutcome.objects.create(trainee_id=tid, session=sessions["weekend"], status="ABSENT")

    rows = {r["record"].date: r for r in commuting_selector.commuting_summary(batch.id)}
    assert rows[date(2025, 3, 7)]["counted"]
    assert rows[date(2025, 3, 8)]["reason"] == "absent"
    assert rows[date(2025, 3, 9)]["reason"] == "outside batch window"


@pytest.mark.django_db
def test_location_validation(db):
    with pytest.raises(ValidationError):
        commuting.create_location({"name": "bad", "latitude": 95, "longitude": 127, "radius_m": 100})
    with pytest.raises(ValidationError):
        commuting.create_location({"name": "bad", "latitude": 37, "longitude": 127, "radius_m": 0})
    loc = commuting.create_location({"name": "Gate 2", "latitude": 37.41, "longitude": 127.11, "radius_m": 150})
    assert commuting.deactivate_location(loc).is_active is False
    assert list(commuting_selector.list_locations(active_only=True)) == []
    assert commuting.activate_location(loc).is_active is True
