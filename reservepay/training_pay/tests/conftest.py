import pytest
from datetime import date
from decimal import Decimal

from training_pay.clients.naver_maps import GeoPoint, RouteResult
from training_pay.exceptions import GeocodeFailure, RouteFailure
from training_pay.models import (
    AttendanceOutcome, Batch, BatchTrainee, GeoReferenceLocation, Trainee, TrainingSession, Unit,
)

# 2025-03-07 is a Friday, 2025-03-08 a Saturday
WEEKDAY = date(2025, 3, 7)
WEEKEND = date(2025, 3, 8)


class FakeMapsClient:
    """Stands in for NaverMapsClient; records every call."""

    def __init__(self, points=None, routes=None, default_route=None):
        self.points = points or {}
        self.routes = routes or {}
        self.default_route = default_route
        self.calls = []

    def geocode(self, address):
        self.calls.append(("geocode", address))
        point = self.points.get(address)
        if isinstance(point, Exception):
            raise point
        if point is None:
            raise GeocodeFailure(f"No match for address {address!r}")
        return point

    def route(self, origin, dest):
        self.calls.append(("route", origin))
        r = self.routes.get(origin, self.default_route)
        if r is None:
            raise RouteFailure("No route found")
        return r


@pytest.fixture
def fake_maps():
    return FakeMapsClient


@pytest.fixture
def unit(db):
    return Unit.objects.create(
        name="52nd Reserve Training Unit", address="Gyeonggi-do",
        latitude=Decimal("37.400000"), longitude=Decimal("127.100000"),
    )


@pytest.fixture
def batch(db, unit):
    return Batch.objects.create(name="2025-1", start_date=WEEKDAY, end_date=WEEKEND, unit=unit)


@pytest.fixture
def trainee(db):
    return Trainee.objects.create(name="Kim Minsu", rank="SGT", service_number="22-70012345",
                                  address="Seoul Gangnam-gu Teheran-ro 1", address_detail="101-1203")


@pytest.fixture
def assignment(db, batch, trainee):
    return BatchTrainee.objects.create(batch=batch, trainee=trainee, status=BatchTrainee.Status.PRESENT)


@pytest.fixture
def sessions(db, batch):
    weekday = TrainingSession.objects.create(
        batch=batch, title="Marksmanship", date=WEEKDAY, start_time="09:00", end_time="17:00",
        lunch_window=TrainingSession.LunchWindow.STANDARD,
    )
    weekend = TrainingSession.objects.create(
        batch=batch, title="Field exercise", date=WEEKEND, start_time="09:00", end_time="15:00",
        lunch_window=TrainingSession.LunchWindow.NONE,
    )
    return {"weekday": weekday, "weekend": weekend}


@pytest.fixture
def present_everywhere(db, assignment, sessions):
    for s in sessions.values():
        AttendanceOutcome.objects.create(trainee=assignment.trainee, session=s, status=AttendanceOutcome.Status.PRESENT)
    return sessions


@pytest.fixture
def location(db):
    return GeoReferenceLocation.objects.create(
        name="Main gate", latitude=Decimal("37.400000"), longitude=Decimal("127.100000"), radius_m=200,
    )


@pytest.fixture
def route_km():
    def make(km, toll_fare=None, has_toll_road=None):
        toll = has_toll_road if has_toll_road is not None else bool(toll_fare)
        return RouteResult(distance_km=Decimal(str(km)), has_toll_road=toll, toll_fare=toll_fare)
    return make


@pytest.fixture
def home_point():
    return GeoPoint(lat=37.5, lng=127.03)
