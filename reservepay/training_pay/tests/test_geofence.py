from math import degrees
from types import SimpleNamespace

import pytest

from training_pay.exceptions import NoActiveLocationError, OutOfRangeError, ValidationError
from training_pay.services.geofence import EARTH_RADIUS_M, Position, format_distance, haversine_m, validate

CENTER = (37.4, 127.1)


def loc(name="gate", lat=CENTER[0], lng=CENTER[1], radius_m=200, is_active=True):
    return SimpleNamespace(name=name, latitude=lat, longitude=lng, radius_m=radius_m, is_active=is_active)


def north_of(lat, lng, meters):
    return Position(lat + degrees(meters / EARTH_RADIUS_M), lng)


def test_haversine_known_distance():
    # Seoul City Hall -> Busan City Hall, roughly 325 km
    d = haversine_m(37.5665, 126.9780, 35.1796, 129.0756)
    assert 320_000 < d < 330_000
    assert haversine_m(*CENTER, *CENTER) == 0


def test_center_is_accepted():
    m = validate(Position(*CENTER), [loc()])
    assert m.distance_m == pytest.approx(0)
    assert m.location.name == "gate"


def test_just_inside_radius_accepted_and_radius_plus_one_rejected():
    assert validate(north_of(*CENTER, 199), [loc()]).distance_m == pytest.approx(199, abs=1e-3)
    with pytest.raises(OutOfRangeError) as exc:
        validate(north_of(*CENTER, 201), [loc()])
    assert exc.value.context["nearest_m"] == pytest.approx(201, abs=1e-3)


def test_distance_equal_to_radius_accepted_and_one_meter_beyond_rejected():
    p = north_of(*CENTER, 150)
    d = haversine_m(p.lat, p.lng, *CENTER)

    assert validate(p, [loc(radius_m=d)]).distance_m == d
    with pytest.raises(OutOfRangeError) as exc:
        validate(p, [loc(radius_m=d - 1)])
    assert exc.value.context["nearest_m"] == pytest.approx(d)


def test_closest_accepting_location_wins():
    far = loc("far", radius_m=5000)
    near = loc("near", lat=CENTER[0] + 0.001)
    m = validate(Position(CENTER[0] + 0.001, CENTER[1]), [far, near])
    assert m.location.name == "near"


def test_inactive_locations_are_ignored():
    with pytest.raises(NoActiveLocationError):
        validate(Position(*CENTER), [loc(is_active=False)])
    with pytest.raises(NoActiveLocationError):
        validate(Position(*CENTER), [])


def test_invalid_position():
    with pytest.raises(ValidationError):
        Position(91, 0)
    with pytest.raises(ValidationError):
        Position(0, -181)


def test_format_distance():
    assert format_distance(150.7) == "150 m"
    assert format_distance(2500) == "2.5 km"
