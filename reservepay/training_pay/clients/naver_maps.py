# ============================================
# training_pay/clients/naver_maps.py
# ============================================
import logging
import re
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Optional

import requests
from django.utils.module_loading import import_string

from training_pay.conf import maps_settings
from training_pay.exceptions import GeocodeFailure, RouteFailure

logger = logging.getLogger(__name__)

# "(..)" segments, trailing "12-34", trailing "101동 302호"
_SIMPLIFY_PATTERNS = (
    (re.compile(r"\(.*?\)"), ""),
    (re.compile(r"\d+-\d+$"), ""),
    (re.compile(r"\s+\d+동\s*\d*호?$"), ""),
)


@dataclass(frozen=True)
class GeoPoint:
    lat: float
    lng: float


@dataclass(frozen=True)
class RouteResult:
    distance_km: Decimal
    has_toll_road: bool
    toll_fare: Optional[int] = None


def simplify_address(address: str) -> str:
    text = address or ""
    for pattern, repl in _SIMPLIFY_PATTERNS:
        text = pattern.sub(repl, text.strip())
    return text.strip()


def meters_to_km(distance_m) -> Decimal:
    return (Decimal(str(distance_m)) / Decimal(1000)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


class NaverMapsClient:
    """Naver Cloud Maps: geocoding + driving directions."""

    def __init__(self, client_id: str = "", client_secret: str = "", *,
                 geocode_url: str = "", directions_url: str = "", timeout: float = 8):
        self.client_id = client_id
        self.client_secret = client_secret
        self.geocode_url = geocode_url
        self.directions_url = directions_url
        self.timeout = timeout

    @classmethod
    def from_settings(cls, raw: Dict) -> "NaverMapsClient":
        return cls(
            raw.get("NAVER_MAP_CLIENT_ID", ""),
            raw.get("NAVER_MAP_CLIENT_SECRET", ""),
            geocode_url=raw.get("NAVER_GEOCODE_URL", ""),
            directions_url=raw.get("NAVER_DIRECTIONS_URL", ""),
            timeout=float(raw.get("MAPS_TIMEOUT", 8)),
        )

    @property
    def headers(self) -> Dict[str, str]:
        return {
            "X-NCP-APIGW-API-KEY-ID": self.client_id,
            "X-NCP-APIGW-API-KEY": self.client_secret,
        }

    def _get(self, url: str, params: Dict) -> Dict:
        response = requests.get(url, params=params, headers=self.headers, timeout=self.timeout)
        response.raise_for_status()
        return response.json()

    def _geocode_once(self, query: str) -> Optional[GeoPoint]:
        data = self._get(self.geocode_url, {"query": query})
        addresses = data.get("addresses") or []
        if not addresses:
            return None
        first = addresses[0]
        return GeoPoint(lat=float(first["y"]), lng=float(first["x"]))

    def geocode(self, address: str) -> GeoPoint:
        """Resolve an address; a simplified form is tried when the full text has no match."""
        try:
            point = self._geocode_once(address)
            if point is None:
                simplified = simplify_address(address)
                if simplified and simplified != address:
                    point = self._geocode_once(simplified)
        except (requests.RequestException, ValueError, KeyError) as e:
            logger.warning("[maps] geocode failed for %r: %s", address, e)
            raise GeocodeFailure(str(e)) from e
        if point is None:
            raise GeocodeFailure(f"No match for address {address!r}")
        return point

    def route(self, origin: GeoPoint, dest: GeoPoint) -> RouteResult:
        params = {"start": f"{origin.lng},{origin.lat}", "goal": f"{dest.lng},{dest.lat}"}
        try:
            data = self._get(self.directions_url, params)
        except (requests.RequestException, ValueError) as e:
            logger.warning("[maps] route failed %s -> %s: %s", origin, dest, e)
            raise RouteFailure(str(e)) from e

        routes = (data.get("route") or {}).get("traoptimal") or []
        if data.get("code") != 0 or not routes:
            raise RouteFailure(data.get("message") or "No route found")
        summary = routes[0].get("summary") or {}
        if summary.get("distance") is None:
            raise RouteFailure("Route summary has no distance")
        toll_fare = int(summary.get("tollFare") or 0)
        return RouteResult(
            distance_km=meters_to_km(summary["distance"]),
            has_toll_road=toll_fare > 0,
            toll_fare=toll_fare or None,
        )


def get_maps_client():
    dotted, raw = maps_settings()
    cls = import_string(dotted)
    if hasattr(cls, "from_settings"):
        return cls.from_settings(raw)
    return cls()
