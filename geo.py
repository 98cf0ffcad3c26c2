"""
Distance and geocoding helpers for trip tracking
"""
from __future__ import annotations
import math
from typing import Dict, List, Mapping, Protocol

from exceptions import GeocodingError, RouteNotFoundError
from models import Coordinate

EARTH_RADIUS_M = 6_371_000.0


def haversine_m(a: Coordinate, b: Coordinate) -> float:
    """Great-circle distance in meters"""
    lat1, lat2 = math.radians(a.latitude), math.radians(b.latitude)
    dlat = lat2 - lat1
    dlon = math.radians(b.longitude - a.longitude)
    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    return 2 * EARTH_RADIUS_M * math.asin(math.sqrt(h))


class Router(Protocol):
    def route_distance_km(self, coordinates: List[Coordinate]) -> float:
        ...


class GreatCircleRouter:
    """Sums straight-line legs between consecutive points"""

    def route_distance_km(self, coordinates: List[Coordinate]) -> float:
        if len(coordinates) < 2:
            raise RouteNotFoundError(
                "no route found between the given points",
                error_code="route_not_found",
                details={"points": len(coordinates)},
            )
        meters = sum(haversine_m(a, b) for a, b in zip(coordinates, coordinates[1:]))
        return meters / 1000


class Geocoder(Protocol):
    def geocode(self, address: str) -> Coordinate:
        ...


class CommonLocationGeocoder:
    """
    Resolves common-location names or their addresses against a known
    coordinate table (address -> Coordinate).
    """

    def __init__(self, locations: Mapping[str, str], coordinates: Mapping[str, Coordinate]):
        self.locations: Dict[str, str] = dict(locations)  # name -> address
        self.coordinates: Dict[str, Coordinate] = dict(coordinates)

    def geocode(self, address: str) -> Coordinate:
        key = self.locations.get(address, address)
        try:
            return self.coordinates[key]
        except KeyError:
            raise GeocodingError(
                f"Could not validate the address {address!r}. Please try a more specific address.",
                error_code="address_not_found",
                details={"address": address},
            ) from None
