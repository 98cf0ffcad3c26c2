"""
Data models for CarShare ledger
"""
from __future__ import annotations
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import FrozenSet, List, Mapping, Optional, Tuple


def new_id() -> str:
    """Generate an opaque record id"""
    return uuid.uuid4().hex


@dataclass(frozen=True)
class Zone:
    """Tariff tier with a fixed rate per kilometer"""
    name: str
    rate_per_km: float

    def __post_init__(self):
        if not self.rate_per_km > 0:
            raise ValueError(f"Zone {self.name!r} must have a positive rate, got {self.rate_per_km}")


DEFAULT_ZONE_RATES = {
    "Oslo": 3.5,
    "Akershus": 4.0,
    "Other": 4.5,
}


def build_zone_table(rates: Mapping[str, float]) -> Mapping[str, Zone]:
    """Build a read-only zone name -> Zone mapping"""
    return MappingProxyType({name: Zone(name, float(rate)) for name, rate in rates.items()})


ZONES: Mapping[str, Zone] = build_zone_table(DEFAULT_ZONE_RATES)


@dataclass
class Car:
    """Registered car"""
    name: str
    registration_number: str
    id: str = field(default_factory=new_id)


@dataclass
class Participant:
    """Person sharing the cars"""
    name: str
    id: str = field(default_factory=new_id)


@dataclass
class AdditionalCost:
    """Shared expense attached to a trip, fronted by one participant"""
    description: str
    amount: float
    paid_by_participant_id: str
    id: str = field(default_factory=new_id)


@dataclass
class Trip:
    """Single car usage"""
    car_id: str
    date: datetime
    distance: float  # kilometers
    purpose: str
    zone: Zone
    participant_ids: FrozenSet[str] = frozenset()
    additional_costs: Tuple[AdditionalCost, ...] = ()
    id: str = field(default_factory=new_id)

    def __post_init__(self):
        self.participant_ids = frozenset(self.participant_ids)
        self.additional_costs = tuple(self.additional_costs)


@dataclass
class CommonLocation:
    """Named address shortcut"""
    name: str
    address: str
    id: str = field(default_factory=new_id)


@dataclass(frozen=True)
class Coordinate:
    latitude: float
    longitude: float


class WaypointType(str, Enum):
    START = "start"
    STOP = "stop"
    END = "end"


@dataclass
class TripWaypoint:
    """Point on a tracked route"""
    coordinate: Coordinate
    address: str
    type: WaypointType
    arrival_time: Optional[datetime] = None
    id: str = field(default_factory=new_id)


@dataclass
class TripData:
    """Raw recorded route handed over when tracking stops"""
    coordinates: List[Coordinate]
    start_time: datetime
    end_time: datetime
    start_address: Optional[str] = None
    end_address: Optional[str] = None
    id: str = field(default_factory=new_id)


@dataclass
class SavedTrip:
    """Tracked route bound to a car and its participants"""
    car_id: str
    participant_ids: List[str]
    start_time: datetime
    end_time: datetime
    distance: float  # kilometers
    coordinates: List[Coordinate]
    start_address: Optional[str] = None
    end_address: Optional[str] = None
    id: str = field(default_factory=new_id)


@dataclass(frozen=True)
class ParticipantStats:
    """Per-participant aggregates over a set of trips"""
    participant: Participant
    trip_count: int
    total_distance: float
    total_share: float
    total_paid: float
    trip_costs: float  # distance-only part of total_share

    @property
    def balance(self) -> float:
        # positive -> should receive; negative -> should pay
        return self.total_paid - self.total_share


@dataclass(frozen=True)
class Transfer:
    """Suggested payment from a debtor to a creditor"""
    from_participant: Participant
    to_participant: Participant
    amount: float


@dataclass
class CarShareData:
    """Complete snapshot of everything the app stores"""
    cars: List[Car] = field(default_factory=list)
    trips: List[Trip] = field(default_factory=list)
    participants: List[Participant] = field(default_factory=list)
    locations: List[CommonLocation] = field(default_factory=list)
    saved_trips: List[SavedTrip] = field(default_factory=list)
    version: int = 1
