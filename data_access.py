"""
Data access for CarShare ledger.

Every mutation takes a CarShareData snapshot and returns a new one; inputs are
never modified. CarShareStore wraps these with load/save against a JSON file
so the app always works from the latest saved snapshot.
"""
from __future__ import annotations
import os
from dataclasses import replace
from typing import List, Mapping, Optional

from loguru import logger

from config import default_data_path, get_default_data, load_data, save_data
from exceptions import DataStoreError, InvalidReferenceError
from models import (
    Car,
    CarShareData,
    CommonLocation,
    Participant,
    SavedTrip,
    Trip,
    Zone,
)


def _require_car(data: CarShareData, car_id: str) -> None:
    if not any(c.id == car_id for c in data.cars):
        raise InvalidReferenceError(
            f"Cannot register trip for non-existent car {car_id}",
            error_code="unknown_car",
            details={"car_id": car_id},
        )


def validate_consistency(data: CarShareData) -> CarShareData:
    """Drop trips and tracked routes of unknown cars and strip unknown participant ids"""
    car_ids = {c.id for c in data.cars}
    participant_ids = {p.id for p in data.participants}
    trips = []
    for t in data.trips:
        if t.car_id not in car_ids:
            logger.warning(f"Dropping trip {t.id}: car {t.car_id} no longer exists")
            continue
        trips.append(replace(t, participant_ids=t.participant_ids & participant_ids))
    saved_trips = [
        replace(s, participant_ids=[pid for pid in s.participant_ids if pid in participant_ids])
        for s in data.saved_trips if s.car_id in car_ids
    ]
    return replace(data, trips=trips, saved_trips=saved_trips)


# ---------- Cars ----------
def add_car(data: CarShareData, car: Car) -> CarShareData:
    return replace(data, cars=data.cars + [car])


def update_car(data: CarShareData, car: Car) -> CarShareData:
    """Replace the car with the same id; unknown ids leave the snapshot unchanged"""
    return replace(data, cars=[car if c.id == car.id else c for c in data.cars])


def delete_car(data: CarShareData, car_id: str) -> CarShareData:
    """Delete a car together with all its trips and tracked routes"""
    return replace(
        data,
        cars=[c for c in data.cars if c.id != car_id],
        trips=[t for t in data.trips if t.car_id != car_id],
        saved_trips=[s for s in data.saved_trips if s.car_id != car_id],
    )


# ---------- Trips ----------
def add_trip(data: CarShareData, trip: Trip) -> CarShareData:
    _require_car(data, trip.car_id)
    return replace(data, trips=data.trips + [trip])


def update_trip(data: CarShareData, trip: Trip) -> CarShareData:
    """Full replace by id"""
    _require_car(data, trip.car_id)
    return replace(data, trips=[trip if t.id == trip.id else t for t in data.trips])


def upsert_trips(data: CarShareData, trips: List[Trip]) -> CarShareData:
    """Add or replace-by-id every trip; any unknown car rejects the whole batch"""
    known = {t.id for t in data.trips}
    for trip in trips:
        data = update_trip(data, trip) if trip.id in known else add_trip(data, trip)
        known.add(trip.id)
    return data


def delete_trip(data: CarShareData, trip_id: str) -> CarShareData:
    return replace(data, trips=[t for t in data.trips if t.id != trip_id])


def trips_for_car(data: CarShareData, car_id: str) -> List[Trip]:
    return [t for t in data.trips if t.car_id == car_id]


# ---------- Participants ----------
def add_participant(data: CarShareData, participant: Participant) -> CarShareData:
    return replace(data, participants=data.participants + [participant])


def delete_participant(data: CarShareData, participant_id: str) -> CarShareData:
    """Remove a participant and their id from every trip and tracked route"""
    return replace(
        data,
        participants=[p for p in data.participants if p.id != participant_id],
        trips=[replace(t, participant_ids=t.participant_ids - {participant_id}) for t in data.trips],
        saved_trips=[
            replace(s, participant_ids=[pid for pid in s.participant_ids if pid != participant_id])
            for s in data.saved_trips
        ],
    )


# ---------- Common locations ----------
def add_location(data: CarShareData, location: CommonLocation) -> CarShareData:
    return replace(data, locations=data.locations + [location])


def remove_location(data: CarShareData, index: int) -> CarShareData:
    locations = list(data.locations)
    del locations[index]
    return replace(data, locations=locations)


def move_location(data: CarShareData, source: int, destination: int) -> CarShareData:
    """Move the location at source so it ends up at index destination"""
    locations = list(data.locations)
    loc = locations.pop(source)
    locations.insert(destination, loc)
    return replace(data, locations=locations)


# ---------- Tracked trips ----------
def add_saved_trip(data: CarShareData, saved: SavedTrip) -> CarShareData:
    return replace(data, saved_trips=data.saved_trips + [saved])


class CarShareStore:
    """Owns the current snapshot and persists it after every mutation"""

    def __init__(self, path: Optional[str] = None, zones: Optional[Mapping[str, Zone]] = None):
        self.path = path or default_data_path()
        self.zones = zones
        self.data = CarShareData()

    def load(self) -> CarShareData:
        try:
            data = load_data(self.path, self.zones)
        except DataStoreError as e:
            backup = self.path + ".bak"
            os.replace(self.path, backup)
            logger.error(f"Error loading data: {e.message}; moved it to {backup}, starting with empty data")
            data = CarShareData()
        data = validate_consistency(data)
        if not data.cars and not data.participants:
            logger.info("No cars or participants registered, adding default data")
            data = get_default_data()
        self.data = data
        self.save()
        return self.data

    def save(self) -> None:
        save_data(self.data, self.path)

    def _commit(self, data: CarShareData) -> CarShareData:
        self.data = data
        self.save()
        return data

    def add_car(self, car: Car) -> CarShareData:
        return self._commit(add_car(self.data, car))

    def update_car(self, car: Car) -> CarShareData:
        return self._commit(update_car(self.data, car))

    def delete_car(self, car_id: str) -> CarShareData:
        return self._commit(delete_car(self.data, car_id))

    def add_trip(self, trip: Trip) -> CarShareData:
        return self._commit(add_trip(self.data, trip))

    def update_trip(self, trip: Trip) -> CarShareData:
        return self._commit(update_trip(self.data, trip))

    def upsert_trips(self, trips: List[Trip]) -> CarShareData:
        return self._commit(upsert_trips(self.data, trips))

    def delete_trip(self, trip_id: str) -> CarShareData:
        return self._commit(delete_trip(self.data, trip_id))

    def add_participant(self, participant: Participant) -> CarShareData:
        return self._commit(add_participant(self.data, participant))

    def delete_participant(self, participant_id: str) -> CarShareData:
        return self._commit(delete_participant(self.data, participant_id))

    def add_location(self, location: CommonLocation) -> CarShareData:
        return self._commit(add_location(self.data, location))

    def remove_location(self, index: int) -> CarShareData:
        return self._commit(remove_location(self.data, index))

    def move_location(self, source: int, destination: int) -> CarShareData:
        return self._commit(move_location(self.data, source, destination))

    def add_saved_trip(self, saved: SavedTrip) -> CarShareData:
        return self._commit(add_saved_trip(self.data, saved))
