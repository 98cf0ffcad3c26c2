"""
Configuration and data loading/saving for CarShare ledger
"""
from __future__ import annotations
import json
import os
from dataclasses import asdict
from typing import Mapping, Optional

from exceptions import DataStoreError
from models import (
    AdditionalCost,
    Car,
    CarShareData,
    CommonLocation,
    Coordinate,
    DEFAULT_ZONE_RATES,
    Participant,
    SavedTrip,
    Trip,
    Zone,
    ZONES,
    build_zone_table,
)
from utils import app_dir, parse_datetime

DATA_FILE = "carshare.json"
ZONES_FILE = "zones.json"

# Storage keys of the JSON document
CARS_KEY = "saved_cars"
TRIPS_KEY = "saved_trips"
PARTICIPANTS_KEY = "saved_participants"
LOCATIONS_KEY = "commonLocations"
SAVED_TRIPS_KEY = "savedTrips"


def default_data_path() -> str:
    return os.path.join(app_dir(), DATA_FILE)


def load_zones(path: str) -> Mapping[str, Zone]:
    """Load zone rates from JSON file, falling back to the built-in table"""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        return ZONES
    rates = data.get("zones") or DEFAULT_ZONE_RATES
    return build_zone_table(rates)


def get_default_zones() -> Mapping[str, Zone]:
    """Zone table from the app directory's zones.json, if any"""
    return load_zones(os.path.join(app_dir(), ZONES_FILE))


def get_default_data() -> CarShareData:
    """Seed data used when nothing has been registered yet"""
    return CarShareData(
        cars=[
            Car("Roy's Car", "EL12345"),
            Car("Nils's Car", "EV67890"),
        ],
        participants=[
            Participant("Pål"),
            Participant("Johanne"),
            Participant("Charlotte"),
            Participant("Julius"),
        ],
    )


def coordinate_to_dict(c: Coordinate) -> dict:
    return {"latitude": c.latitude, "longitude": c.longitude}


def dict_to_coordinate(d: dict) -> Coordinate:
    return Coordinate(float(d["latitude"]), float(d["longitude"]))


def trip_to_dict(t: Trip) -> dict:
    """Convert Trip to a JSON-ready dict; the zone is stored by name"""
    return {
        "id": t.id,
        "car_id": t.car_id,
        "date": t.date.isoformat(),
        "distance": t.distance,
        "purpose": t.purpose,
        "zone": t.zone.name,
        "participant_ids": sorted(t.participant_ids),
        "additional_costs": [asdict(c) for c in t.additional_costs],
    }


def dict_to_trip(d: dict, zones: Mapping[str, Zone] = ZONES) -> Trip:
    """
    Convert dict from JSON to Trip, resolving the zone name. Names missing from
    a configured table fall back to the built-in rates.
    """
    zone_name = d.get("zone")
    if zone_name in zones:
        zone = zones[zone_name]
    elif zone_name in DEFAULT_ZONE_RATES:
        zone = ZONES[zone_name]
    else:
        raise DataStoreError(
            f"Unknown zone {zone_name!r} for trip {d.get('id')}",
            error_code="unknown_zone",
            details={"zone": zone_name, "known": sorted(zones)},
        )
    return Trip(
        id=d["id"],
        car_id=d["car_id"],
        date=parse_datetime(d["date"]),
        distance=float(d.get("distance", 0.0)),
        purpose=d.get("purpose", ""),
        zone=zone,
        participant_ids=frozenset(d.get("participant_ids", [])),
        additional_costs=tuple(AdditionalCost(**c) for c in d.get("additional_costs", [])),
    )


def saved_trip_to_dict(s: SavedTrip) -> dict:
    return {
        "id": s.id,
        "car_id": s.car_id,
        "participant_ids": list(s.participant_ids),
        "start_time": s.start_time.isoformat(),
        "end_time": s.end_time.isoformat(),
        "distance": s.distance,
        "coordinates": [coordinate_to_dict(c) for c in s.coordinates],
        "start_address": s.start_address,
        "end_address": s.end_address,
    }


def dict_to_saved_trip(d: dict) -> SavedTrip:
    return SavedTrip(
        id=d["id"],
        car_id=d["car_id"],
        participant_ids=list(d.get("participant_ids", [])),
        start_time=parse_datetime(d["start_time"]),
        end_time=parse_datetime(d["end_time"]),
        distance=float(d.get("distance", 0.0)),
        coordinates=[dict_to_coordinate(c) for c in d.get("coordinates", [])],
        start_address=d.get("start_address"),
        end_address=d.get("end_address"),
    )


def data_to_dict(data: CarShareData) -> dict:
    """Convert CarShareData snapshot to dictionary for JSON serialization"""
    return {
        "version": data.version,
        CARS_KEY: [asdict(c) for c in data.cars],
        TRIPS_KEY: [trip_to_dict(t) for t in data.trips],
        PARTICIPANTS_KEY: [asdict(p) for p in data.participants],
        LOCATIONS_KEY: [asdict(loc) for loc in data.locations],
        SAVED_TRIPS_KEY: [saved_trip_to_dict(s) for s in data.saved_trips],
    }


def dict_to_data(d: dict, zones: Optional[Mapping[str, Zone]] = None) -> CarShareData:
    """Convert dictionary from JSON to CarShareData snapshot"""
    zones = zones if zones is not None else ZONES
    try:
        return CarShareData(
            version=d.get("version", 1),
            cars=[Car(**c) for c in d.get(CARS_KEY, [])],
            trips=[dict_to_trip(t, zones) for t in d.get(TRIPS_KEY, [])],
            participants=[Participant(**p) for p in d.get(PARTICIPANTS_KEY, [])],
            locations=[CommonLocation(**loc) for loc in d.get(LOCATIONS_KEY, [])],
            saved_trips=[dict_to_saved_trip(s) for s in d.get(SAVED_TRIPS_KEY, [])],
        )
    except (KeyError, TypeError, ValueError) as e:
        raise DataStoreError(f"Malformed data record: {e}", error_code="malformed_record") from e


def load_data(path: str, zones: Optional[Mapping[str, Zone]] = None) -> CarShareData:
    """Load snapshot from JSON file; a missing file gives an empty snapshot"""
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except FileNotFoundError:
        return CarShareData()
    except json.JSONDecodeError as e:
        raise DataStoreError(f"Data file {path} is not valid JSON: {e}", error_code="invalid_json") from e
    return dict_to_data(raw, zones)


def save_data(data: CarShareData, path: str) -> None:
    """Write snapshot atomically: dump to a temp file, then replace"""
    tmp = path + ".tmp"
    try:
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(data_to_dict(data), f, ensure_ascii=False, indent=2)
        os.replace(tmp, path)
    except OSError as e:
        raise DataStoreError(f"Could not write data file {path}: {e}", error_code="write_failed") from e
