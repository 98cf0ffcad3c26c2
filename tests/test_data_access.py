"""
Tests for snapshot mutations and the persisted store.
"""
import json
from datetime import datetime

import pytest

from config import CARS_KEY, PARTICIPANTS_KEY, TRIPS_KEY
from data_access import (
    CarShareStore,
    add_car,
    add_location,
    add_participant,
    add_trip,
    delete_car,
    delete_participant,
    delete_trip,
    move_location,
    remove_location,
    trips_for_car,
    update_car,
    update_trip,
    upsert_trips,
    validate_consistency,
)
from exceptions import InvalidReferenceError
from models import Car, CarShareData, CommonLocation, Coordinate, Participant, SavedTrip, build_zone_table


class TestSnapshotMutations:
    """Pure mutation functions return new snapshots."""

    def test_add_and_rename_car(self, snapshot):
        new_car = Car("Nils's Car", "EV67890", id="car-2")
        data = add_car(snapshot, new_car)
        assert [c.id for c in data.cars] == ["car-1", "car-2"]
        assert [c.id for c in snapshot.cars] == ["car-1"]

        renamed = update_car(data, Car("Family car", "EV67890", id="car-2"))
        assert renamed.cars[1].name == "Family car"

    def test_delete_car_cascades_trips(self, snapshot):
        data = delete_car(snapshot, "car-1")
        assert data.cars == []
        assert data.trips == []
        assert len(snapshot.trips) == 2

    def test_add_trip_requires_car(self, snapshot, make_trip):
        with pytest.raises(InvalidReferenceError) as exc_info:
            add_trip(snapshot, make_trip(car_id="missing"))
        assert exc_info.value.error_code == "unknown_car"

        data = add_trip(snapshot, make_trip(5))
        assert len(data.trips) == 3

    def test_update_trip_replaces_by_id(self, snapshot, make_trip):
        original = snapshot.trips[0]
        edited = make_trip(55, participants=["carol"])
        edited.id = original.id
        data = update_trip(snapshot, edited)

        assert data.trips[0].distance == 55
        assert data.trips[0].participant_ids == frozenset({"carol"})
        assert snapshot.trips[0].distance == 100

    def test_update_trip_rejects_unknown_car(self, snapshot, make_trip):
        edited = make_trip(car_id="gone")
        edited.id = snapshot.trips[0].id
        with pytest.raises(InvalidReferenceError):
            update_trip(snapshot, edited)

    def test_delete_trip(self, snapshot):
        data = delete_trip(snapshot, snapshot.trips[0].id)
        assert [t.id for t in data.trips] == [snapshot.trips[1].id]

    def test_trips_for_car(self, snapshot):
        assert len(trips_for_car(snapshot, "car-1")) == 2
        assert trips_for_car(snapshot, "car-9") == []

    def test_delete_participant_strips_trip_ids(self, snapshot):
        data = delete_participant(snapshot, "alice")
        assert [p.id for p in data.participants] == ["bob", "carol"]
        assert data.trips[0].participant_ids == frozenset({"bob"})
        assert "alice" in snapshot.trips[0].participant_ids

    def test_add_participant(self, snapshot):
        data = add_participant(snapshot, Participant("Dave", id="dave"))
        assert data.participants[-1].name == "Dave"

    def test_validate_consistency(self, snapshot, make_trip):
        data = CarShareData(
            cars=snapshot.cars,
            participants=snapshot.participants,
            trips=snapshot.trips + [
                make_trip(car_id="gone"),
                make_trip(participants=["alice", "ghost"]),
            ],
        )
        cleaned = validate_consistency(data)
        assert len(cleaned.trips) == 3
        assert cleaned.trips[-1].participant_ids == frozenset({"alice"})

    def test_locations(self):
        data = CarShareData()
        for name in ("Home", "Work", "Cabin"):
            data = add_location(data, CommonLocation(name, f"{name} street 1"))
        data = move_location(data, 2, 0)
        assert [loc.name for loc in data.locations] == ["Cabin", "Home", "Work"]
        data = remove_location(data, 1)
        assert [loc.name for loc in data.locations] == ["Cabin", "Work"]

    def test_upsert_trips(self, snapshot, make_trip):
        edited = make_trip(77)
        edited.id = snapshot.trips[0].id
        data = upsert_trips(snapshot, [edited, make_trip(3)])
        assert [t.distance for t in data.trips] == [77, 20, 3]

    def test_upsert_trips_rejects_whole_batch(self, snapshot, make_trip):
        with pytest.raises(InvalidReferenceError):
            upsert_trips(snapshot, [make_trip(3), make_trip(4, car_id="ghost-car")])
        assert len(snapshot.trips) == 2

    def test_deletes_clean_tracked_routes(self, snapshot):
        route = SavedTrip(
            car_id="car-1",
            participant_ids=["alice", "bob"],
            start_time=datetime(2024, 5, 1, 8),
            end_time=datetime(2024, 5, 1, 9),
            distance=5.0,
            coordinates=[Coordinate(59.9, 10.7), Coordinate(59.95, 10.8)],
        )
        data = CarShareData(cars=snapshot.cars, participants=snapshot.participants, saved_trips=[route])

        assert delete_participant(data, "alice").saved_trips[0].participant_ids == ["bob"]
        assert delete_car(data, "car-1").saved_trips == []
        assert route.participant_ids == ["alice", "bob"]

        stale = CarShareData(cars=[], participants=snapshot.participants, saved_trips=[route])
        assert validate_consistency(stale).saved_trips == []


class TestCarShareStore:
    """Persisted store behaviour."""

    def test_first_load_seeds_defaults(self, tmp_path):
        store = CarShareStore(str(tmp_path / "data.json"))
        data = store.load()

        assert [c.registration_number for c in data.cars] == ["EL12345", "EV67890"]
        assert [p.name for p in data.participants] == ["Pål", "Johanne", "Charlotte", "Julius"]
        assert (tmp_path / "data.json").exists()

    def test_mutations_are_persisted(self, tmp_path, car, alice, make_trip):
        path = str(tmp_path / "data.json")
        store = CarShareStore(path)
        store.load()
        store.add_car(car)
        store.add_participant(alice)
        store.add_trip(make_trip(12, participants=["alice"]))

        reloaded = CarShareStore(path).load()
        assert any(c.id == car.id for c in reloaded.cars)
        assert len(reloaded.trips) == 1
        assert reloaded.trips[0].participant_ids == frozenset({"alice"})

    def test_delete_car_through_store(self, tmp_path, car, make_trip):
        path = str(tmp_path / "data.json")
        store = CarShareStore(path)
        store.load()
        store.add_car(car)
        store.add_trip(make_trip())
        store.delete_car(car.id)

        with open(path, encoding="utf-8") as f:
            raw = json.load(f)
        assert raw[TRIPS_KEY] == []
        assert car.id not in [c["id"] for c in raw[CARS_KEY]]

    def test_load_cleans_stale_references(self, tmp_path):
        path = tmp_path / "data.json"
        path.write_text(json.dumps({
            CARS_KEY: [{"id": "c1", "name": "A", "registration_number": "X1"}],
            PARTICIPANTS_KEY: [{"id": "p1", "name": "Pia"}],
            TRIPS_KEY: [
                {"id": "t1", "car_id": "c1", "date": "2024-05-01T10:00:00", "distance": 10,
                 "purpose": "", "zone": "Oslo", "participant_ids": ["p1", "gone"], "additional_costs": []},
                {"id": "t2", "car_id": "c9", "date": "2024-05-01", "distance": 10,
                 "purpose": "", "zone": "Oslo", "participant_ids": [], "additional_costs": []},
            ],
        }), encoding="utf-8")

        data = CarShareStore(str(path)).load()
        assert [t.id for t in data.trips] == ["t1"]
        assert data.trips[0].participant_ids == frozenset({"p1"})

    def test_corrupt_file_resets(self, tmp_path):
        path = tmp_path / "data.json"
        path.write_text("{not json", encoding="utf-8")

        data = CarShareStore(str(path)).load()
        # empty data gets the seed records
        assert len(data.cars) == 2
        assert data.trips == []
        # the unreadable file is kept next to the new one
        assert (tmp_path / "data.json.bak").read_text(encoding="utf-8") == "{not json"

    def test_zone_missing_from_table_uses_builtin_rate(self, tmp_path, car, make_trip):
        path = str(tmp_path / "data.json")
        store = CarShareStore(path)
        store.load()
        store.add_car(car)
        store.add_trip(make_trip(10, zone="Other"))

        data = CarShareStore(path, zones=build_zone_table({"Oslo": 3.5})).load()
        assert len(data.trips) == 1
        assert data.trips[0].zone.rate_per_km == 4.5
        with open(path, encoding="utf-8") as f:
            assert len(json.load(f)[TRIPS_KEY]) == 1

    def test_unknown_zone_keeps_backup(self, tmp_path, car, make_trip):
        path = str(tmp_path / "data.json")
        store = CarShareStore(path)
        store.load()
        store.add_car(car)
        store.add_trip(make_trip(10))
        with open(path, encoding="utf-8") as f:
            raw = json.load(f)
        raw[TRIPS_KEY][0]["zone"] = "Mars"
        with open(path, "w", encoding="utf-8") as f:
            json.dump(raw, f)

        data = CarShareStore(path).load()
        assert data.trips == []
        with open(path + ".bak", encoding="utf-8") as f:
            assert json.load(f)[TRIPS_KEY][0]["zone"] == "Mars"
