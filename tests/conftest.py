"""
Shared fixtures for CarShare ledger tests.
"""
from datetime import datetime

import pytest

from models import AdditionalCost, Car, CarShareData, Participant, Trip, ZONES


@pytest.fixture
def alice():
    return Participant("Alice", id="alice")


@pytest.fixture
def bob():
    return Participant("Bob", id="bob")


@pytest.fixture
def carol():
    return Participant("Carol", id="carol")


@pytest.fixture
def roster(alice, bob, carol):
    return [alice, bob, carol]


@pytest.fixture
def car():
    return Car("Roy's Car", "EL12345", id="car-1")


@pytest.fixture
def make_trip(car):
    """Factory for trips on the fixture car"""
    def _make(distance=10.0, zone="Oslo", participants=(), costs=(), when=None, purpose="errand", car_id=None):
        return Trip(
            car_id=car_id or car.id,
            date=when or datetime(2024, 5, 1, 12, 0),
            distance=distance,
            purpose=purpose,
            zone=ZONES[zone],
            participant_ids=frozenset(participants),
            additional_costs=tuple(
                AdditionalCost(description=desc, amount=amount, paid_by_participant_id=payer)
                for desc, amount, payer in costs
            ),
        )
    return _make


@pytest.fixture
def snapshot(car, roster, make_trip):
    return CarShareData(
        cars=[car],
        participants=list(roster),
        trips=[
            make_trip(100, participants=["alice", "bob"], costs=[("toll", 60.0, "carol")]),
            make_trip(20, zone="Akershus", participants=["carol"]),
        ],
    )


@pytest.fixture
def data_home(tmp_path, monkeypatch):
    """Point the app directory at a temp dir"""
    monkeypatch.setenv("CARSHARE_HOME", str(tmp_path))
    return tmp_path
