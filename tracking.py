"""
Trip tracking: collect waypoints for a car and its participants while driving,
then store the route as a SavedTrip that can be turned into a regular Trip.
"""
from __future__ import annotations
from typing import Dict, List, Optional

from loguru import logger

from data_access import CarShareStore
from exceptions import TrackingError
from geo import GreatCircleRouter, Router
from models import Car, Participant, SavedTrip, Trip, TripData, TripWaypoint, Zone


class TripTracker:
    """Holds the in-progress selection and waypoint list for one tracked trip"""

    def __init__(self, store: CarShareStore, router: Optional[Router] = None):
        self.store = store
        self.router = router or GreatCircleRouter()
        self.selected_car: Optional[Car] = None
        self.selected_participants: Dict[str, Participant] = {}
        self.waypoints: List[TripWaypoint] = []

    @property
    def saved_trips(self) -> List[SavedTrip]:
        return self.store.data.saved_trips

    def select_car(self, car: Car) -> None:
        self.selected_car = car

    def toggle_participant(self, participant: Participant) -> None:
        if participant.id in self.selected_participants:
            del self.selected_participants[participant.id]
        else:
            self.selected_participants[participant.id] = participant

    def add_waypoint(self, waypoint: TripWaypoint) -> None:
        self.waypoints.append(waypoint)

    def remove_waypoint(self, index: int) -> None:
        del self.waypoints[index]

    def move_waypoint(self, source: int, destination: int) -> None:
        wp = self.waypoints.pop(source)
        self.waypoints.insert(destination, wp)

    def reset(self) -> None:
        self.selected_car = None
        self.selected_participants.clear()
        self.waypoints.clear()

    def save_trip(self, trip_data: TripData) -> SavedTrip:
        """
        Store the tracked route. Distance comes from the waypoints when there
        are at least two, otherwise from the recorded coordinates.
        """
        if self.selected_car is None:
            raise TrackingError("Please select a car for this trip", error_code="no_car")
        if not self.selected_participants:
            raise TrackingError("Please select at least one participant", error_code="no_participants")

        points = [w.coordinate for w in self.waypoints]
        if len(points) < 2:
            points = list(trip_data.coordinates)
        distance = self.router.route_distance_km(points)

        saved = SavedTrip(
            car_id=self.selected_car.id,
            participant_ids=list(self.selected_participants),
            start_time=trip_data.start_time,
            end_time=trip_data.end_time,
            distance=distance,
            coordinates=list(trip_data.coordinates),
            start_address=self.waypoints[0].address if self.waypoints else trip_data.start_address,
            end_address=self.waypoints[-1].address if self.waypoints else trip_data.end_address,
        )
        self.store.add_saved_trip(saved)
        logger.info(f"Saved tracked trip {saved.id}: {distance:.1f} km with {len(saved.participant_ids)} participant(s)")
        self.reset()
        return saved


def saved_trip_to_trip(saved: SavedTrip, zone: Zone, purpose: str = "") -> Trip:
    """Convert a tracked route into a registrable Trip"""
    if not purpose:
        ends = [a for a in (saved.start_address, saved.end_address) if a]
        purpose = " - ".join(ends)
    return Trip(
        car_id=saved.car_id,
        date=saved.start_time,
        distance=saved.distance,
        purpose=purpose,
        zone=zone,
        participant_ids=frozenset(saved.participant_ids),
    )
