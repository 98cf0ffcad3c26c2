"""
Business logic and computations for CarShare ledger
"""
from __future__ import annotations
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Dict, Iterable, List, Optional, Union

from models import Car, Participant, ParticipantStats, Transfer, Trip

# Balances and remaining amounts below one cent count as settled
SETTLEMENT_EPSILON = 0.01


def trip_distance_cost(trip: Trip) -> float:
    """Distance cost of a trip: distance * zone rate"""
    return float(trip.distance) * trip.zone.rate_per_km


def trip_additional_costs_total(trip: Trip) -> float:
    """Sum of all additional costs attached to a trip"""
    return sum(float(c.amount) for c in trip.additional_costs)


def trip_total_cost(trip: Trip) -> float:
    """Distance cost plus additional costs"""
    return trip_distance_cost(trip) + trip_additional_costs_total(trip)


def cost_per_trip_participant(trip: Trip) -> float:
    """Distance cost split among the trip's own participants (0 if nobody joined)"""
    n = len(trip.participant_ids)
    if n == 0:
        return 0.0
    return trip_distance_cost(trip) / n


class TimeRange(Enum):
    WEEK = "Last 7 Days"
    MONTH = "Last 30 Days"
    YEAR = "Last 12 Months"
    ALL = "All Time"

    @property
    def days(self) -> int:
        return {
            TimeRange.WEEK: 7,
            TimeRange.MONTH: 30,
            TimeRange.YEAR: 365,
            TimeRange.ALL: 3650,
        }[self]


def filter_trips_by_date(
    trips: List[Trip],
    start: Optional[date],
    end: Optional[date]
) -> List[Trip]:
    """Filter trips by inclusive date range"""
    out = []
    for t in trips:
        td = t.date.date() if isinstance(t.date, datetime) else t.date
        if start and td < start:
            continue
        if end and td > end:
            continue
        out.append(t)
    return out


def filter_trips_by_range(
    trips: List[Trip],
    time_range: TimeRange,
    now: Optional[datetime] = None
) -> List[Trip]:
    """Keep trips newer than the range's cutoff, newest first"""
    now = now or datetime.now()
    cutoff = now - timedelta(days=time_range.days)
    kept = [t for t in trips if t.date >= cutoff]
    return sorted(kept, key=lambda t: t.date, reverse=True)


def search_trips(trips: List[Trip], cars: List[Car], text: str) -> List[Trip]:
    """Case-insensitive match on trip purpose, car name or registration number"""
    needle = text.strip().casefold()
    if not needle:
        return list(trips)
    car_map = {c.id: c for c in cars}
    out = []
    for t in trips:
        car = car_map.get(t.car_id)
        haystacks = [t.purpose]
        if car is not None:
            haystacks += [car.name, car.registration_number]
        if any(needle in h.casefold() for h in haystacks):
            out.append(t)
    return out


def compute_totals(trips: List[Trip]) -> Dict[str, float]:
    """Totals over a set of trips: distance, trip costs, additional costs, trip count"""
    return {
        "distance": sum(float(t.distance) for t in trips),
        "trip_costs": sum(trip_distance_cost(t) for t in trips),
        "additional_costs": sum(trip_additional_costs_total(t) for t in trips),
        "trips": len(trips),
    }


def compute_ledger(
    trips: List[Trip],
    participants: List[Participant]
) -> Dict[str, ParticipantStats]:
    """
    Compute per-participant statistics over an already filtered set of trips.

    Distance cost is split among each trip's participants; additional costs are
    split evenly across the whole roster. Returns participant id -> stats in
    roster order.
    """
    ids = [p.id for p in participants]
    trip_count = {pid: 0 for pid in ids}
    distance = {pid: 0.0 for pid in ids}
    trip_costs = {pid: 0.0 for pid in ids}
    paid = {pid: 0.0 for pid in ids}

    additional_pool = 0.0
    for t in trips:
        per_head = cost_per_trip_participant(t)
        for pid in t.participant_ids:
            # ids unknown to the roster contribute to nobody
            if pid in trip_count:
                trip_count[pid] += 1
                distance[pid] += float(t.distance)
                trip_costs[pid] += per_head
        for c in t.additional_costs:
            if c.paid_by_participant_id in paid:
                paid[c.paid_by_participant_id] += float(c.amount)
        additional_pool += trip_additional_costs_total(t)

    additional_share = additional_pool / len(participants) if participants else 0.0

    return {
        p.id: ParticipantStats(
            participant=p,
            trip_count=trip_count[p.id],
            total_distance=distance[p.id],
            total_share=trip_costs[p.id] + additional_share,
            total_paid=paid[p.id],
            trip_costs=trip_costs[p.id],
        ) for p in participants
    }


def sort_stats_by_share(stats: Dict[str, ParticipantStats]) -> List[ParticipantStats]:
    """Participants ordered by descending total share"""
    return sorted(stats.values(), key=lambda s: s.total_share, reverse=True)


def compute_settlements(
    stats: Union[Dict[str, ParticipantStats], Iterable[ParticipantStats]],
    eps: float = SETTLEMENT_EPSILON
) -> List[Transfer]:
    """
    Compute transfers to settle balances.
    Greedy settlement: largest debtor first pays creditors in descending order
    of credit. balance>0 creditor; balance<0 debtor. Ties keep roster order.
    """
    if isinstance(stats, dict):
        stats = stats.values()
    stats = list(stats)

    debtors = [(s.participant, -s.balance) for s in stats if s.balance < 0]
    creditors = [[s.participant, s.balance] for s in stats if s.balance > 0]
    # list.sort is stable, equal balances stay in roster order
    debtors.sort(key=lambda x: x[1], reverse=True)
    creditors.sort(key=lambda x: x[1], reverse=True)
    remaining = [c for c in creditors if c[1] >= eps]

    transfers = []
    for debtor, debt in debtors:
        while debt >= eps and remaining:
            creditor = remaining[0]
            amount = min(debt, creditor[1])
            transfers.append(Transfer(debtor, creditor[0], amount))
            debt -= amount
            creditor[1] -= amount
            if creditor[1] < eps:
                remaining.pop(0)

    return transfers
