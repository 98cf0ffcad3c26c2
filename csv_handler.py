"""
CSV export and import functionality for CarShare ledger
"""
from __future__ import annotations
import csv
from typing import List, Mapping, Optional

from exceptions import DataStoreError
from models import AdditionalCost, Trip, Zone, ZONES
from utils import parse_datetime, safe_float

HEADER = ['id', 'date', 'car_id', 'distance', 'purpose', 'zone', 'participants', 'additional_costs']


def _costs_to_str(costs) -> str:
    # payer:amount:description, ';' between costs
    return ';'.join(
        f"{c.paid_by_participant_id}:{c.amount}:{c.description.replace(';', ',')}" for c in costs
    )


def _str_to_costs(s: str) -> List[AdditionalCost]:
    costs = []
    for chunk in s.split(';'):
        parts = chunk.split(':', 2)
        if len(parts) < 2:
            continue
        payer, amount = parts[0].strip(), safe_float(parts[1].strip())
        description = parts[2] if len(parts) == 3 else ""
        costs.append(AdditionalCost(description=description, amount=amount, paid_by_participant_id=payer))
    return costs


def export_trips_to_csv(trips: List[Trip], filepath: str) -> None:
    """
    Export trips list to CSV file
    CSV columns: id, date, car_id, distance, purpose, zone, participants, additional_costs
    """
    with open(filepath, 'w', newline='', encoding='utf-8') as f:
        writer = csv.writer(f)
        writer.writerow(HEADER)

        for t in trips:
            writer.writerow([
                t.id,
                t.date.isoformat(),
                t.car_id,
                t.distance,
                t.purpose,
                t.zone.name,
                ';'.join(sorted(t.participant_ids)),
                _costs_to_str(t.additional_costs),
            ])


def import_trips_from_csv(filepath: str, zones: Optional[Mapping[str, Zone]] = None) -> List[Trip]:
    """
    Import trips list from CSV file
    Returns list of Trip objects
    """
    zones = zones if zones is not None else ZONES
    trips = []

    with open(filepath, 'r', encoding='utf-8') as f:
        reader = csv.DictReader(f)

        for line, row in enumerate(reader, start=2):
            zone = zones.get(row['zone'])
            if zone is None:
                raise DataStoreError(
                    f"Line {line}: unknown zone {row['zone']!r}",
                    error_code="unknown_zone",
                    details={"line": line, "zone": row['zone']},
                )
            participants = [p.strip() for p in (row.get('participants') or '').split(';') if p.strip()]

            trip = Trip(
                id=row['id'],
                car_id=row['car_id'],
                date=parse_datetime(row['date']),
                distance=safe_float(row['distance']),
                purpose=row.get('purpose', ''),
                zone=zone,
                participant_ids=frozenset(participants),
                additional_costs=tuple(_str_to_costs(row.get('additional_costs') or '')),
            )
            trips.append(trip)

    return trips
