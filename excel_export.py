"""
Excel export functionality for CarShare ledger
"""
from __future__ import annotations
from datetime import date
from typing import Optional

from openpyxl import Workbook
from openpyxl.styles import Font, Alignment, PatternFill, Border, Side
from openpyxl.utils import get_column_letter

from models import CarShareData
from computations import (
    compute_ledger,
    compute_settlements,
    compute_totals,
    cost_per_trip_participant,
    filter_trips_by_date,
    trip_additional_costs_total,
    trip_distance_cost,
    trip_total_cost,
)


def _style_header(ws, row=1):
    """Apply header styling to worksheet row"""
    header_font = Font(bold=True, color="FFFFFF")
    fill = PatternFill("solid", fgColor="4F81BD")
    align = Alignment(horizontal="center", vertical="center")
    thin = Side(style="thin", color="A0A0A0")
    border = Border(left=thin, right=thin, top=thin, bottom=thin)
    for cell in ws[row]:
        cell.font = header_font
        cell.fill = fill
        cell.alignment = align
        cell.border = border


def _autosize_columns(ws, min_width=10, max_width=45):
    """Auto-size columns based on content"""
    for col in range(1, ws.max_column + 1):
        letter = get_column_letter(col)
        max_len = 0
        for cell in ws[letter]:
            if cell.value is None:
                continue
            max_len = max(max_len, len(str(cell.value)))
        ws.column_dimensions[letter].width = max(min_width, min(max_width, max_len + 2))


def _sheet_title(name: str, used: set) -> str:
    # Excel limits titles to 31 chars and forbids []:*?/\
    title = "".join(ch for ch in name if ch not in '[]:*?/\\')[:31] or "Car"
    base, n = title, 2
    while title in used:
        suffix = f" ({n})"
        title = base[:31 - len(suffix)] + suffix
        n += 1
    used.add(title)
    return title


def export_excel(
    data: CarShareData,
    filepath: str,
    start: Optional[date] = None,
    end: Optional[date] = None
) -> None:
    """
    Export trips to Excel file with multiple sheets:
    - One sheet per car listing its trips
    - Summary sheet (per participant)
    - Transfers sheet
    """
    wb = Workbook()
    # remove default sheet
    wb.remove(wb.active)

    names = {p.id: p.name for p in data.participants}
    trips = filter_trips_by_date(data.trips, start, end)
    used_titles = set()

    for car in data.cars:
        car_trips = sorted((t for t in trips if t.car_id == car.id), key=lambda t: t.date)
        if not car_trips:
            continue
        ws = wb.create_sheet(_sheet_title(f"{car.name} {car.registration_number}", used_titles))
        ws.append([
            "Date", "Purpose", "Zone", "Distance (km)", "Rate", "Distance cost",
            "Additional costs", "Total", "Participants", "Per participant",
        ])
        _style_header(ws, 1)
        ws.freeze_panes = "A2"

        for t in car_trips:
            who = ", ".join(sorted(names[pid] for pid in t.participant_ids if pid in names))
            ws.append([
                t.date.strftime("%Y-%m-%d"),
                t.purpose,
                t.zone.name,
                t.distance,
                t.zone.rate_per_km,
                trip_distance_cost(t),
                trip_additional_costs_total(t),
                trip_total_cost(t),
                who,
                cost_per_trip_participant(t),
            ])

        # Footer totals
        last = ws.max_row
        ws.append(["TOTALS"] + [""] * 9)
        trow = ws.max_row
        ws.cell(trow, 1).font = Font(bold=True)
        for col in (4, 6, 7, 8):
            letter = get_column_letter(col)
            ws.cell(trow, col).value = f"=SUM({letter}2:{letter}{last})"

        for r in range(2, ws.max_row + 1):
            for c in (4, 5, 6, 7, 8, 10):
                ws.cell(r, c).number_format = "0.00"
        _autosize_columns(ws)

    # Summary sheet
    ws = wb.create_sheet("Summary")
    stats = compute_ledger(trips, data.participants)
    ws.append(["Participant", "Trips", "Distance (km)", "Trip Costs", "Share", "Paid", "Balance (Paid-Share)"])
    _style_header(ws, 1)
    ws.freeze_panes = "A2"
    for s in stats.values():
        ws.append([s.participant.name, s.trip_count, s.total_distance, s.trip_costs,
                   s.total_share, s.total_paid, s.balance])
    totals = compute_totals(trips)
    ws.append([])
    ws.append(["Total distance", totals["distance"]])
    ws.append(["Trip costs", totals["trip_costs"]])
    ws.append(["Additional costs", totals["additional_costs"]])
    ws.append(["Trips", totals["trips"]])
    for r in range(2, ws.max_row + 1):
        for c in range(3, 8):
            ws.cell(r, c).number_format = "0.00"
    _autosize_columns(ws)

    # Transfers sheet
    ws = wb.create_sheet("Transfers")
    ws.append(["From (Debtor)", "To (Creditor)", "Amount"])
    _style_header(ws, 1)
    ws.freeze_panes = "A2"
    for tr in compute_settlements(stats):
        ws.append([tr.from_participant.name, tr.to_participant.name, tr.amount])
    for r in range(2, ws.max_row + 1):
        ws.cell(r, 3).number_format = "0.00"
    _autosize_columns(ws)

    wb.save(filepath)
