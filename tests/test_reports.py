"""
Tests for CSV and Excel reports.
"""
from datetime import date

import pytest
from openpyxl import load_workbook

from csv_handler import export_trips_to_csv, import_trips_from_csv
from excel_export import export_excel
from exceptions import DataStoreError


class TestCsv:
    """Trip CSV export/import."""

    def test_export_then_import(self, tmp_path, snapshot):
        path = str(tmp_path / "trips.csv")
        export_trips_to_csv(snapshot.trips, path)
        trips = import_trips_from_csv(path)

        assert [t.id for t in trips] == [t.id for t in snapshot.trips]
        first = trips[0]
        assert first.zone.name == "Oslo"
        assert first.distance == 100.0
        assert first.participant_ids == frozenset({"alice", "bob"})
        assert len(first.additional_costs) == 1
        cost = first.additional_costs[0]
        assert (cost.description, cost.amount, cost.paid_by_participant_id) == ("toll", 60.0, "carol")
        assert trips[1].additional_costs == ()

    def test_description_with_separators(self, tmp_path, make_trip):
        trip = make_trip(costs=[("ferry: Oslo; Nesodden", 90.0, "alice")])
        path = str(tmp_path / "trips.csv")
        export_trips_to_csv([trip], path)

        cost = import_trips_from_csv(path)[0].additional_costs[0]
        assert cost.description == "ferry: Oslo, Nesodden"
        assert cost.amount == 90.0

    def test_unknown_zone(self, tmp_path):
        path = tmp_path / "trips.csv"
        path.write_text(
            "id,date,car_id,distance,purpose,zone,participants,additional_costs\n"
            "t1,2024-05-01,car-1,10,x,Mars,,\n",
            encoding="utf-8",
        )
        with pytest.raises(DataStoreError) as exc_info:
            import_trips_from_csv(str(path))
        assert exc_info.value.details["line"] == 2


class TestExcel:
    """Excel report workbook."""

    def test_sheets_and_summary(self, tmp_path, snapshot):
        path = str(tmp_path / "report.xlsx")
        export_excel(snapshot, path)

        wb = load_workbook(path)
        assert wb.sheetnames == ["Roy's Car EL12345", "Summary", "Transfers"]

        trips = wb["Roy's Car EL12345"]
        assert trips.cell(2, 3).value == "Oslo"
        assert trips.cell(2, 9).value == "Alice, Bob"
        assert trips.cell(4, 1).value == "TOTALS"

        summary = wb["Summary"]
        rows = {r[0]: r for r in summary.iter_rows(min_row=2, max_row=4, values_only=True)}
        # Oslo 100 km split by two, toll 60 split by three
        assert rows["Alice"][4] == pytest.approx(175.0 + 20.0)
        assert rows["Carol"][5] == pytest.approx(60.0)

        transfers = list(wb["Transfers"].iter_rows(min_row=2, values_only=True))
        assert transfers == []

    def test_date_window(self, tmp_path, snapshot):
        path = str(tmp_path / "report.xlsx")
        export_excel(snapshot, path, start=date(2025, 1, 1))
        wb = load_workbook(path)
        assert wb.sheetnames == ["Summary", "Transfers"]
