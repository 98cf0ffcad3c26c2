"""
CarShare ledger command line
- Show per-participant balances and suggested settlements for a time range.
- Export an Excel report (one sheet per car + summary + transfers) or CSV.

Run:
  python carshare.py summary --range month
  python carshare.py export-excel report.xlsx --start 2024-01-01

Dependencies:
  pip install openpyxl loguru
"""
from __future__ import annotations
import argparse
import sys
from typing import List, Optional

from loguru import logger

from computations import (
    TimeRange,
    compute_ledger,
    compute_settlements,
    compute_totals,
    filter_trips_by_range,
    sort_stats_by_share,
)
from config import get_default_zones
from csv_handler import export_trips_to_csv, import_trips_from_csv
from data_access import CarShareStore
from excel_export import export_excel
from exceptions import CarShareError
from logger import setup_logging
from utils import format_currency, format_distance, parse_date, payment_url

RANGES = {
    "week": TimeRange.WEEK,
    "month": TimeRange.MONTH,
    "year": TimeRange.YEAR,
    "all": TimeRange.ALL,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="carshare", description="Car-sharing expense ledger")
    parser.add_argument("--data", help="path to the data file (default: app directory)")
    parser.add_argument("--log-level", default="WARNING")
    parser.add_argument("--log-file")
    sub = parser.add_subparsers(dest="command", required=True)

    summary = sub.add_parser("summary", help="print balances and settlements")
    summary.add_argument("--range", choices=sorted(RANGES), default="month")
    summary.add_argument("--pay-links", action="store_true", help="show payment app links")

    excel = sub.add_parser("export-excel", help="write an Excel report")
    excel.add_argument("path")
    excel.add_argument("--start", type=parse_date)
    excel.add_argument("--end", type=parse_date)

    csv_out = sub.add_parser("export-csv", help="write all trips to CSV")
    csv_out.add_argument("path")

    csv_in = sub.add_parser("import-csv", help="add trips from CSV")
    csv_in.add_argument("path")
    return parser


def print_summary(store: CarShareStore, time_range: TimeRange, pay_links: bool = False) -> None:
    data = store.data
    trips = filter_trips_by_range(data.trips, time_range)
    totals = compute_totals(trips)
    print(f"{time_range.value}: {totals['trips']} trips, {format_distance(totals['distance'])}, "
          f"trip costs {format_currency(totals['trip_costs'])}, "
          f"additional costs {format_currency(totals['additional_costs'])}")

    stats = compute_ledger(trips, data.participants)
    print("\nParticipants")
    for s in sort_stats_by_share(stats):
        print(f"  {s.participant.name:<16} trips {s.trip_count:>3}  {format_distance(s.total_distance):>10}  "
              f"share {format_currency(s.total_share):>10}  paid {format_currency(s.total_paid):>10}  "
              f"balance {format_currency(s.balance):>10}")

    transfers = compute_settlements(stats)
    print("\nSettlements")
    if not transfers:
        print("  Everyone is settled up!")
    for tr in transfers:
        line = f"  {tr.from_participant.name} pays {tr.to_participant.name} {format_currency(tr.amount)}"
        if pay_links:
            line += f"  {payment_url(tr.amount)}"
        print(line)


def run(args: argparse.Namespace) -> None:
    store = CarShareStore(args.data, zones=get_default_zones())
    store.load()

    if args.command == "summary":
        print_summary(store, RANGES[args.range], args.pay_links)
    elif args.command == "export-excel":
        export_excel(store.data, args.path, args.start, args.end)
        logger.info(f"Excel report written to {args.path}")
    elif args.command == "export-csv":
        export_trips_to_csv(store.data.trips, args.path)
        logger.info(f"{len(store.data.trips)} trips written to {args.path}")
    elif args.command == "import-csv":
        trips = import_trips_from_csv(args.path, store.zones)
        store.upsert_trips(trips)
        logger.info(f"{len(trips)} trips imported from {args.path}")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the application"""
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level, args.log_file)
    try:
        run(args)
    except CarShareError as e:
        logger.error(f"{e.message} ({e.error_code})")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
