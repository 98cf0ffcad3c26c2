"""
Utility functions for CarShare ledger
"""
from __future__ import annotations
import os
from datetime import date, datetime


def parse_date(s: str) -> date:
    """Parse YYYY-MM-DD date string"""
    return datetime.strptime(s.strip(), "%Y-%m-%d").date()


def parse_datetime(s: str) -> datetime:
    """Parse an ISO timestamp; a bare YYYY-MM-DD means midnight"""
    s = s.strip()
    if len(s) == 10:
        return datetime.combine(parse_date(s), datetime.min.time())
    return datetime.fromisoformat(s)


def safe_float(x: str, default: float = 0.0) -> float:
    """Convert string to float safely, returning default on error"""
    try:
        return float(x)
    except (TypeError, ValueError):
        return default


def format_currency(amount: float) -> str:
    return f"{amount:.0f} kr"


def format_distance(km: float) -> str:
    return f"{km:.1f} km"


def payment_url(amount: float) -> str:
    """Deep link that opens the payment app with the amount prefilled"""
    return f"vipps:///?amount={int(amount)}"


def app_dir() -> str:
    """
    Get application data directory: ~/Library/Application Support/CarShare,
    or $CARSHARE_HOME when set.
    Creates directory if it doesn't exist.
    """
    path = os.environ.get("CARSHARE_HOME")
    if not path:
        base = os.path.expanduser("~/Library/Application Support")
        path = os.path.join(base, "CarShare")
    os.makedirs(path, exist_ok=True)
    return path
