"""
Custom exception classes for CarShare ledger.
The accounting core never raises; these cover the data store, trip tracking
and the geo collaborator.
"""
from __future__ import annotations
from typing import Any, Dict, Optional


class CarShareError(Exception):
    """Base exception class for all CarShare errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/CLI output."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code,
            "details": self.details
        }


# =============================================================================
# DATA STORE ERRORS
# =============================================================================

class DataStoreError(CarShareError):
    """Raised when the data file cannot be read or written."""
    pass


class InvalidReferenceError(DataStoreError):
    """Raised when a record references a car or participant that does not exist."""
    pass


# =============================================================================
# TRACKING AND GEO ERRORS
# =============================================================================

class TrackingError(CarShareError):
    """Raised when a tracked trip cannot be saved."""
    pass


class GeoError(CarShareError):
    """Base class for routing and geocoding failures."""
    pass


class RouteNotFoundError(GeoError):
    """Raised when no route can be computed between the given points."""
    pass


class GeocodingError(GeoError):
    """Raised when an address cannot be resolved to a coordinate."""
    pass
