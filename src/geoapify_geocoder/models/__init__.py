"""
Data Models Module
----------------
Contains Pydantic models for validating geocoding queries and for the
structured results returned by the client.
"""
from geoapify_geocoder.models.query import GeocodeQuery, ReverseGeocodeQuery
from geoapify_geocoder.models.result import ServiceFailure, Success, UsageError

__all__ = [
    "GeocodeQuery",
    "ReverseGeocodeQuery",
    "ServiceFailure",
    "Success",
    "UsageError",
]
