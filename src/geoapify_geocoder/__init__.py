"""
Geoapify Geocoder
---------------
Client library for the Geoapify geocoding API.
Translates free-text addresses and latitude/longitude pairs into requests and
returns the decoded feature collections.
"""
__version__ = "0.1.0"

from geoapify_geocoder.geocoding.geoapify import GEOAPIFY_HOST, GeoApify, GeocodeResult
from geoapify_geocoder.models import GeocodeQuery, ReverseGeocodeQuery, ServiceFailure, Success, UsageError

__all__ = [
    "GEOAPIFY_HOST",
    "GeoApify",
    "GeocodeQuery",
    "GeocodeResult",
    "ReverseGeocodeQuery",
    "ServiceFailure",
    "Success",
    "UsageError",
]
