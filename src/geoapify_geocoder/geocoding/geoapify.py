"""
Geocoding Module
--------------
Handles forward and reverse geocoding against the Geoapify geocoding API.
Converts free-text addresses to feature collections and coordinates back to addresses.
"""
import copy
import logging
import os
import re
import time
from typing import Any, Mapping, Optional, Union

import requests
from pydantic import ValidationError

from geoapify_geocoder import __version__
from geoapify_geocoder.models.query import GeocodeQuery, ReverseGeocodeQuery
from geoapify_geocoder.models.result import ServiceFailure, Success, UsageError

# Constants
GEOAPIFY_HOST = "api.geoapify.com/v1/geocode"
USER_AGENT = f"geoapify-geocoder/{__version__}"
REQUEST_TIMEOUT = 10
RETRY_DELAY = 1.1

API_KEY_PATTERN = re.compile(r"(apiKey=)[^&]*")

# Get logger
logger = logging.getLogger(__name__)

GeocodeResult = Union[Success, ServiceFailure]


def mask_api_key(url):
    return API_KEY_PATTERN.sub(r"\1***", url)


def build_session(verify_tls=True):
    session = requests.Session()
    session.headers.update({
        "User-Agent": USER_AGENT,
        "Accept-Encoding": "gzip, deflate",
        "Accept": "application/json",
    })
    # Honor HTTP(S)_PROXY and NO_PROXY from the environment
    session.trust_env = True
    session.verify = verify_tls
    logger.debug(f"Built default session (verify_tls={verify_tls}, user_agent={USER_AGENT})")
    return session


def _usage_error(e: ValidationError) -> UsageError:
    error = e.errors()[0]
    return UsageError(f"Usage: {error['msg']}")


def _check_timeout(timeout):
    if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
        raise UsageError(f"timeout must be a positive number of seconds, got {timeout!r}")


def _check_max_retries(max_retries):
    if isinstance(max_retries, bool) or not isinstance(max_retries, int) or max_retries < 0:
        raise UsageError(f"max_retries must be a non-negative integer, got {max_retries!r}")


def _is_transient(status_code):
    return status_code == 429 or status_code >= 500


class GeoApify:
    """
    Client for https://www.geoapify.com/ geocoding.

        geo_coder = GeoApify(api_key=os.environ["GEOAPIFY_KEY"])
        result = geo_coder.geocode("10 Downing St., London, UK")
        if result:
            lon, lat = result.value["features"][0]["geometry"]["coordinates"]

    Bad input raises UsageError. HTTP errors, network errors and undecodable
    responses come back as a falsy ServiceFailure whose `value` is {}.
    """

    default_logger = logger

    OPTIONS = ("api_key", "host", "session", "verify_tls", "timeout", "max_retries", "logger")

    def __init__(
        self,
        api_key: str,
        host: Optional[str] = None,
        session: Optional[requests.Session] = None,
        verify_tls: bool = True,
        timeout: float = REQUEST_TIMEOUT,
        max_retries: int = 0,
        logger: Optional[logging.Logger] = None,
    ):
        if api_key is None:
            raise UsageError("api_key not given")
        if not isinstance(api_key, str):
            raise UsageError("api_key must be a string")
        if not api_key.strip():
            raise UsageError("api_key must not be empty")
        _check_timeout(timeout)
        _check_max_retries(max_retries)

        self.api_key = api_key
        self.host = host or GEOAPIFY_HOST
        self.verify_tls = verify_tls
        self.timeout = timeout
        self.max_retries = max_retries
        self.logger = logger if logger is not None else self.default_logger

        if not verify_tls:
            self.logger.warning(f"TLS certificate verification disabled for {self.host}")

        self._session = session if session is not None else build_session(verify_tls)

    @classmethod
    def from_env(cls, **options):
        """Build a client from GEOAPIFY_KEY, GEOAPIFY_HOST and GEOAPIFY_TIMEOUT."""
        settings = {"api_key": os.getenv("GEOAPIFY_KEY")}
        if os.getenv("GEOAPIFY_HOST"):
            settings["host"] = os.getenv("GEOAPIFY_HOST")
        if os.getenv("GEOAPIFY_TIMEOUT"):
            try:
                settings["timeout"] = float(os.getenv("GEOAPIFY_TIMEOUT"))
            except ValueError:
                raise UsageError(f"GEOAPIFY_TIMEOUT must be a number, got {os.getenv('GEOAPIFY_TIMEOUT')!r}") from None
        settings.update(options)
        return cls(**settings)

    def with_overrides(self, **options):
        """Shallow copy of this client with the given options replaced."""
        unknown = set(options) - set(self.OPTIONS)
        if unknown:
            raise UsageError(f"Unknown option(s): {', '.join(sorted(unknown))}")

        if "api_key" in options:
            api_key = options["api_key"]
            if not isinstance(api_key, str) or not api_key.strip():
                raise UsageError("api_key must be a non-empty string")
        if "timeout" in options:
            _check_timeout(options["timeout"])
        if "max_retries" in options:
            _check_max_retries(options["max_retries"])
        if "verify_tls" in options and not options["verify_tls"]:
            self.logger.warning(f"TLS certificate verification disabled for {options.get('host', self.host)}")

        clone = copy.copy(self)
        for name, value in options.items():
            if name == "session":
                clone._session = value
            elif name == "host":
                clone.host = value or GEOAPIFY_HOST
            else:
                setattr(clone, name, value)
        # The session must verify exactly when verify_tls says so
        if "verify_tls" in options and "session" not in options:
            clone._session = build_session(clone.verify_tls)
        return clone

    @property
    def session(self):
        """Transport used for requests; may be swapped for a throttled or proxied one."""
        return self._session

    @session.setter
    def session(self, value):
        self._session = value

    def search_url(self, query: GeocodeQuery) -> str:
        return self._prepare_url("search", {"text": query.search_text(), "apiKey": self.api_key})

    def reverse_url(self, query: ReverseGeocodeQuery) -> str:
        return self._prepare_url("reverse", {"lat": query.lat, "lon": query.lon, "apiKey": self.api_key})

    def _prepare_url(self, path, params):
        request = requests.Request("GET", f"https://{self.host}/{path}", params=params)
        return request.prepare().url

    def geocode(self, location: Union[str, bytes, GeocodeQuery, Mapping[str, Any]]) -> GeocodeResult:
        """
        Forward geocode a free-text address.

        Args:
            location: Address text, a GeocodeQuery, or a mapping with a "location" key

        Returns:
            Success with the decoded feature collection, or a ServiceFailure
        """
        query = self._geocode_query(location)
        return self._fetch(self.search_url(query))

    def reverse_geocode(self, lat=None, lon=None) -> GeocodeResult:
        """
        Reverse geocode a latitude/longitude pair.

            result = geo_coder.reverse_geocode(lat=37.778907, lon=-122.39732)
            city = result.value["features"][0]["properties"]["city"]

        A ReverseGeocodeQuery or a mapping with "lat" and "lon" may be passed
        as the only argument instead.
        """
        if isinstance(lat, ReverseGeocodeQuery):
            query = lat
        else:
            if isinstance(lat, Mapping):
                if lon is not None:
                    raise UsageError("Usage: reverse_geocode(lat=lat, lon=lon)")
                params = dict(lat)
            elif isinstance(lat, (list, tuple, set)):
                raise UsageError("Usage: reverse_geocode(lat=lat, lon=lon)")
            else:
                params = {"lat": lat, "lon": lon}
            try:
                query = ReverseGeocodeQuery(lat=params.get("lat"), lon=params.get("lon"))
            except ValidationError as e:
                raise _usage_error(e) from None
        return self._fetch(self.reverse_url(query))

    def _geocode_query(self, location):
        if isinstance(location, GeocodeQuery):
            return location
        if isinstance(location, Mapping):
            if "location" not in location:
                raise UsageError("Usage: geocode(location=location)")
            location = location["location"]
        if not isinstance(location, (str, bytes)):
            raise UsageError("Usage: geocode(location=location)")
        try:
            return GeocodeQuery(location=location)
        except ValidationError as e:
            raise _usage_error(e) from None

    def _fetch(self, url) -> GeocodeResult:
        safe_url = mask_api_key(url)
        attempts = self.max_retries + 1
        attempt = 0

        while True:
            attempt += 1
            try:
                self.logger.debug(f"GET {safe_url} (attempt {attempt}/{attempts})")
                response = self._session.get(url, timeout=self.timeout)
            except requests.RequestException as e:
                error = mask_api_key(str(e))
                if attempt < attempts:
                    self._wait_before_retry(attempt, f"Network error on {safe_url}: {error}")
                    continue
                self.logger.warning(f"Network error on {safe_url}: {error}")
                return ServiceFailure(reason="transport_error", url=safe_url, detail=error)

            if response.status_code >= 400:
                if _is_transient(response.status_code) and attempt < attempts:
                    self._wait_before_retry(attempt, f"HTTP {response.status_code} on {safe_url}")
                    continue
                status_line = f"{response.status_code} {response.reason or ''}".strip()
                self.logger.warning(f"API returned error on {safe_url}: {status_line}")
                return ServiceFailure(
                    reason="http_error", url=safe_url, status_code=response.status_code, detail=status_line
                )

            return self._decode(response, safe_url)

    def _wait_before_retry(self, attempt, message):
        wait_time = RETRY_DELAY * attempt
        self.logger.warning(f"{message}. Retrying in {wait_time:.1f}s... (Attempt {attempt}/{self.max_retries})")
        time.sleep(wait_time)

    def _decode(self, response, safe_url) -> GeocodeResult:
        try:
            data = response.json()
        except ValueError as e:
            self.logger.warning(f"{safe_url}: Failed to decode JSON - {e}")
            return ServiceFailure(
                reason="decode_error", url=safe_url, status_code=response.status_code, detail=str(e)
            )

        if data is None:
            self.logger.warning(f"{safe_url}: Failed to decode JSON - empty document")
            return ServiceFailure(
                reason="decode_error", url=safe_url, status_code=response.status_code, detail="empty document"
            )

        if isinstance(data, dict) and isinstance(data.get("features"), list):
            self.logger.info(f"Received {len(data['features'])} feature(s) from {safe_url}")
        return Success(value=data)
