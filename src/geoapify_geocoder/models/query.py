"""
Query Models
----------
Input validation for forward and reverse geocoding requests.
"""
import re

from pydantic import BaseModel, ConfigDict, Field, field_validator

# At least one letter in any script; digits and underscores excluded
LETTER_PATTERN = re.compile(r"[^\W\d_]")

# "Boston, England" is sent as "Boston, United Kingdom" so the service does not
# match New England
ENGLAND_SUFFIX_PATTERN = re.compile(r"(.+),\s*England$", re.IGNORECASE)


class GeocodeQuery(BaseModel):
    model_config = ConfigDict(frozen=True)

    location: str

    @field_validator("location", mode="before")
    @classmethod
    def decode_bytes(cls, value):
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    @field_validator("location")
    @classmethod
    def must_look_like_an_address(cls, value):
        if not value or not value.strip():
            raise ValueError("location must not be empty")
        if not LETTER_PATTERN.search(value):
            raise ValueError(f"invalid input to geocode(), {value}")
        return value

    def search_text(self) -> str:
        """Location text as it is sent to the service."""
        return ENGLAND_SUFFIX_PATTERN.sub(r"\1, United Kingdom", self.location, count=1)


class ReverseGeocodeQuery(BaseModel):
    model_config = ConfigDict(frozen=True)

    lat: float = Field(ge=-90, le=90)
    lon: float = Field(ge=-180, le=180)

    @field_validator("lat", "lon", mode="before")
    @classmethod
    def must_be_given(cls, value, info):
        if value is None or value == "" or isinstance(value, bool):
            raise ValueError(f"Missing {'latitude' if info.field_name == 'lat' else 'longitude'} ({info.field_name})")
        return value

    @field_validator("lat", "lon")
    @classmethod
    def must_be_non_zero(cls, value, info):
        if value == 0:
            raise ValueError(f"{info.field_name} must be non-zero")
        return value
