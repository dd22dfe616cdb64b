"""
Result Models
-----------
Outcome types for a geocoding call. Programmer mistakes raise UsageError;
problems on the service side come back as a ServiceFailure value.
"""
from typing import Any, ClassVar, Optional

from pydantic import BaseModel, ConfigDict


class UsageError(ValueError):
    """Raised for malformed caller input, before any request is made."""


class Success(BaseModel):
    model_config = ConfigDict(frozen=True)

    ok: ClassVar[bool] = True

    # Decoded JSON body, forwarded as the service sent it
    value: Any

    def __bool__(self):
        return True


class ServiceFailure(BaseModel):
    """
    A request that reached for the service but produced no usable payload.

    `reason` is one of "http_error", "transport_error" or "decode_error".
    `url` has the API key masked.
    """
    model_config = ConfigDict(frozen=True)

    ok: ClassVar[bool] = False

    reason: str
    url: str
    status_code: Optional[int] = None
    detail: str = ""

    @property
    def value(self) -> dict:
        return {}

    def __bool__(self):
        return False
