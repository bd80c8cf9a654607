from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer


def _serialize_utc(value: datetime) -> str:
    """Naive datetimes in this service are UTC; mark them explicitly."""
    if value.tzinfo is None:
        return value.isoformat() + "Z"
    return value.isoformat()


UTCDateTime = Annotated[datetime, PlainSerializer(_serialize_utc, return_type=str)]


class ValidateLicenseRequest(BaseModel):
    service_name: str = Field(..., min_length=1, max_length=100)


class ValidateLicenseResponse(BaseModel):
    # Field order is the key order of the signed JSON body
    valid: bool
    message: str | None = None
    service_name: str
    start_time: UTCDateTime | None = None
    end_time: UTCDateTime | None = None
    days_left: int | None = None


class LicenseResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_uuid: str
    service_name: str
    activation_type: str
    service_start_time: UTCDateTime
    service_duration: int
    service_end_time: UTCDateTime
    created_at: UTCDateTime
    updated_at: UTCDateTime
