"""
Pydantic schemas for booking-related request/response validation.

Wire format is camelCase (`roomId`, `hotelId`, `Room`) to match the
clients of the ticketing frontend.
"""

from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, StrictInt
from pydantic.alias_generators import to_camel


class BookingRequest(BaseModel):
    # Strict: JSON booleans must not coerce to room 1
    room_id: StrictInt = Field(..., alias="roomId")

    model_config = ConfigDict(populate_by_name=True)


class RoomResponse(BaseModel):
    id: int
    name: str
    capacity: int
    hotel_id: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)


class BookingResponse(BaseModel):
    id: int
    room: RoomResponse = Field(..., alias="Room")

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class BookingIdResponse(BaseModel):
    id: int

    model_config = {"from_attributes": True}
