"""
Hotel booking endpoints.

Each endpoint translates the rule-set's typed failures into the HTTP
statuses its clients expect; the same failure can map differently per
endpoint (an ineligible user is 404 on read, 403 on create, 401 on update).
"""

from fastapi import APIRouter, Depends, HTTPException, status

from hotel_booking.core.exceptions import (
    BadRequestError,
    BookingError,
    BookingNotFoundError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    UnauthorizedError,
)
from hotel_booking.core.security import get_current_user_id
from hotel_booking.schemas.booking import (
    BookingIdResponse,
    BookingRequest,
    BookingResponse,
    RoomResponse,
)
from hotel_booking.services.booking_factory import get_booking_service
from hotel_booking.services.booking_service import BookingService

router = APIRouter(prefix="/bookings", tags=["Bookings"])


def _to_http(error: BookingError, status_by_error: dict) -> HTTPException:
    for error_class, status_code in status_by_error.items():
        if isinstance(error, error_class):
            return HTTPException(status_code=status_code, detail=error.message)
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error.message)


@router.get("", response_model=BookingResponse)
async def get_booking(
    user_id: int = Depends(get_current_user_id),
    service: BookingService = Depends(get_booking_service),
):
    """Get the authenticated user's booking and its room."""
    try:
        booking = await service.get_booking(user_id)
    except BookingError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    return BookingResponse(id=booking.id, Room=RoomResponse.model_validate(booking.room))


@router.post("", response_model=BookingIdResponse)
async def create_booking(
    booking_data: BookingRequest,
    user_id: int = Depends(get_current_user_id),
    service: BookingService = Depends(get_booking_service),
):
    """
    Book a hotel room.

    Requires a paid, hotel-inclusive ticket and a room with free capacity.
    A user holds at most one booking; use PUT to change rooms.
    """
    try:
        booking = await service.create_booking(user_id, booking_data.room_id)
    except BookingError as e:
        raise _to_http(e, {
            BadRequestError: status.HTTP_400_BAD_REQUEST,
            ConflictError: status.HTTP_409_CONFLICT,
            NotFoundError: status.HTTP_403_FORBIDDEN,
            ForbiddenError: status.HTTP_403_FORBIDDEN,
            UnauthorizedError: status.HTTP_401_UNAUTHORIZED,
        })
    return BookingIdResponse(id=booking.id)


@router.put("/{booking_id}", response_model=BookingIdResponse)
async def update_booking(
    booking_id: int,
    booking_data: BookingRequest,
    user_id: int = Depends(get_current_user_id),
    service: BookingService = Depends(get_booking_service),
):
    """Move the authenticated user's booking to another room."""
    try:
        booking = await service.update_booking(booking_id, booking_data.room_id, user_id)
    except BookingError as e:
        # An ineligible owner is reported as unauthorized
        raise _to_http(e, {
            BookingNotFoundError: status.HTTP_404_NOT_FOUND,
            NotFoundError: status.HTTP_401_UNAUTHORIZED,
            BadRequestError: status.HTTP_400_BAD_REQUEST,
            UnauthorizedError: status.HTTP_401_UNAUTHORIZED,
            ForbiddenError: status.HTTP_403_FORBIDDEN,
            ConflictError: status.HTTP_409_CONFLICT,
        })
    return BookingIdResponse(id=booking.id)
