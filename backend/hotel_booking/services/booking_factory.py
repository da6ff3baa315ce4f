"""
Booking service factory.
Wires the configured eligibility rules and the request's DB session.
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from hotel_booking.core.config import get_settings
from hotel_booking.db.session import get_db
from hotel_booking.infrastructure import SqlAlchemyBookingRepository
from hotel_booking.services.booking_service import BookingService


def get_booking_service(db: AsyncSession = Depends(get_db)) -> BookingService:
    """
    Build a BookingService bound to the current request's session.

    Rule selection comes from settings:
    - HOTEL_REQUIRES_REMOTE_TICKET: which ticket types qualify for a room
    - BOOKING_MAX_RETRY_ATTEMPTS: room-claim retries before giving up
    """
    settings = get_settings()
    return BookingService(
        SqlAlchemyBookingRepository(db),
        requires_remote_ticket=settings.HOTEL_REQUIRES_REMOTE_TICKET,
        max_retry_attempts=settings.BOOKING_MAX_RETRY_ATTEMPTS,
    )
