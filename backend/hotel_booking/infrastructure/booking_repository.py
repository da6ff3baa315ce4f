"""
SQLAlchemy implementation of the booking persistence gateway.
"""

from typing import Optional

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from hotel_booking.core.exceptions import ConflictError
from hotel_booking.core.logging import get_logger
from hotel_booking.models import Booking, Enrollment, Room, Ticket
from hotel_booking.services.interfaces import BookingRepository

logger = get_logger(__name__)


class SqlAlchemyBookingRepository(BookingRepository):

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_enrollment_with_address(self, user_id: int) -> Optional[Enrollment]:
        result = await self.db.execute(
            select(Enrollment).where(Enrollment.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def find_ticket_with_type(self, enrollment_id: int) -> Optional[Ticket]:
        result = await self.db.execute(
            select(Ticket)
            .where(Ticket.enrollment_id == enrollment_id)
            .order_by(Ticket.id.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def find_booking_by_user(self, user_id: int) -> Optional[Booking]:
        result = await self.db.execute(select(Booking).where(Booking.user_id == user_id))
        return result.scalar_one_or_none()

    async def find_booking_by_id(self, booking_id: int) -> Optional[Booking]:
        result = await self.db.execute(select(Booking).where(Booking.id == booking_id))
        return result.scalar_one_or_none()

    async def find_room(self, room_id: int) -> Optional[Room]:
        result = await self.db.execute(
            select(Room).where(Room.id == room_id).execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def count_room_bookings(self, room_id: int) -> int:
        result = await self.db.execute(
            select(func.count()).select_from(Booking).where(Booking.room_id == room_id)
        )
        return result.scalar_one()

    async def claim_room(self, room_id: int, version: int) -> bool:
        result = await self.db.execute(
            update(Room)
            .where(Room.id == room_id, Room.version == version)
            .values(version=Room.version + 1)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def create_booking(self, user_id: int, room: Room) -> Booking:
        booking = Booking(user_id=user_id, room_id=room.id, room=room)
        self.db.add(booking)
        try:
            await self.db.flush()
        except IntegrityError:
            await self.db.rollback()
            logger.warning("booking_insert_conflict", user_id=user_id, room_id=room.id)
            raise ConflictError("User already has a booking")
        await self.db.refresh(booking)
        return booking

    async def update_booking_room(self, booking: Booking, room: Room) -> Booking:
        booking.room = room
        await self.db.flush()
        await self.db.refresh(booking)
        return booking

    async def discard_pending(self) -> None:
        await self.db.rollback()
