"""
Persistence interface consumed by the booking service.
Allows swapping the SQLAlchemy gateway for an in-memory fake in tests.
"""

from abc import ABC, abstractmethod
from typing import Optional

from hotel_booking.models import Booking, Enrollment, Room, Ticket


class BookingRepository(ABC):
    """
    Everything the eligibility checker and booking mutator read or write.

    Implementations:
    - SqlAlchemyBookingRepository: production gateway over an AsyncSession
    - tests: in-memory fake with the same contract
    """

    @abstractmethod
    async def find_enrollment_with_address(self, user_id: int) -> Optional[Enrollment]:
        pass

    @abstractmethod
    async def find_ticket_with_type(self, enrollment_id: int) -> Optional[Ticket]:
        pass

    @abstractmethod
    async def find_booking_by_user(self, user_id: int) -> Optional[Booking]:
        """Booking owned by the user, with its Room loaded."""
        pass

    @abstractmethod
    async def find_booking_by_id(self, booking_id: int) -> Optional[Booking]:
        pass

    @abstractmethod
    async def find_room(self, room_id: int) -> Optional[Room]:
        pass

    @abstractmethod
    async def count_room_bookings(self, room_id: int) -> int:
        pass

    @abstractmethod
    async def claim_room(self, room_id: int, version: int) -> bool:
        """
        Bump the room's version if it still equals `version`.

        Returns False when another transaction changed the room first;
        the caller must re-read occupancy before trying again.
        """
        pass

    @abstractmethod
    async def create_booking(self, user_id: int, room: Room) -> Booking:
        """Insert a booking. Raises ConflictError if the user already has one."""
        pass

    @abstractmethod
    async def update_booking_room(self, booking: Booking, room: Room) -> Booking:
        pass

    @abstractmethod
    async def discard_pending(self) -> None:
        """Throw away uncommitted state before retrying a lost room claim."""
        pass
