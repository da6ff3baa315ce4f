"""
Hotel booking rule-set: eligibility checks and booking mutations.

ELIGIBILITY
===========

A user may hold a hotel booking only when:
  1. they are enrolled,
  2. their ticket is PAID,
  3. the ticket type includes a hotel,
  4. the ticket type matches the remote rule. In-person tickets by
     default; HOTEL_REQUIRES_REMOTE_TICKET restores the legacy rule that
     granted rooms to remote tickets only.

Every failure short-circuits with a typed BookingError. The API layer maps
those to HTTP statuses per endpoint.

CONCURRENCY STRATEGY: Optimistic Locking on the Room
====================================================

Problem:
  Two users try to take the last free slot of a room simultaneously.
  Both count occupancy=capacity-1, both insert, room is overbooked.

Solution:
  Every booking write into a room first claims the room row:

  1. Read the room (capacity, version) and count its bookings
  2. UPDATE rooms SET version = version + 1
     WHERE id = :room_id AND version = :current_version
  3. If rows_affected == 0, someone else wrote to the room -> retry
  4. Insert / move the booking in the same transaction

  Writers into the same room serialize on the room row; the loser rolls
  back and re-reads occupancy. UNIQUE(bookings.user_id) is the final
  safety net against duplicate bookings for one user.
"""

import time
from typing import Optional

from hotel_booking.core.exceptions import (
    BadRequestError,
    BookingError,
    BookingNotFoundError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    UnauthorizedError,
)
from hotel_booking.core.logging import get_logger
from hotel_booking.core.metrics import (
    booking_latency,
    record_booking_attempt,
    record_room_claim_retry,
)
from hotel_booking.models import Booking, Room, TicketStatus
from hotel_booking.services.interfaces import BookingRepository

logger = get_logger(__name__)

MAX_RETRY_ATTEMPTS = 3


class BookingService:
    """Stateless rule-set over a BookingRepository."""

    def __init__(
        self,
        repository: BookingRepository,
        requires_remote_ticket: bool = False,
        max_retry_attempts: int = MAX_RETRY_ATTEMPTS,
    ):
        if max_retry_attempts < 1:
            raise ValueError("max_retry_attempts must be at least 1")
        self.repository = repository
        self.requires_remote_ticket = requires_remote_ticket
        self.max_retry_attempts = max_retry_attempts

    async def check_eligibility(self, user_id: int) -> Optional[Booking]:
        """
        Verify the user may hold a hotel booking.
        Returns their current booking, or None if they have none yet.
        """
        enrollment = await self.repository.find_enrollment_with_address(user_id)
        if not enrollment:
            raise NotFoundError("User has no enrollment")

        ticket = await self.repository.find_ticket_with_type(enrollment.id)
        if not ticket:
            raise NotFoundError("User has no ticket")

        ticket_type = ticket.ticket_type
        if not ticket_type.includes_hotel:
            raise NotFoundError("Ticket type does not include a hotel")
        if bool(ticket_type.is_remote) != self.requires_remote_ticket:
            raise NotFoundError("Ticket type is not eligible for a hotel room")
        if ticket.status == TicketStatus.RESERVED.value:
            raise NotFoundError("Ticket has not been paid")

        return await self.repository.find_booking_by_user(user_id)

    async def get_booking(self, user_id: int) -> Booking:
        booking = await self.check_eligibility(user_id)
        if not booking:
            raise NotFoundError("User has no booking")
        return booking

    async def create_booking(self, user_id: int, room_id: Optional[int]) -> Booking:
        """
        Book a room for the user.
        Retries the room claim up to max_retry_attempts on version conflicts.
        """
        if room_id is None:
            raise BadRequestError("roomId is required")

        start = time.perf_counter()
        try:
            existing = await self.check_eligibility(user_id)
            if existing:
                raise ConflictError("User already has a booking")

            for attempt in range(1, self.max_retry_attempts + 1):
                room = await self._load_room_with_space(room_id)

                if not await self.repository.claim_room(room.id, room.version):
                    await self._before_retry(room_id, attempt)
                    continue

                booking = await self.repository.create_booking(user_id, room)
                logger.info(
                    "booking_created",
                    booking_id=booking.id,
                    user_id=user_id,
                    room_id=room.id,
                    attempt=attempt,
                )
                record_booking_attempt("create", "success")
                return booking

            raise ConflictError("Room is in high demand. Please try again.")
        except BookingError as e:
            self._record_failure("create", e, user_id=user_id, room_id=room_id)
            raise
        finally:
            booking_latency.labels(operation="create").observe(time.perf_counter() - start)

    async def update_booking(
        self,
        booking_id: Optional[int],
        room_id: Optional[int],
        user_id: int,
    ) -> Booking:
        """Move the user's booking to another room."""
        if booking_id is None or room_id is None:
            raise BadRequestError("bookingId and roomId are required")

        start = time.perf_counter()
        try:
            booking = await self.repository.find_booking_by_id(booking_id)
            if not booking:
                raise BookingNotFoundError(f"Booking {booking_id} not found")

            if booking.user_id != user_id:
                raise UnauthorizedError("Booking belongs to another user")

            await self.check_eligibility(user_id)

            if booking.room_id == room_id:
                record_booking_attempt("update", "success")
                return booking

            for attempt in range(1, self.max_retry_attempts + 1):
                room = await self._load_room_with_space(room_id)

                if not await self.repository.claim_room(room.id, room.version):
                    await self._before_retry(room_id, attempt)
                    # The rollback expired the booking; reload it
                    booking = await self.repository.find_booking_by_id(booking_id)
                    continue

                previous_room_id = booking.room_id
                booking = await self.repository.update_booking_room(booking, room)
                logger.info(
                    "booking_room_changed",
                    booking_id=booking.id,
                    user_id=user_id,
                    from_room_id=previous_room_id,
                    to_room_id=room.id,
                    attempt=attempt,
                )
                record_booking_attempt("update", "success")
                return booking

            raise ConflictError("Room is in high demand. Please try again.")
        except BookingError as e:
            self._record_failure("update", e, booking_id=booking_id, room_id=room_id)
            raise
        finally:
            booking_latency.labels(operation="update").observe(time.perf_counter() - start)

    async def _load_room_with_space(self, room_id: int) -> Room:
        if room_id <= 0:
            raise ForbiddenError(f"Invalid room id {room_id}")

        room = await self.repository.find_room(room_id)
        if not room:
            raise ForbiddenError(f"Room {room_id} not found")

        occupancy = await self.repository.count_room_bookings(room.id)
        if occupancy >= room.capacity:
            logger.warning(
                "booking_failed_room_full",
                room_id=room.id,
                capacity=room.capacity,
                occupancy=occupancy,
            )
            raise ForbiddenError(f"Room {room_id} is full")
        return room

    async def _before_retry(self, room_id: int, attempt: int) -> None:
        logger.info(
            "room_claim_retry",
            room_id=room_id,
            attempt=attempt,
            reason="version_conflict",
        )
        record_room_claim_retry()
        await self.repository.discard_pending()
        if attempt == self.max_retry_attempts:
            raise ConflictError("Room is in high demand. Please try again.")

    @staticmethod
    def _record_failure(operation: str, error: BookingError, **context) -> None:
        status = "conflict" if isinstance(error, ConflictError) else "rejected"
        record_booking_attempt(operation, status)
        logger.info(
            "booking_rejected",
            operation=operation,
            reason=type(error).__name__,
            detail=error.message,
            **context,
        )
