"""
Booking model representing a user's assignment to a hotel room.

Key design decisions:
- Unique constraint on user_id: a user holds at most one booking
- Changing rooms updates room_id in place; bookings are never deleted here
"""

from sqlalchemy import Column, Integer, ForeignKey
from sqlalchemy.orm import relationship

from hotel_booking.db.base import Base, TimestampMixin


class Booking(Base, TimestampMixin):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, unique=True)
    room_id = Column(Integer, ForeignKey("rooms.id"), nullable=False, index=True)

    room = relationship("Room", lazy="selectin")

    def __repr__(self) -> str:
        return f"<Booking(id={self.id}, user={self.user_id}, room={self.room_id})>"
