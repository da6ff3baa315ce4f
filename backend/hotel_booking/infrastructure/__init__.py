"""
Infrastructure layer - external system integrations.
Keeps business logic clean from implementation details.
"""

from .booking_repository import SqlAlchemyBookingRepository

__all__ = ['SqlAlchemyBookingRepository']
