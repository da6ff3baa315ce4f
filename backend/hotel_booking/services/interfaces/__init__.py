"""
Service interfaces for dependency inversion.
Allows swapping implementations without changing business logic.
"""

from .booking_repository import BookingRepository

__all__ = ['BookingRepository']
