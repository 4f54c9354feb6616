"""
Service layer for the Thrive booking backend.

- BookingValidationService: read-only admission rules and limits
- BookingService: admission, cancellation and booking history
- ActivityService: best-effort activity feed writes
"""

from .activity_service import ActivityService
from .base import BaseService
from .booking_service import BookingService
from .booking_validation_service import BookingValidationService

__all__ = [
    "ActivityService",
    "BaseService",
    "BookingService",
    "BookingValidationService",
]
