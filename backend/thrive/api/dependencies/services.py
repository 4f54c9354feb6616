# backend/thrive/api/dependencies/services.py
"""
Service layer dependencies for dependency injection.

This module provides factory functions that create service instances
with their required dependencies properly injected.
"""

from fastapi import Depends
from sqlalchemy.orm import Session

from ...core.booking_policy import BookingPolicy
from ...core.config import settings
from ...services.activity_service import ActivityService
from ...services.booking_service import BookingService
from .database import get_db


def get_activity_service(db: Session = Depends(get_db)) -> ActivityService:
    return ActivityService(db)


def get_booking_service(
    db: Session = Depends(get_db),
    activity_service: ActivityService = Depends(get_activity_service),
) -> BookingService:
    """
    Get booking service instance with all dependencies.

    Args:
        db: Database session
        activity_service: Activity feed writer for booking events

    Returns:
        BookingService instance
    """
    return BookingService(
        db,
        activity_service=activity_service,
        policy=BookingPolicy.from_settings(settings),
    )
