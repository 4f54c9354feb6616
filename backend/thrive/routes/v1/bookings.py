# backend/thrive/routes/v1/bookings.py
"""
Booking routes - API v1

Versioned booking endpoints under /api/v1/bookings.
All business logic delegated to BookingService.

Endpoints:
    POST / - Book a seat in a session
    GET /me - The caller's booking history, newest first
    GET /upcoming - The caller's confirmed bookings that have not ended, soonest first
    GET /limits - The caller's standing against booking limits
    POST /{booking_id}/cancel - Cancel a confirmed booking
"""

import asyncio
import logging
from typing import List, NoReturn

from fastapi import APIRouter, Depends, HTTPException, Path, status

from ...api.dependencies import get_booking_service, get_current_user_id
from ...core.exceptions import DomainException, RepositoryException, raise_503_if_pool_exhaustion
from ...schemas.booking import (
    BookingCreate,
    BookingLimitsInfo,
    BookingResponse,
    UpcomingBookingResponse,
)
from ...services.booking_service import BookingService

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["bookings-v1"])

ULID_PATH_PATTERN = r"^[0-9A-HJKMNP-TV-Z]{26}$"


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    if hasattr(exc, "to_http_exception"):
        raise exc.to_http_exception()
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


@router.post(
    "",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Booking denied by a booking rule"},
        403: {"description": "No subscription or plan does not cover this session type"},
        404: {"description": "Session not found"},
    },
)
async def create_booking(
    booking_data: BookingCreate,
    user_id: str = Depends(get_current_user_id),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    """
    Book a seat in a live session.

    A denial responds with a single ``code`` and every failing reason.
    """
    try:
        booking = await asyncio.to_thread(
            booking_service.create_booking, user_id, booking_data.session_id
        )
        return BookingResponse.model_validate(booking)
    except DomainException as e:
        handle_domain_exception(e)
    except RepositoryException as e:
        raise_503_if_pool_exhaustion(e)
        raise


@router.get("/me", response_model=List[BookingResponse])
async def get_my_bookings(
    user_id: str = Depends(get_current_user_id),
    booking_service: BookingService = Depends(get_booking_service),
) -> List[BookingResponse]:
    bookings = await asyncio.to_thread(booking_service.get_my_bookings, user_id)
    return [BookingResponse.model_validate(booking) for booking in bookings]


@router.get("/upcoming", response_model=List[UpcomingBookingResponse])
async def get_upcoming_bookings(
    user_id: str = Depends(get_current_user_id),
    booking_service: BookingService = Depends(get_booking_service),
) -> List[UpcomingBookingResponse]:
    try:
        bookings = await asyncio.to_thread(booking_service.get_upcoming_bookings, user_id)
        return [UpcomingBookingResponse.model_validate(booking) for booking in bookings]
    except RepositoryException as e:
        raise_503_if_pool_exhaustion(e)
        raise


@router.get("/limits", response_model=BookingLimitsInfo)
async def get_booking_limits(
    user_id: str = Depends(get_current_user_id),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingLimitsInfo:
    """Active and monthly usage for the current UTC month."""
    try:
        return await asyncio.to_thread(booking_service.get_booking_limits, user_id)
    except RepositoryException as e:
        raise_503_if_pool_exhaustion(e)
        raise


@router.post(
    "/{booking_id}/cancel",
    response_model=BookingResponse,
    responses={404: {"description": "Booking not found"}},
)
async def cancel_booking(
    booking_id: str = Path(
        ...,
        description="Booking ULID",
        pattern=ULID_PATH_PATTERN,
        examples=["01HF4G12ABCDEF3456789XYZAB"],
    ),
    user_id: str = Depends(get_current_user_id),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    """Cancel a booking."""
    try:
        booking = await asyncio.to_thread(booking_service.cancel_booking, user_id, booking_id)
        return BookingResponse.model_validate(booking)
    except DomainException as e:
        handle_domain_exception(e)
