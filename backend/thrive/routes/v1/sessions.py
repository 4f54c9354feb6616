# backend/thrive/routes/v1/sessions.py
"""
Session booking eligibility - API v1

    GET /{session_id}/eligibility - Can the caller book this session, and why not
    GET /{session_id}/attendees - Users holding a confirmed seat
"""

import asyncio
from typing import List

from fastapi import APIRouter, Depends, Path

from ...api.dependencies import get_booking_service, get_current_user_id
from ...core.exceptions import DomainException
from ...schemas.booking import BookingEligibilityResponse, SessionAttendee
from ...services.booking_service import BookingService
from .bookings import ULID_PATH_PATTERN, handle_domain_exception

router = APIRouter(tags=["sessions-v1"])


@router.get(
    "/{session_id}/eligibility",
    response_model=BookingEligibilityResponse,
    responses={404: {"description": "Session not found"}},
)
async def check_booking_eligibility(
    session_id: str = Path(
        ...,
        description="Session ULID",
        pattern=ULID_PATH_PATTERN,
        examples=["01HF4G12ABCDEF3456789XYZAB"],
    ),
    user_id: str = Depends(get_current_user_id),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingEligibilityResponse:
    try:
        return await asyncio.to_thread(
            booking_service.check_booking_eligibility, user_id, session_id
        )
    except DomainException as e:
        handle_domain_exception(e)


@router.get(
    "/{session_id}/attendees",
    response_model=List[SessionAttendee],
    responses={404: {"description": "Session not found"}},
    dependencies=[Depends(get_current_user_id)],
)
async def get_session_attendees(
    session_id: str = Path(..., description="Session ULID", pattern=ULID_PATH_PATTERN),
    booking_service: BookingService = Depends(get_booking_service),
) -> List[SessionAttendee]:
    try:
        return await asyncio.to_thread(booking_service.get_session_attendees, session_id)
    except DomainException as e:
        handle_domain_exception(e)
