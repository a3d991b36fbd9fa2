"""API package initialization."""
from bank_booking.api.models import (
    ApiError,
    Booking,
    BookingRequest,
    BranchInfo,
    CancellationRequest,
    CancellationResponse,
    SearchAvailabilityData,
    SearchAvailabilityRequest,
    SearchAvailabilityResponse,
    TimeSlot,
)

__all__ = [
    "ApiError",
    "Booking",
    "BookingRequest",
    "BranchInfo",
    "CancellationRequest",
    "CancellationResponse",
    "SearchAvailabilityData",
    "SearchAvailabilityRequest",
    "SearchAvailabilityResponse",
    "TimeSlot",
]
