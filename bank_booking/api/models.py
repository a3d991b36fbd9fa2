"""Pydantic models for the booking API request/response shapes.

Field names on the wire are camelCase; Python attributes are snake_case.
"""
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from bank_booking import config


class WireModel(BaseModel):
    """Base model accepting both alias and attribute names."""

    model_config = ConfigDict(populate_by_name=True)

    def to_wire(self) -> dict:
        """Serialize with camelCase keys, dropping unset optional fields."""
        return self.model_dump(by_alias=True, exclude_none=True)


class TimeSlot(WireModel):
    """A bookable one-hour interval with an availability flag."""
    id: str = Field(..., description="Slot identity", examples=["slot_2025-08-28_1000"])
    start_time: str = Field(..., alias="startTime", pattern=r"^\d{2}:\d{2}$")
    end_time: str = Field(..., alias="endTime", pattern=r"^\d{2}:\d{2}$")
    available: bool
    booking_reference: Optional[str] = Field(None, alias="bookingReference")

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @property
    def hour(self) -> int:
        return int(self.start_time.split(":")[0])


class BranchInfo(WireModel):
    id: str
    name: str
    address: str


class ApiError(WireModel):
    """Structured error body: machine code plus user-facing message."""
    code: str
    message: str


class SearchAvailabilityRequest(WireModel):
    """Request schema for POST /api/search-availability."""
    date: str = Field(..., description="ISO date (YYYY-MM-DD)", examples=["2025-08-28"])
    time: str = Field(..., description="Time in HH:mm format", examples=["10:00"])
    service_type: str = Field(config.DEFAULT_SERVICE_TYPE, alias="serviceType")
    duration: int = Field(config.DEFAULT_DURATION_MINUTES, description="Duration in minutes")
    branch_id: Optional[str] = Field(None, alias="branchId")


class SearchAvailabilityData(WireModel):
    date: str
    service_type: str = Field(..., alias="serviceType")
    duration: int
    slots: List[TimeSlot] = Field(default_factory=list)
    branch_info: Optional[BranchInfo] = Field(None, alias="branchInfo")


class SearchAvailabilityResponse(WireModel):
    """Response schema for POST /api/search-availability."""
    success: bool
    data: Optional[SearchAvailabilityData] = None
    error: Optional[ApiError] = None


class BookingRequest(WireModel):
    """Form fields submitted by the booking form."""
    first_name: str = Field("", alias="firstName")
    last_name: str = Field("", alias="lastName")
    telephone: str = config.DEFAULT_TELEPHONE_PREFIX
    email: str = ""
    postcode: str = ""
    notes: str = ""
    subject: str = config.DEFAULT_BOOKING_SUBJECT
    time: str = config.DEFAULT_BOOKING_TIME
    date: str = config.DEFAULT_BOOKING_DATE


class Booking(WireModel):
    """Confirmation record returned by the booking endpoint."""
    customer_name: str = Field(..., alias="customerName")
    subject: str
    duration: str
    confirmation_email: Optional[str] = Field(None, alias="confirmationEmail")
    appointment_id: str = Field(..., alias="appointmentId")
    time: str
    date: str


class CancellationRequest(WireModel):
    appointment_id: str = Field(..., alias="appointmentId", min_length=1)


class CancellationResponse(WireModel):
    cancelled: bool
