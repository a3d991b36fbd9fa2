"""Booking flow: the steps a visitor goes through, without any rendering.

Date and time selection feed the search controller, a slot is picked
from the results, the consent dialog is answered, and the booking is
submitted (and optionally cancelled) through the backend client.
"""
import logging
from enum import Enum
from typing import List, Optional

from bank_booking.api.models import Booking, BookingRequest, TimeSlot
from bank_booking.api_client import BookingApiClient
from bank_booking.date_utils import DateUtils, parse_hour
from bank_booking.search import SearchAvailabilityController

logger = logging.getLogger(__name__)


class BookingFlowError(Exception):
    """Raised when a flow step is attempted out of order or with bad input."""
    pass


class ConsentState(str, Enum):
    """Consent dialog states."""
    NOT_ASKED = "not_asked"
    PENDING = "pending"
    GIVEN = "given"
    DECLINED = "declined"


class BookingFlow:
    """Tracks a visitor's selections from date choice to confirmation."""

    def __init__(
        self,
        controller: SearchAvailabilityController,
        api_client: BookingApiClient,
        date_utils: Optional[DateUtils] = None
    ):
        self.controller = controller
        self.api_client = api_client
        self.date_utils = date_utils or DateUtils()

        self.selected_date = ""
        self.selected_time = ""
        self.selected_slot: Optional[TimeSlot] = None
        self.consent = ConsentState.NOT_ASKED
        self.booking: Optional[Booking] = None
        self.cancelled = False

    def available_times(self) -> List[str]:
        """HH:00 times the visitor may pick for the selected date."""
        if not self.selected_date:
            hours = list(self.date_utils.ALL_AVAILABLE_HOURS)
        else:
            hours = self.date_utils.get_available_hours(self.selected_date)
        return [f"{hour:02d}:00" for hour in hours]

    @property
    def is_ready_to_search(self) -> bool:
        return bool(self.selected_date and self.selected_time)

    def _reset_selection(self):
        self.controller.clear_results()
        self.selected_slot = None
        self.consent = ConsentState.NOT_ASKED

    def _search_if_ready(self):
        if self.is_ready_to_search:
            self.controller.search(self.selected_date, self.selected_time)

    def select_date(self, date: str):
        """
        Choose the appointment date.

        Clears results and the chosen slot. A time chosen earlier is
        dropped when it has already passed on the new date.

        Raises:
            BookingFlowError: If date is malformed or in the past
        """
        if not self.date_utils.is_valid_future_date(date):
            raise BookingFlowError(f"Please choose today or a later date (got '{date}')")

        self.selected_date = date
        self._reset_selection()

        if self.selected_time and self.date_utils.is_today(date):
            hour = parse_hour(self.selected_time)
            if hour not in self.date_utils.get_available_hours(date):
                logger.info(f"Dropping time {self.selected_time}: no longer bookable today")
                self.selected_time = ""

        self._search_if_ready()

    def select_time(self, time: str):
        """
        Choose the appointment time (HH:00).

        Raises:
            BookingFlowError: If time is not one of available_times()
        """
        if time not in self.available_times():
            raise BookingFlowError(f"{time} is not an available time")

        self.selected_time = time
        self._reset_selection()
        self._search_if_ready()

    def select_slot(self, slot_id: str) -> TimeSlot:
        """
        Pick a slot from the current search results.

        Raises:
            BookingFlowError: If the slot is not in the results or is taken
        """
        slot = next((s for s in self.controller.slots if s.id == slot_id), None)
        if slot is None:
            raise BookingFlowError(f"Slot '{slot_id}' is not in the current results")
        if not slot.available:
            raise BookingFlowError(f"Slot {slot.start_time}-{slot.end_time} is already booked")

        self.selected_slot = slot
        return slot

    def request_consent(self):
        """Open the consent dialog for the selected slot."""
        if self.selected_slot is None:
            raise BookingFlowError("Select a time slot before continuing")
        self.consent = ConsentState.PENDING

    def give_consent(self):
        if self.consent != ConsentState.PENDING:
            raise BookingFlowError("Consent has not been requested")
        self.consent = ConsentState.GIVEN

    def decline_consent(self):
        """Declining sends the visitor back to the start."""
        self.consent = ConsentState.DECLINED
        self.controller.cleanup()
        self.selected_date = ""
        self.selected_time = ""
        self.selected_slot = None
        self.controller.clear_results()

    def submit_booking(self, details: BookingRequest) -> Booking:
        """
        Submit the visitor's details for the selected slot.

        The date and time sent are the selected date and the slot's start
        time, overriding whatever details carries.

        Raises:
            BookingFlowError: If no slot is selected or consent was not given
            BookingApiError: If the backend call fails
        """
        if self.selected_slot is None:
            raise BookingFlowError("Select a time slot before booking")
        if self.consent != ConsentState.GIVEN:
            raise BookingFlowError("Consent is required before booking")

        request = details.model_copy(update={
            "date": self.selected_date,
            "time": self.selected_slot.start_time,
        })
        self.booking = self.api_client.create_booking(request)
        self.cancelled = False
        return self.booking

    def cancel_booking(self) -> bool:
        """
        Cancel the submitted booking.

        Returns:
            True if the backend confirmed the cancellation

        Raises:
            BookingFlowError: If nothing has been booked
            BookingApiError: If the backend call fails
        """
        if self.booking is None:
            raise BookingFlowError("There is no booking to cancel")

        result = self.api_client.cancel_booking(self.booking.appointment_id)
        if result.cancelled:
            self.cancelled = True
            logger.info(f"Booking {self.booking.appointment_id} cancelled")
        return self.cancelled

    def close(self):
        """Release the controller's pending lookup."""
        self.controller.cleanup()
