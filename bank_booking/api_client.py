"""Client for the booking backend endpoints.

Wraps the three JSON endpoints (availability search, booking creation,
cancellation) behind typed methods. Transport problems surface as
BookingApiError; the search endpoint's structured failures are returned
as a SearchAvailabilityResponse with success=False.
"""
import logging
from typing import Optional

import requests
from pydantic import ValidationError

from bank_booking import config
from bank_booking.api.models import (
    Booking,
    BookingRequest,
    CancellationRequest,
    CancellationResponse,
    SearchAvailabilityRequest,
    SearchAvailabilityResponse,
)
from bank_booking.circuit_breaker import CircuitBreaker, CircuitBreakerOpen
from bank_booking.http_client import create_http_session, raise_for_server_error

logger = logging.getLogger(__name__)


class BookingApiError(Exception):
    """Raised when the backend cannot be reached or answers with an error."""

    def __init__(self, code: str, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.status_code = status_code


class BookingApiClient:
    """Typed access to the booking backend."""

    def __init__(
        self,
        base_url: str = config.MOCK_API_BASE_URL,
        session: Optional[requests.Session] = None,
        circuit_breaker: Optional[CircuitBreaker] = None
    ):
        """
        Args:
            base_url: Backend root, e.g. http://localhost:5003
            session: HTTP session (default: retrying session from create_http_session)
            circuit_breaker: Breaker shared by all calls of this client
        """
        self.base_url = base_url.rstrip("/")
        self.session = session or create_http_session()
        self.circuit_breaker = circuit_breaker or CircuitBreaker(
            failure_threshold=5,
            timeout=60,
            expected_exceptions=(requests.exceptions.RequestException,)
        )

    def _send(self, url: str, payload: dict) -> requests.Response:
        response = self.session.post(url, json=payload)
        # Counted as a breaker failure; the body is still handed back below
        raise_for_server_error(response)
        return response

    def _post(self, path: str, payload: dict) -> requests.Response:
        url = f"{self.base_url}{path}"
        try:
            return self.circuit_breaker.call(self._send, url, payload)
        except CircuitBreakerOpen as e:
            logger.warning(f"Backend call to {path} skipped: {e}")
            raise BookingApiError("SERVICE_UNAVAILABLE", str(e)) from e
        except requests.exceptions.HTTPError as e:
            if e.response is None:
                raise BookingApiError("NETWORK_ERROR", str(e)) from e
            logger.warning(f"Backend call to {path} answered {e.response.status_code}")
            return e.response
        except requests.exceptions.RequestException as e:
            logger.warning(f"Backend call to {path} failed: {e}")
            raise BookingApiError("NETWORK_ERROR", str(e)) from e

    @staticmethod
    def _json(response: requests.Response) -> dict:
        try:
            body = response.json()
        except ValueError as e:
            raise BookingApiError(
                "INVALID_RESPONSE",
                "Backend returned a non-JSON body",
                response.status_code
            ) from e
        if not isinstance(body, dict):
            raise BookingApiError(
                "INVALID_RESPONSE",
                "Backend returned an unexpected body",
                response.status_code
            )
        return body

    @staticmethod
    def _raise_for_error(response: requests.Response, body: dict):
        if response.status_code < 400:
            return
        error = body.get("error")
        if isinstance(error, dict):
            code = error.get("code", f"HTTP_{response.status_code}")
            message = error.get("message", "Request failed")
        else:
            code = f"HTTP_{response.status_code}"
            message = error or "Request failed"
        raise BookingApiError(code, message, response.status_code)

    def search_availability(self, request: SearchAvailabilityRequest) -> SearchAvailabilityResponse:
        """
        POST /api/search-availability.

        Returns:
            Parsed response; validation failures come back with success=False

        Raises:
            BookingApiError: Transport failure or malformed body
        """
        response = self._post(config.SEARCH_AVAILABILITY_PATH, request.to_wire())
        body = self._json(response)
        try:
            return SearchAvailabilityResponse.model_validate(body)
        except ValidationError as e:
            raise BookingApiError(
                "INVALID_RESPONSE",
                "Availability response did not match the expected shape",
                response.status_code
            ) from e

    def create_booking(self, request: BookingRequest) -> Booking:
        """
        POST /api/book-appointment.

        Raises:
            BookingApiError: Transport failure, error status or malformed body
        """
        response = self._post(config.BOOK_APPOINTMENT_PATH, request.to_wire())
        body = self._json(response)
        self._raise_for_error(response, body)
        try:
            booking = Booking.model_validate(body)
        except ValidationError as e:
            raise BookingApiError(
                "INVALID_RESPONSE",
                "Booking response did not match the expected shape",
                response.status_code
            ) from e
        logger.info(f"Booking created: {booking.appointment_id}")
        return booking

    def cancel_booking(self, appointment_id: str) -> CancellationResponse:
        """
        POST /api/cancel-appointment.

        Raises:
            BookingApiError: Transport failure, error status or malformed body
        """
        request = CancellationRequest(appointment_id=appointment_id)
        response = self._post(config.CANCEL_APPOINTMENT_PATH, request.to_wire())
        body = self._json(response)
        self._raise_for_error(response, body)
        try:
            return CancellationResponse.model_validate(body)
        except ValidationError as e:
            raise BookingApiError(
                "INVALID_RESPONSE",
                "Cancellation response did not match the expected shape",
                response.status_code
            ) from e
