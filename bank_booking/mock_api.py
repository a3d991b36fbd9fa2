"""Mock API for the bank appointment booking flow.

Flask server standing in for the bank's booking backend:
- Availability search (randomly generated slots)
- Appointment creation (randomly generated appointment id)
- Appointment cancellation (always succeeds)

Run with: python -m bank_booking.mock_api
"""
import random
import time
from datetime import date as Date, datetime
from typing import Callable, List, Optional

from flask import Flask, jsonify, request
from flask_cors import CORS
from pydantic import ValidationError
from werkzeug.exceptions import HTTPException

from bank_booking import config
from bank_booking.api.models import (
    ApiError,
    Booking,
    BookingRequest,
    BranchInfo,
    SearchAvailabilityRequest,
    SearchAvailabilityData,
    SearchAvailabilityResponse,
    TimeSlot,
)
from bank_booking.date_utils import parse_date, parse_hour
from bank_booking.logging_config import (
    RequestIDMiddleware,
    get_logger,
    setup_structured_logging,
)

logger = get_logger(__name__)


def generate_time_slots(date: str, requested_time: str, rng: random.Random) -> List[TimeSlot]:
    """Generate one-hour slots from the requested hour up to closing time.

    Args:
        date: Requested date (YYYY-MM-DD), used in slot ids
        requested_time: Requested time (HH:mm)
        rng: Randomness source deciding each slot's availability

    Returns:
        Slots in ascending order, each available with AVAILABILITY_RATE probability
    """
    requested_hour = int(requested_time.split(":")[0])

    start_hour = max(config.OPENING_HOUR, requested_hour)
    end_hour = min(config.CLOSING_HOUR, max(requested_hour + 5, config.CLOSING_HOUR))

    slots = []
    for hour in range(start_hour, end_hour + 1):
        is_available = rng.random() > 1 - config.AVAILABILITY_RATE
        slots.append(TimeSlot(
            id=f"slot_{date}_{hour:02d}00",
            start_time=f"{hour:02d}:00",
            end_time=f"{hour + 1:02d}:00",
            available=is_available,
            booking_reference=None if is_available else f"booked_{hour}",
        ))

    return slots


def error_response(code: str, message: str, status: int):
    body = SearchAvailabilityResponse(success=False, error=ApiError(code=code, message=message))
    return jsonify(body.to_wire()), status


def present_fields(data: dict) -> dict:
    """Drop null fields so they fall back to their defaults."""
    return {key: value for key, value in data.items() if value is not None}


def invalid_fields_response(exc: ValidationError):
    fields = sorted({".".join(str(part) for part in error["loc"]) for error in exc.errors()})
    logger.info("request_rejected", code="INVALID_REQUEST", fields=fields)
    return error_response("INVALID_REQUEST", f"Invalid value for: {', '.join(fields)}", 400)


def create_app(
    rng: Optional[random.Random] = None,
    delay: Optional[float] = None,
    sleep: Callable[[float], None] = time.sleep,
    today: Callable[[], Date] = lambda: datetime.now().date()
) -> Flask:
    """
    Build the mock backend.

    Args:
        rng: Randomness for availability and appointment ids (default: unseeded)
        delay: Simulated processing delay for availability searches in seconds
        sleep: Function used to wait out the delay
        today: Returns the current calendar date
    """
    app = Flask(__name__)
    CORS(app)
    app.wsgi_app = RequestIDMiddleware(app.wsgi_app)

    rng = rng or random.Random()
    delay = config.SIMULATED_DELAY_SECONDS if delay is None else delay

    @app.errorhandler(Exception)
    def handle_unexpected_error(exc):
        if isinstance(exc, HTTPException):
            return exc
        logger.error("unexpected_error", path=request.path, error=str(exc), exc_info=True)
        return error_response(
            "INTERNAL_ERROR",
            "An unexpected error occurred while processing the request",
            500
        )

    @app.route('/api/search-availability', methods=['POST'])
    def search_availability():
        """POST /api/search-availability

        Expected JSON body:
        {"date": "2025-08-28", "time": "10:00", "serviceType": "...", "duration": 60}
        """
        data = request.get_json(silent=True)
        if data is None:
            data = {}
        if not isinstance(data, dict):
            return error_response("INVALID_REQUEST", "Request body must be a JSON object", 400)

        requested_date = data.get("date")
        requested_time = data.get("time")

        if not requested_date or not requested_time:
            logger.info("search_rejected", code="MISSING_PARAMETERS")
            return error_response(
                "MISSING_PARAMETERS", "Date and time are required parameters", 400
            )

        try:
            search_request = SearchAvailabilityRequest.model_validate(present_fields(data))
        except ValidationError as e:
            return invalid_fields_response(e)

        parsed_date = parse_date(requested_date)
        if parsed_date is None:
            return error_response("INVALID_DATE", "Invalid date format. Use YYYY-MM-DD", 400)

        if parsed_date < today():
            logger.info("search_rejected", code="INVALID_DATE", date=requested_date)
            return error_response(
                "INVALID_DATE", "Cannot search for availability in the past", 400
            )

        if parse_hour(requested_time) is None:
            return error_response("INVALID_TIME", "Invalid time format. Use HH:mm", 400)

        # Simulated banking system response time
        if delay > 0:
            sleep(delay)

        slots = generate_time_slots(requested_date, requested_time, rng)
        response = SearchAvailabilityResponse(
            success=True,
            data=SearchAvailabilityData(
                date=requested_date,
                service_type=search_request.service_type or config.DEFAULT_SERVICE_TYPE,
                duration=search_request.duration or config.DEFAULT_DURATION_MINUTES,
                slots=slots,
                branch_info=BranchInfo(**config.BRANCH_INFO),
            ),
        )
        logger.info(
            "availability_generated",
            date=requested_date,
            time=requested_time,
            slots=len(slots),
            available=sum(1 for slot in slots if slot.available),
        )
        return jsonify(response.to_wire())

    @app.route('/api/book-appointment', methods=['POST'])
    def book_appointment():
        """POST /api/book-appointment - Create a booking from the booking form.

        Accepts JSON or form-encoded fields: firstName, lastName, telephone,
        email, postcode, notes, subject, time, date.
        """
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            data = request.form.to_dict()

        try:
            details = BookingRequest.model_validate(present_fields(data))
        except ValidationError as e:
            return invalid_fields_response(e)

        booking = Booking(
            customer_name=f"{details.first_name} {details.last_name}".strip(),
            subject=details.subject or config.DEFAULT_BOOKING_SUBJECT,
            duration=f"{config.DEFAULT_DURATION_MINUTES} minutes",
            confirmation_email=details.email or None,
            appointment_id=f"APBK-{rng.randrange(100_000_000)}",
            time=details.time or config.DEFAULT_BOOKING_TIME,
            date=details.date or config.DEFAULT_BOOKING_DATE,
        )
        logger.info("booking_created", appointment_id=booking.appointment_id)
        return jsonify(booking.to_wire())

    @app.route('/api/cancel-appointment', methods=['POST'])
    def cancel_appointment():
        """POST /api/cancel-appointment - Cancel a booking.

        No bookings are stored, so every cancellation succeeds.
        """
        data = request.get_json(silent=True)
        appointment_id = data.get("appointmentId") if isinstance(data, dict) else None
        logger.info("booking_cancelled", appointment_id=appointment_id)
        return jsonify({"cancelled": True})

    @app.route('/health', methods=['GET'])
    def health_check():
        """GET /health - Health check endpoint."""
        return jsonify({
            "success": True,
            "status": "healthy",
            "timestamp": datetime.now().isoformat()
        })

    return app


def print_startup_info():
    """Print server startup information."""
    print("=" * 70)
    print("MOCK BANK BOOKING API")
    print("=" * 70)
    print(f"\nServer: http://localhost:{config.MOCK_API_PORT}")
    print(f"Branch: {config.BRANCH_INFO['name']} - {config.BRANCH_INFO['address']}")
    print(f"Banking hours: {config.OPENING_HOUR:02d}:00 - {config.CLOSING_HOUR + 1:02d}:00")
    print(f"Simulated delay: {config.SIMULATED_DELAY_SECONDS}s")

    print("\nEndpoints:")
    print("   POST /api/search-availability  - Search slots for a date/time")
    print("   POST /api/book-appointment     - Create booking")
    print("   POST /api/cancel-appointment   - Cancel booking")
    print("   GET  /health                   - Health check")
    print("=" * 70)


def main():
    setup_structured_logging(config.LOG_LEVEL)
    print_startup_info()
    create_app().run(
        debug=False,
        port=config.MOCK_API_PORT,
        host='0.0.0.0'
    )


if __name__ == '__main__':
    main()
