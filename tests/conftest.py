"""Shared test fixtures."""
import random
from datetime import date, datetime
from typing import Iterable
from unittest.mock import Mock
from urllib.parse import urlsplit

import pytest

from bank_booking.api.models import (
    SearchAvailabilityData,
    SearchAvailabilityResponse,
    TimeSlot,
)
from bank_booking.api_client import BookingApiClient
from bank_booking.mock_api import create_app

MOCK_TODAY = date(2025, 8, 27)


class FakeClock:
    """Manually advanced time source (seconds)."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class FlaskTestResponse:
    """Gives a Flask test response the requests.Response surface the client uses."""

    def __init__(self, response):
        self._response = response
        self.status_code = response.status_code
        self.url = ""

    def json(self):
        body = self._response.get_json(silent=True)
        if body is None:
            raise ValueError("Response body is not JSON")
        return body


class FlaskTestSession:
    """Routes BookingApiClient calls into a Flask test client."""

    def __init__(self, test_client):
        self.test_client = test_client
        self.requests = []

    def post(self, url, json=None, **kwargs):
        path = urlsplit(url).path
        self.requests.append((path, json))
        return FlaskTestResponse(self.test_client.post(path, json=json))


def make_slots(date_str: str, hours: Iterable[int], unavailable: Iterable[int] = ()) -> list:
    """Build slots the way the mock backend shapes them."""
    unavailable = set(unavailable)
    return [
        TimeSlot(
            id=f"slot_{date_str}_{hour:02d}00",
            start_time=f"{hour:02d}:00",
            end_time=f"{hour + 1:02d}:00",
            available=hour not in unavailable,
            booking_reference=f"booked_{hour}" if hour in unavailable else None,
        )
        for hour in hours
    ]


def success_response(date_str: str, slots: list) -> SearchAvailabilityResponse:
    return SearchAvailabilityResponse(
        success=True,
        data=SearchAvailabilityData(
            date=date_str,
            service_type="Financial Health Check",
            duration=60,
            slots=slots,
        ),
    )


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def afternoon_now() -> datetime:
    """14:30 on the mock 'today'."""
    return datetime(2025, 8, 27, 14, 30)


@pytest.fixture
def search_api_client():
    """Backend client double answering every search with slots 10:00-17:00."""
    client = Mock(spec=BookingApiClient)

    def answer(request):
        hours = range(max(9, int(request.time[:2])), 18)
        return success_response(request.date, make_slots(request.date, hours, unavailable={12}))

    client.search_availability.side_effect = answer
    return client


@pytest.fixture
def mock_app():
    """Mock backend with seeded randomness, no delay and a fixed 'today'."""
    app = create_app(rng=random.Random(42), delay=0, today=lambda: MOCK_TODAY)
    return app


@pytest.fixture
def test_client(mock_app):
    return mock_app.test_client()


@pytest.fixture
def live_api_client(test_client):
    """Real BookingApiClient talking to the mock app in-process."""
    return BookingApiClient(base_url="http://mock", session=FlaskTestSession(test_client))
