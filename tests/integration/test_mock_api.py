"""Integration tests for the mock booking backend endpoints."""
import random
import re
from unittest.mock import Mock

from bank_booking.mock_api import create_app, generate_time_slots
from tests.conftest import MOCK_TODAY


def search(client, **body):
    return client.post('/api/search-availability', json=body)


class TestSearchAvailability:
    def test_slots_cover_requested_hour_to_closing(self, test_client):
        response = search(test_client, date="2025-08-28", time="10:00")

        assert response.status_code == 200
        data = response.get_json()
        assert data["success"] is True
        slots = data["data"]["slots"]
        assert [slot["startTime"] for slot in slots] == [
            "10:00", "11:00", "12:00", "13:00", "14:00", "15:00", "16:00", "17:00"
        ]
        assert slots[0]["id"] == "slot_2025-08-28_1000"
        assert slots[-1]["endTime"] == "18:00"

    def test_availability_follows_random_source(self):
        app = create_app(rng=random.Random(7), delay=0, today=lambda: MOCK_TODAY)
        expected_rng = random.Random(7)
        expected = [expected_rng.random() > 0.3 for _ in range(8)]

        with app.test_client() as client:
            slots = search(client, date="2025-08-28", time="10:00").get_json()["data"]["slots"]

        assert [slot["available"] for slot in slots] == expected
        for slot in slots:
            hour = int(slot["startTime"][:2])
            if slot["available"]:
                assert "bookingReference" not in slot
            else:
                assert slot["bookingReference"] == f"booked_{hour}"

    def test_early_request_starts_at_opening(self, test_client):
        slots = search(test_client, date="2025-08-28", time="07:00").get_json()["data"]["slots"]
        assert slots[0]["startTime"] == "09:00"
        assert len(slots) == 9

    def test_request_after_closing_has_no_slots(self, test_client):
        response = search(test_client, date="2025-08-28", time="18:00")
        assert response.status_code == 200
        assert response.get_json()["data"]["slots"] == []

    def test_today_is_searchable(self, test_client):
        response = search(test_client, date="2025-08-27", time="15:00")
        assert response.status_code == 200

    def test_defaults_and_branch_info(self, test_client):
        data = search(test_client, date="2025-08-28", time="10:00").get_json()["data"]

        assert data["date"] == "2025-08-28"
        assert data["serviceType"] == "Financial Health Check"
        assert data["duration"] == 60
        assert data["branchInfo"] == {
            "id": "branch_001",
            "name": "Main Branch",
            "address": "123 Banking Street, London, UK",
        }

    def test_echoes_service_type_and_duration(self, test_client):
        data = search(
            test_client, date="2025-08-28", time="10:00", serviceType="Mortgage Review", duration=30
        ).get_json()["data"]

        assert data["serviceType"] == "Mortgage Review"
        assert data["duration"] == 30

    def test_missing_parameters(self, test_client):
        response = search(test_client, date="2025-08-28")

        assert response.status_code == 400
        assert response.get_json() == {
            "success": False,
            "error": {
                "code": "MISSING_PARAMETERS",
                "message": "Date and time are required parameters",
            },
        }

    def test_empty_body_is_missing_parameters(self, test_client):
        response = test_client.post('/api/search-availability')
        assert response.status_code == 400
        assert response.get_json()["error"]["code"] == "MISSING_PARAMETERS"

    def test_non_object_body(self, test_client):
        response = test_client.post('/api/search-availability', json=["2025-08-28", "10:00"])
        assert response.status_code == 400
        assert response.get_json()["error"]["code"] == "INVALID_REQUEST"

    def test_past_date_rejected(self, test_client):
        response = search(test_client, date="2025-08-26", time="10:00")

        assert response.status_code == 400
        error = response.get_json()["error"]
        assert error["code"] == "INVALID_DATE"
        assert error["message"] == "Cannot search for availability in the past"

    def test_malformed_date_rejected(self, test_client):
        response = search(test_client, date="28/08/2025", time="10:00")
        assert response.status_code == 400
        assert response.get_json()["error"]["code"] == "INVALID_DATE"

    def test_malformed_time_rejected(self, test_client):
        response = search(test_client, date="2025-08-28", time="ten")
        assert response.status_code == 400
        assert response.get_json()["error"]["code"] == "INVALID_TIME"

    def test_mistyped_duration_rejected(self, test_client):
        response = search(test_client, date="2025-08-28", time="10:00", duration="sixty")

        assert response.status_code == 400
        error = response.get_json()["error"]
        assert error["code"] == "INVALID_REQUEST"
        assert "duration" in error["message"]

    def test_mistyped_service_type_rejected(self, test_client):
        response = search(test_client, date="2025-08-28", time="10:00", serviceType=5)

        assert response.status_code == 400
        assert response.get_json()["error"]["code"] == "INVALID_REQUEST"

    def test_null_optional_fields_use_defaults(self, test_client):
        response = search(test_client, date="2025-08-28", time="10:00", serviceType=None, duration=None)

        assert response.status_code == 200
        data = response.get_json()["data"]
        assert data["serviceType"] == "Financial Health Check"
        assert data["duration"] == 60

    def test_simulated_delay(self):
        sleep = Mock()
        app = create_app(rng=random.Random(1), delay=0.8, sleep=sleep, today=lambda: MOCK_TODAY)

        with app.test_client() as client:
            search(client, date="2025-08-28", time="10:00")
            search(client, date="2025-08-20", time="10:00")

        # Rejected searches answer immediately
        sleep.assert_called_once_with(0.8)

    def test_unexpected_error_returns_internal_error(self):
        rng = Mock()
        rng.random.side_effect = RuntimeError("entropy exhausted")
        app = create_app(rng=rng, delay=0, today=lambda: MOCK_TODAY)

        with app.test_client() as client:
            response = search(client, date="2025-08-28", time="10:00")

        assert response.status_code == 500
        assert response.get_json()["error"]["code"] == "INTERNAL_ERROR"

    def test_wrong_method(self, test_client):
        assert test_client.get('/api/search-availability').status_code == 405

    def test_response_has_request_id(self, test_client):
        response = search(test_client, date="2025-08-28", time="10:00")
        assert response.headers['X-Request-ID'].startswith('req-')


class TestGenerateTimeSlots:
    def test_always_available_source(self):
        rng = Mock()
        rng.random.return_value = 0.99
        slots = generate_time_slots("2025-08-28", "13:00", rng)

        assert [slot.hour for slot in slots] == [13, 14, 15, 16, 17]
        assert all(slot.available for slot in slots)

    def test_never_available_source(self):
        rng = Mock()
        rng.random.return_value = 0.3
        slots = generate_time_slots("2025-08-28", "16:00", rng)

        assert [slot.booking_reference for slot in slots] == ["booked_16", "booked_17"]


class TestBookAppointment:
    def test_books_from_json(self, test_client):
        response = test_client.post('/api/book-appointment', json={
            "firstName": "Ada",
            "lastName": "Lovelace",
            "email": "ada@example.com",
            "subject": "Savings review",
            "date": "2025-08-28",
            "time": "10:00",
        })

        assert response.status_code == 200
        booking = response.get_json()
        assert booking["customerName"] == "Ada Lovelace"
        assert booking["subject"] == "Savings review"
        assert booking["duration"] == "60 minutes"
        assert booking["confirmationEmail"] == "ada@example.com"
        assert booking["date"] == "2025-08-28"
        assert booking["time"] == "10:00"
        assert re.fullmatch(r"APBK-\d{1,8}", booking["appointmentId"])

    def test_books_from_form_fields(self, test_client):
        response = test_client.post('/api/book-appointment', data={
            "firstName": "Grace", "lastName": "Hopper", "email": "grace@example.com"
        })

        booking = response.get_json()
        assert booking["customerName"] == "Grace Hopper"
        assert booking["confirmationEmail"] == "grace@example.com"

    def test_defaults(self, test_client):
        booking = test_client.post('/api/book-appointment', json={}).get_json()

        assert booking["subject"] == "FHC Video"
        assert booking["time"] == "17:30"
        assert booking["date"] == "27th August"

    def test_mistyped_email_rejected(self, test_client):
        response = test_client.post('/api/book-appointment', json={"firstName": "Ada", "email": 7})

        assert response.status_code == 400
        error = response.get_json()["error"]
        assert error["code"] == "INVALID_REQUEST"
        assert "email" in error["message"]

    def test_null_names_are_blank(self, test_client):
        booking = test_client.post('/api/book-appointment', json={
            "firstName": None, "lastName": "Lovelace", "email": None
        }).get_json()

        assert booking["customerName"] == "Lovelace"
        assert "confirmationEmail" not in booking

    def test_appointment_ids_are_fresh(self, test_client):
        first = test_client.post('/api/book-appointment', json={}).get_json()
        second = test_client.post('/api/book-appointment', json={}).get_json()
        assert first["appointmentId"] != second["appointmentId"]

    def test_wrong_method(self, test_client):
        assert test_client.get('/api/book-appointment').status_code == 405


class TestCancelAppointment:
    def test_always_cancelled(self, test_client):
        response = test_client.post('/api/cancel-appointment', json={"appointmentId": "APBK-1"})
        assert response.status_code == 200
        assert response.get_json() == {"cancelled": True}

    def test_unknown_or_missing_id_still_cancelled(self, test_client):
        response = test_client.post('/api/cancel-appointment')
        assert response.get_json() == {"cancelled": True}

    def test_wrong_method(self, test_client):
        assert test_client.get('/api/cancel-appointment').status_code == 405


def test_health(test_client):
    response = test_client.get('/health')
    assert response.status_code == 200
    assert response.get_json()["status"] == "healthy"
