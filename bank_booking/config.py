"""Configuration for the bank appointment booking flow.

All business values centralized here - modify as needed without touching code.
Deployment-specific values can be overridden from the environment (or a .env file).
"""
import os

from dotenv import load_dotenv

load_dotenv()

# Banking hours offered to visitors (one-hour slots starting on the hour)
BANKING_HOURS = (9, 10, 11, 12, 13, 14, 15, 16, 17)
OPENING_HOUR = BANKING_HOURS[0]
CLOSING_HOUR = BANKING_HOURS[-1]

DEFAULT_SERVICE_TYPE = "Financial Health Check"
DEFAULT_DURATION_MINUTES = 60

BRANCH_INFO = {
    "id": "branch_001",
    "name": "Main Branch",
    "address": "123 Banking Street, London, UK",
}

# Client-side availability cache
CACHE_TTL_SECONDS = 5 * 60
CACHE_MAX_ENTRIES = 10
DEBOUNCE_DELAY_SECONDS = 0.3

# Mock availability generation
AVAILABILITY_RATE = 0.7
SIMULATED_DELAY_SECONDS = float(os.getenv("BANK_BOOKING_SIMULATED_DELAY", "0.8"))

# Booking defaults used by the mock booking endpoint
DEFAULT_BOOKING_SUBJECT = "FHC Video"
DEFAULT_BOOKING_TIME = "17:30"
DEFAULT_BOOKING_DATE = "27th August"
DEFAULT_TELEPHONE_PREFIX = "+44"

# User-facing messages
SEARCH_FAILED_MESSAGE = "Failed to search availability"
NETWORK_ERROR_MESSAGE = "Network error occurred. Please try again."

# API Configuration
MOCK_API_PORT = int(os.getenv("BANK_BOOKING_API_PORT", "5003"))
MOCK_API_BASE_URL = os.getenv("BANK_BOOKING_API_URL", f"http://localhost:{MOCK_API_PORT}")
SEARCH_AVAILABILITY_PATH = "/api/search-availability"
BOOK_APPOINTMENT_PATH = "/api/book-appointment"
CANCEL_APPOINTMENT_PATH = "/api/cancel-appointment"

HTTP_TIMEOUT_SECONDS = 15
HTTP_MAX_RETRIES = 3

LOG_LEVEL = os.getenv("BANK_BOOKING_LOG_LEVEL", "INFO")
