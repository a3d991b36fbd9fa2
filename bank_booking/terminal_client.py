#!/usr/bin/env python3
"""Terminal client for booking a bank appointment.

Usage:
    bank-booking [--api-url http://localhost:5003]

Walks through the booking flow against a running mock API:
date -> time -> slot -> consent -> contact details -> confirmation.
"""
import argparse
import asyncio
import sys

from bank_booking import config
from bank_booking.api.models import BookingRequest
from bank_booking.api_client import BookingApiClient, BookingApiError
from bank_booking.booking_flow import BookingFlow, BookingFlowError
from bank_booking.date_utils import DateUtils
from bank_booking.logging_config import setup_structured_logging
from bank_booking.search import SearchAvailabilityController


# ANSI color codes
class Colors:
    BLUE = '\033[94m'
    GREEN = '\033[92m'
    YELLOW = '\033[93m'
    RED = '\033[91m'
    RESET = '\033[0m'
    BOLD = '\033[1m'


def print_colored(text: str, color: str = Colors.RESET):
    """Print colored text."""
    print(f"{color}{text}{Colors.RESET}")


async def ask(prompt: str, default: str = "") -> str:
    suffix = f" [{default}]" if default else ""
    answer = await asyncio.to_thread(input, f"{Colors.BOLD}{prompt}{suffix}: {Colors.RESET}")
    return answer.strip() or default


async def choose_date_and_time(flow: BookingFlow):
    date_utils = flow.date_utils
    while True:
        date = await ask("Date (YYYY-MM-DD)", date_utils.today)
        try:
            flow.select_date(date)
        except BookingFlowError as e:
            print_colored(str(e), Colors.RED)
            continue
        if not flow.available_times():
            print_colored("No more appointments today, please pick another date.", Colors.YELLOW)
            continue
        break

    print_colored(f"Available times on {date_utils.format_date_for_display(date)}:", Colors.BLUE)
    print("   " + "  ".join(flow.available_times()))
    while True:
        try:
            flow.select_time(await ask("Time", flow.available_times()[0]))
            return
        except BookingFlowError as e:
            print_colored(str(e), Colors.RED)


async def choose_slot(flow: BookingFlow) -> bool:
    controller = flow.controller
    print_colored("Searching for available slots...", Colors.YELLOW)
    await controller.wait_until_settled()

    if controller.error:
        print_colored(f"❌ {controller.error}", Colors.RED)
        return False

    open_slots = [slot for slot in controller.slots if slot.available]
    if not open_slots:
        print_colored("No slots available for this time, try another.", Colors.YELLOW)
        return False

    for index, slot in enumerate(controller.slots, start=1):
        status = "available" if slot.available else "booked"
        color = Colors.GREEN if slot.available else Colors.RED
        print_colored(f"   {index}. {slot.start_time} - {slot.end_time} ({status})", color)

    while True:
        choice = await ask("Slot number")
        try:
            slot = controller.slots[int(choice) - 1]
            flow.select_slot(slot.id)
            return True
        except (ValueError, IndexError):
            print_colored("Please enter one of the numbers above.", Colors.RED)
        except BookingFlowError as e:
            print_colored(str(e), Colors.RED)


async def collect_details() -> BookingRequest:
    return BookingRequest(
        first_name=await ask("First name"),
        last_name=await ask("Last name"),
        telephone=await ask("Telephone number", config.DEFAULT_TELEPHONE_PREFIX),
        email=await ask("Email"),
        postcode=await ask("Postcode"),
        notes=await ask("Notes (optional)"),
    )


async def run(api_url: str) -> int:
    api_client = BookingApiClient(base_url=api_url)
    flow = BookingFlow(SearchAvailabilityController(api_client), api_client, DateUtils())

    try:
        while True:
            await choose_date_and_time(flow)
            if await choose_slot(flow):
                break

        flow.request_consent()
        print_colored(
            "Your details will be used by the bank to arrange this appointment.",
            Colors.BLUE
        )
        if (await ask("Do you consent? (y/n)", "y")).lower() != "y":
            flow.decline_consent()
            print_colored("Booking abandoned.", Colors.YELLOW)
            return 1
        flow.give_consent()

        booking = flow.submit_booking(await collect_details())
        print_colored("\n✅ Appointment confirmed", Colors.GREEN)
        print(f"   Reference: {booking.appointment_id}")
        print(f"   Name:      {booking.customer_name}")
        print(f"   Subject:   {booking.subject} ({booking.duration})")
        print(f"   When:      {flow.date_utils.format_date_for_display(booking.date)} {booking.time}")
        print(f"   Email:     {booking.confirmation_email or '-'}")

        if (await ask("Cancel this appointment? (y/n)", "n")).lower() == "y":
            if flow.cancel_booking():
                print_colored("Appointment cancelled.", Colors.YELLOW)
        return 0

    except BookingApiError as e:
        print_colored(f"❌ {e.message}", Colors.RED)
        print_colored("Check that the mock API is running:", Colors.YELLOW)
        print_colored("  python -m bank_booking.mock_api", Colors.YELLOW)
        return 1
    finally:
        flow.close()


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Book a bank appointment from the terminal")
    parser.add_argument("--api-url", default=config.MOCK_API_BASE_URL, help="Mock API base URL")
    args = parser.parse_args(argv)
    setup_structured_logging("WARNING", json_logs=False)

    try:
        return asyncio.run(run(args.api_url))
    except (KeyboardInterrupt, EOFError):
        print()
        return 130


if __name__ == "__main__":
    sys.exit(main())
