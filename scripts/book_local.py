#!/usr/bin/env python3
"""
Interactive local booking harness (no HTTP).

Usage:
  python3 scripts/book_local.py [--doctor demo-doctor]

What it does:
- Opens a BookingWizard against the in-memory MockBookingService
- Walks through service -> date -> time -> summary -> payment
- Prints the candidate slots and wizard state after every action
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from dotenv import load_dotenv

from clinic_booking.application.exceptions import InvalidTimeFormat, WizardError
from clinic_booking.application.utils.calendar_dates import parse_calendar_date
from clinic_booking.domain.entities.booking_selection import DoctorSummary, WizardStep
from clinic_booking.infrastructure.booking_api.mock_booking_service import MockBookingService
from clinic_booking.application.use_cases.booking_wizard import BookingWizard
from clinic_booking.wiring.dependencies import get_clinic_timezone, get_wizard_messages

load_dotenv()


def _print_state(wizard: BookingWizard) -> None:
    selection = wizard.selection
    print("-" * 60)
    print(f"step: {int(selection.current_step)} ({selection.current_step.name})")
    print(f"service: {selection.selected_service.value if selection.selected_service else '-'}")
    print(f"date: {selection.selected_date or '-'}  time: {selection.selected_time or '-'}")
    if wizard.error:
        print(f"error: {wizard.error}")
    if selection.current_step == WizardStep.SELECT_TIME:
        if not wizard.candidate_slots:
            print("No times available on this day.")
        for slot in wizard.candidate_slots:
            mark = "open" if slot.is_available else ("booked" if slot.is_booked else "past")
            print(f"  {slot.time}  {mark}")
    if wizard.booking_result:
        result = wizard.booking_result
        print(f"booking: {result.booking_id} total={result.total_amount} payment={result.payment_status}")
    print("-" * 60)


def _print_help() -> None:
    print("Commands:")
    print("  service regular_checkup|follow_up")
    print("  date YYYY-MM-DD")
    print("  time HH:mm")
    print("  confirm | pay | back N | calendar | reset | quit")


async def _run(doctor_id: str) -> None:
    wizard = BookingWizard(
        service=MockBookingService(),
        doctor=DoctorSummary(id=doctor_id),
        timezone=get_clinic_timezone(),
        messages=get_wizard_messages(),
    )
    await wizard.open()
    if not wizard.is_ready:
        print(f"Could not open booking: {wizard.error}")
        return

    _print_help()
    _print_state(wizard)
    try:
        while True:
            line = (await asyncio.to_thread(input, "> ")).strip()
            if not line:
                continue
            command, _, arg = line.partition(" ")
            try:
                if command == "quit":
                    break
                elif command == "service":
                    await wizard.select_service(arg)
                elif command == "date":
                    await wizard.select_date(parse_calendar_date(arg))
                elif command == "time":
                    if not await wizard.select_time(arg):
                        print("That time is not available.")
                elif command == "confirm":
                    await wizard.confirm_booking()
                elif command == "pay":
                    await wizard.complete_payment()
                elif command == "back":
                    await wizard.go_to_step(int(arg))
                elif command == "calendar":
                    for day in wizard.booking_calendar():
                        print(f"  {day.date}  {day.status.value}")
                elif command == "reset":
                    await wizard.reset_booking()
                else:
                    _print_help()
                    continue
            except (WizardError, InvalidTimeFormat, ValueError) as e:
                print(f"! {e}")
            _print_state(wizard)
    finally:
        await wizard.close()


def main() -> None:
    parser = argparse.ArgumentParser(description="Walk through the booking wizard locally.")
    parser.add_argument("--doctor", default="demo-doctor")
    args = parser.parse_args()
    asyncio.run(_run(args.doctor))


if __name__ == "__main__":
    main()
