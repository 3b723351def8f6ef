"""Load the bundled catalog and sample bookings, then print the active views"""

import asyncio
import os
import sys
import logging
from datetime import datetime

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src")))

from rail_reservations import ReservationEngine, ReservationError
from rail_reservations.utils.clock import FixedClock
from rail_reservations.utils.config import get_settings
from rail_reservations.utils.date_utils import format_date, parse_datetime

RESOURCES = os.path.join(os.path.dirname(__file__), "..", "src", "rail_reservations", "resources")
BOOKINGS_PATH = os.path.join(RESOURCES, "sample_bookings.json")


async def seed(at: str = "2024-12-18 12:00:00"):
    settings = get_settings()
    clock = FixedClock(parse_datetime(at), settings.local_timezone)
    engine = ReservationEngine(clock=clock, settings=settings)

    print("Rail reservations demo")
    print("=" * 50)
    print(f"Evaluation time: {at} ({settings.local_timezone})")
    await engine.catalog.load_catalog(settings.catalog_path)
    passengers, tickets = await engine.load_bookings(BOOKINGS_PATH)
    print(f"Loaded {passengers} passengers, {tickets} tickets")

    print("\nRejected mutations:")
    attempts = [
        ("too young", lambda: engine.create_passenger({
            "id": 6, "first_name": "Geetha", "date_of_birth": "2022-12-19",
            "email": "", "phone_number": "9876543215"})),
        ("seat taken", lambda: engine.book_ticket(
            "Duronto Express", 2, "Bangalore", "Chennai", "2024-12-18 17:35:00", "2024-12-18 23:00:00",
            coach="D", seat=15, fare="950.00")),
    ]
    for label, attempt in attempts:
        try:
            attempt()
            print(f"    - {label}: accepted")
        except ReservationError as e:
            print(f"    - {label}: {type(e).__name__}: {e}")

    expired = engine.book_ticket("Rajdhani Express", 3, "New Delhi", "Mumbai",
                                 "2023-11-01 01:10:00", "2023-11-01 18:32:00", coach="A", seat=5, fare="1500.00")
    print(f"\nExpired ticket {expired} booked, still stored: {expired in [r.id for r in engine.reservations.all()]}")

    print("\nActive passengers:")
    for p in engine.list_active_passengers():
        print(f"    - {p.id} {p.first_name} {p.last_name or ''} born {format_date(p.date_of_birth)} "
              f"{p.phone_number} {p.email or '-'}")

    print("\nActive tickets:")
    for t in engine.list_active_tickets():
        print(f"    - #{t.id} {t.name} ({t.phone_number}) {t.train_name} {t.coach}-{t.seat} "
              f"{t.departure_station} {t.departure} -> {t.arrival_station} {t.arrival or ''}")

    print("\nDuronto Express stops:")
    for stop in engine.list_train_stops("Duronto Express"):
        print(f"    - {stop.station} {stop.departure}")
    print(f"\nDone at {datetime.now().isoformat()}")


if __name__ == "__main__":
    logging.basicConfig(level=logging.WARNING)
    asyncio.run(seed(*sys.argv[1:2]))
