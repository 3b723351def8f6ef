"""
Engine pipeline

Every rejected mutation must surface as a typed error and leave the
stores exactly as they were.
"""

from concurrent.futures import ThreadPoolExecutor
from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from rail_reservations import (
    DuplicateRecord, IntervalOrderError, ReferentialError, SeatConflict, ValidationError,
)


def snapshot(engine):
    return [r.model_dump() for r in engine.reservations.all()]


def book(engine, holder, **overrides):
    args = {
        "train_name": "Duronto Express",
        "passenger_id": holder,
        "departure_station": "Mumbai",
        "arrival_station": "Chennai",
        "departure": "2024-12-20 01:45:00",
        "arrival": "2024-12-20 23:00:00",
        "coach": "D",
        "seat": 15,
        "fare": "1100.00",
    }
    args.update(overrides)
    return engine.book_ticket(**args)


# =============================================================================
# BOOKING
# =============================================================================

class TestBooking:

    def test_booked_ticket_is_stored(self, engine, passenger_id):
        ticket_id = book(engine, passenger_id)
        stored = engine.get_ticket(ticket_id)
        assert stored.departure == datetime(2024, 12, 20, 1, 45)
        assert stored.fare == Decimal("1100.00")

    def test_ticket_ids_increase(self, engine, passenger_id):
        assert [book(engine, passenger_id, seat=s) for s in (1, 2, 3)] == [1, 2, 3]

    @pytest.mark.parametrize("overrides", [
        {"train_name": "Deccan Queen"},
        {"passenger_id": 42},
        {"coach": "ZZ"},
        {"departure_station": "Kolkata"},
        {"arrival_station": "New Delhi"},
    ])
    def test_referential_errors(self, engine, passenger_id, overrides):
        with pytest.raises(ReferentialError):
            book(engine, passenger_id, **overrides)
        assert len(engine.reservations) == 0

    @pytest.mark.parametrize("overrides", [
        {"arrival": "2024-12-20 01:45:00"},
        {"arrival": "2024-12-19 23:00:00"},
        {"fare": "0"},
        {"fare": "-10.00"},
    ])
    def test_interval_and_fare_errors(self, engine, passenger_id, overrides):
        with pytest.raises(IntervalOrderError):
            book(engine, passenger_id, **overrides)
        assert len(engine.reservations) == 0

    @pytest.mark.parametrize("overrides", [
        {"seat": 0},
        {"departure": "tomorrow"},
        {"departure": date(2024, 12, 20)},
        {"arrival": 20241220},
        {"fare": "12.345"},
    ])
    def test_malformed_input(self, engine, passenger_id, overrides):
        with pytest.raises(ValidationError):
            book(engine, passenger_id, **overrides)

    def test_aware_times_converted_to_local(self, engine, passenger_id):
        ticket_id = book(engine, passenger_id,
                         departure=datetime(2024, 12, 19, 20, 15, tzinfo=timezone.utc),
                         arrival="2024-12-20T17:30:00+00:00")
        stored = engine.get_ticket(ticket_id)
        assert stored.departure == datetime(2024, 12, 20, 1, 45)
        assert stored.arrival == datetime(2024, 12, 20, 23, 0)

    def test_rejected_booking_leaves_store_unchanged(self, seeded_engine):
        before = snapshot(seeded_engine)
        with pytest.raises(SeatConflict):
            seeded_engine.book_ticket("Duronto Express", 2, "Bangalore", "Chennai",
                                      "2024-12-18 17:35:00", "2024-12-18 23:00:00",
                                      coach="D", seat=15, fare="950.00")
        assert snapshot(seeded_engine) == before
        assert len(seeded_engine.reservations) == 4


# =============================================================================
# RESCHEDULING
# =============================================================================

class TestReschedule:

    def test_seat_change(self, seeded_engine):
        changed = seeded_engine.reschedule_ticket(3, new_seat=14)
        assert changed.seat == 14
        assert seeded_engine.list_active_tickets(passenger_id=3)[0].seat == 14
        assert seeded_engine.tickets.detector.find_conflict(
            "Duronto Express", "D", 15, datetime(2024, 12, 18, 2), datetime(2024, 12, 18, 3)) is None

    def test_shifting_own_window_does_not_conflict_with_itself(self, seeded_engine):
        changed = seeded_engine.reschedule_ticket(3, new_interval=("2024-12-18 03:00:00", "2024-12-18 23:30:00"))
        assert changed.departure == datetime(2024, 12, 18, 3, 0)

    def test_conflicting_seat_change_rejected(self, seeded_engine):
        other = seeded_engine.book_ticket("Duronto Express", 1, "Mumbai", "Bangalore",
                                          "2024-12-18 01:45:00", "2024-12-18 12:00:00",
                                          coach="D", seat=14, fare="600.00")
        before = snapshot(seeded_engine)

        with pytest.raises(SeatConflict) as exc:
            seeded_engine.reschedule_ticket(3, new_seat=14)

        assert exc.value.ticket_id == other
        assert snapshot(seeded_engine) == before

    def test_inverted_window_rejected(self, seeded_engine):
        with pytest.raises(IntervalOrderError):
            seeded_engine.reschedule_ticket(3, new_interval=("2024-12-18 23:00:00", "2024-12-18 01:45:00"))
        assert seeded_engine.get_ticket(3).departure == datetime(2024, 12, 18, 1, 45)

    def test_open_ended_window(self, seeded_engine):
        changed = seeded_engine.reschedule_ticket(3, new_interval=("2024-12-18 01:45:00", None))
        assert changed.arrival is None

    def test_unknown_ticket(self, engine):
        with pytest.raises(ReferentialError):
            engine.reschedule_ticket(99, new_seat=1)

    def test_cancel(self, seeded_engine):
        seeded_engine.cancel_ticket(3)
        with pytest.raises(ReferentialError):
            seeded_engine.get_ticket(3)
        with pytest.raises(ReferentialError):
            seeded_engine.cancel_ticket(3)


# =============================================================================
# REFERENTIAL ACTIONS
# =============================================================================

class TestReferentialActions:

    def test_deleting_passenger_cascades_to_tickets(self, seeded_engine):
        seeded_engine.book_ticket("Rajdhani Express", 3, "New Delhi", "Mumbai",
                                  "2024-12-22 17:15:00", "2024-12-23 12:30:00", coach="A", seat=1, fare=1500)

        assert seeded_engine.delete_passenger(3) == 2
        assert seeded_engine.reservations.for_passenger(3) == []
        assert len(seeded_engine.reservations) == 3
        with pytest.raises(ReferentialError):
            seeded_engine.get_passenger(3)

    def test_deleted_passengers_seat_is_free_again(self, seeded_engine):
        seeded_engine.delete_passenger(3)
        seeded_engine.book_ticket("Duronto Express", 2, "Bangalore", "Chennai",
                                  "2024-12-18 17:35:00", "2024-12-18 23:00:00", coach="D", seat=15, fare="950.00")

    def test_referenced_route_stop_cannot_be_removed(self, seeded_engine):
        with pytest.raises(ReferentialError):
            seeded_engine.remove_route_stop("Duronto Express", "Mumbai")
        assert "Mumbai" in seeded_engine.catalog.route("Duronto Express")

    def test_unreferenced_route_stop_removed(self, seeded_engine):
        seeded_engine.remove_route_stop("Duronto Express", "Bangalore")
        assert seeded_engine.catalog.route("Duronto Express") == ["Mumbai", "Chennai"]
        with pytest.raises(ReferentialError):
            seeded_engine.book_ticket("Duronto Express", 2, "Bangalore", "Chennai",
                                      "2024-12-19 17:35:00", coach="D", seat=1, fare=950)

    def test_rename_train_cascades(self, seeded_engine):
        assert seeded_engine.rename_train("Shatabdi Express", "Jana Shatabdi") == 1

        assert [t.id for t in seeded_engine.list_active_tickets(train_name="Jana Shatabdi")] == [2]
        assert seeded_engine.catalog.route("Jana Shatabdi") == ["Kolkata", "Chennai"]
        with pytest.raises(ReferentialError):
            seeded_engine.catalog.get_train("Shatabdi Express")
        with pytest.raises(SeatConflict):
            seeded_engine.book_ticket("Jana Shatabdi", 1, "Kolkata", "Chennai",
                                      "2024-12-19 10:00:00", "2024-12-19 20:00:00", coach="C", seat=10, fare=1400)

    def test_rename_onto_existing_train(self, seeded_engine):
        with pytest.raises(DuplicateRecord):
            seeded_engine.rename_train("Shatabdi Express", "Vande Bharat")
        assert seeded_engine.get_ticket(2).train_name == "Shatabdi Express"


# =============================================================================
# CONCURRENCY
# =============================================================================

def test_racing_bookings_for_same_seat(engine, passenger_id):
    def attempt(offset):
        try:
            return book(engine, passenger_id, departure=f"2024-12-20 0{offset}:00:00",
                        arrival="2024-12-20 23:00:00")
        except SeatConflict:
            return None

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(attempt, range(8)))

    assert len([r for r in results if r is not None]) == 1
    assert len(engine.reservations) == 1


def test_racing_bookings_for_different_seats(engine, passenger_id):
    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(lambda seat: book(engine, passenger_id, seat=seat), range(1, 17)))

    assert sorted(results) == list(range(1, 17))
