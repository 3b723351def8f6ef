"""Masked read views"""

from datetime import datetime

import pytest

from rail_reservations import ReferentialError
from rail_reservations.services.privacy import mask_phone


def test_mask_phone():
    assert mask_phone("9876543210") == "******3210"


def test_mask_is_configurable(engine):
    engine.projector.mask = "XXXXXX"
    passenger_id = engine.create_passenger({
        "first_name": "Neha", "date_of_birth": "2000-03-25", "phone_number": "9876543213",
    })
    engine.book_ticket("Vande Bharat", passenger_id, "New Delhi", "Chennai",
                       "2024-12-20 05:20:00", coach="B", seat=8, fare=2600)
    assert engine.list_active_passengers()[0].phone_number == "XXXXXX3213"


class TestActivePassengers:

    def test_only_ticket_holders_listed(self, seeded_engine):
        views = seeded_engine.list_active_passengers()
        assert [v.id for v in views] == [1, 2, 3, 4]

    def test_phone_masked(self, seeded_engine):
        rajesh = seeded_engine.list_active_passengers()[0]
        assert rajesh.phone_number == "******3210"
        assert rajesh.email == "rajesh.kumar@gmail.com"

    def test_finished_journeys_drop_out(self, seeded_engine, clock):
        clock.set(datetime(2024, 12, 19, 0, 0))
        assert [v.id for v in seeded_engine.list_active_passengers()] == [2]


class TestActiveTickets:

    def test_joined_with_masked_passenger(self, seeded_engine):
        ticket = seeded_engine.list_active_tickets(passenger_id=3)[0]
        assert ticket.name == "Ravi Verma"
        assert ticket.phone_number == "******3212"
        assert ticket.train_name == "Duronto Express"
        assert (ticket.coach, ticket.seat) == ("D", 15)
        assert ticket.departure == datetime(2024, 12, 18, 1, 45)

    def test_filter_by_train(self, seeded_engine):
        tickets = seeded_engine.list_active_tickets(train_name="Shatabdi Express")
        assert [t.passenger_id for t in tickets] == [2]

    def test_filters_combine(self, seeded_engine):
        assert seeded_engine.list_active_tickets(train_name="Shatabdi Express", passenger_id=1) == []

    def test_name_without_last_name(self, engine):
        passenger_id = engine.create_passenger({
            "first_name": "Geetha", "date_of_birth": "1990-12-19", "phone_number": "9876543215",
        })
        engine.book_ticket("Duronto Express", passenger_id, "Mumbai", "Bangalore",
                           "2024-12-19 06:00:00", "2024-12-19 14:00:00", coach="S", seat=3, fare=600)
        assert engine.list_active_tickets()[0].name == "Geetha"

    def test_open_ended_ticket_stays_visible(self, engine, clock, passenger_id):
        engine.book_ticket("Vande Bharat", passenger_id, "New Delhi", "Chennai",
                           "2024-12-18 05:00:00", coach="B", seat=1, fare=2600)
        clock.set(datetime(2025, 6, 1))
        assert len(engine.list_active_tickets()) == 1

    def test_views_follow_current_state(self, seeded_engine):
        seeded_engine.cancel_ticket(1)
        assert 1 not in [t.id for t in seeded_engine.list_active_tickets()]
        assert 1 not in [p.id for p in seeded_engine.list_active_passengers()]


class TestTrainStops:

    def test_stops_in_route_order(self, seeded_engine):
        seeded_engine.book_ticket("Duronto Express", 2, "Bangalore", "Chennai",
                                  "2024-12-18 17:35:00", "2024-12-18 23:00:00", coach="D", seat=16, fare="950.00")
        seeded_engine.book_ticket("Duronto Express", 4, "Mumbai", "Bangalore",
                                  "2024-12-18 20:00:00", "2024-12-19 04:00:00", coach="D", seat=17, fare="700.00")

        stops = [(s.station, s.departure) for s in seeded_engine.list_train_stops("Duronto Express")]
        assert stops == [
            ("Mumbai", datetime(2024, 12, 18, 1, 45)),
            ("Mumbai", datetime(2024, 12, 18, 20, 0)),
            ("Bangalore", datetime(2024, 12, 18, 17, 35)),
        ]

    def test_train_without_active_tickets(self, engine):
        assert engine.list_train_stops("Shatabdi Express") == []

    def test_unknown_train(self, engine):
        with pytest.raises(ReferentialError):
            engine.list_train_stops("Deccan Queen")
