import asyncio
from datetime import datetime

import pytest

from rail_reservations import ReservationEngine
from rail_reservations.services.catalog_service import CatalogService
from rail_reservations.utils.clock import FixedClock
from rail_reservations.utils.config import DEFAULT_CATALOG_PATH, Settings

BOOKINGS_PATH = str(DEFAULT_CATALOG_PATH.parent / "sample_bookings.json")

# sample data was written against this moment
REFERENCE_TIME = datetime(2024, 12, 18, 12, 0, 0)


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def clock(settings):
    return FixedClock(REFERENCE_TIME, settings.local_timezone)


@pytest.fixture
def catalog():
    service = CatalogService()
    assert asyncio.run(service.load_catalog(str(DEFAULT_CATALOG_PATH)))
    return service


@pytest.fixture
def engine(catalog, clock, settings):
    return ReservationEngine(catalog=catalog, clock=clock, settings=settings)


@pytest.fixture
def seeded_engine(engine):
    asyncio.run(engine.load_bookings(BOOKINGS_PATH))
    return engine


@pytest.fixture
def passenger_id(engine):
    return engine.create_passenger({
        "first_name": "Ravi",
        "last_name": "Verma",
        "date_of_birth": "1998-05-20",
        "email": "ravi.verma@gmail.com",
        "phone_number": "9876543212",
    })
