"""Passenger field validation"""

import re
import logging
from datetime import date
from typing import Optional

from ..errors import AgeOutOfRange, MalformedContact
from ..models.passenger import Passenger
from ..utils.date_utils import years_before

logger = logging.getLogger(__name__)

PHONE_PATTERN = re.compile(r"^[6-9][0-9]{9}$")
# two or more characters, '@', two or more, '.', two or more
EMAIL_PATTERN = re.compile(r"^.{2,}@.{2,}\..{2,}$", re.DOTALL)


def check_phone(phone_number: str) -> None:
    if not isinstance(phone_number, str) or not PHONE_PATTERN.match(phone_number):
        raise MalformedContact(f"Invalid phone number: {phone_number!r}")


def check_age(date_of_birth: date, today: date, min_years: int = 3, max_years: int = 130) -> None:
    """Reject unless today - max_years <= date_of_birth < today - min_years"""
    youngest = years_before(today, min_years)
    oldest = years_before(today, max_years)
    if date_of_birth >= youngest or date_of_birth < oldest:
        raise AgeOutOfRange(f"Invalid date of birth: {date_of_birth.isoformat()}")


def normalize_email(email: Optional[str]) -> Optional[str]:
    """Return the email if it has the minimal x@y.z shape, otherwise None"""
    if email is None:
        return None
    if EMAIL_PATTERN.match(email):
        return email
    return None


class ValidationGate:
    """Field invariants applied to every passenger insert and update"""

    def __init__(self, min_age_years: int = 3, max_age_years: int = 130):
        self.min_age_years = min_age_years
        self.max_age_years = max_age_years

    def validate_passenger(self, passenger: Passenger, today: date) -> None:
        check_phone(passenger.phone_number)
        check_age(passenger.date_of_birth, today, self.min_age_years, self.max_age_years)

    def normalize_contact(self, passenger: Passenger) -> Passenger:
        email = normalize_email(passenger.email)
        if email == passenger.email:
            return passenger
        logger.debug(f"Clearing malformed email of passenger {passenger.id}")
        return passenger.model_copy(update={"email": email})
