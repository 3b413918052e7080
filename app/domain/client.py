"""
Client domain rules - status tags, gender values, derived age.
"""
from datetime import date
from typing import Optional

# Manual status tag set by the practitioner
CLIENT_STATUS_NEW = "new"
CLIENT_STATUS_ACTIVE = "active"
CLIENT_STATUS_INACTIVE = "inactive"

VALID_CLIENT_STATUSES = {CLIENT_STATUS_NEW, CLIENT_STATUS_ACTIVE, CLIENT_STATUS_INACTIVE}

GENDER_FEMALE = "female"
GENDER_MALE = "male"
GENDER_OTHER = "other"
GENDER_PREFER_NOT_TO_SAY = "prefer_not_to_say"

VALID_GENDERS = {GENDER_FEMALE, GENDER_MALE, GENDER_OTHER, GENDER_PREFER_NOT_TO_SAY}


def age_on(birth_date: Optional[date], today: date) -> Optional[int]:
    """Full years on `today`; None without a birth date, never negative."""
    if birth_date is None:
        return None
    years = today.year - birth_date.year
    if (today.month, today.day) < (birth_date.month, birth_date.day):
        years -= 1
    return max(years, 0)
