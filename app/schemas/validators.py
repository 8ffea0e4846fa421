"""Custom validators and types."""

import re
from typing import Annotated

from pydantic import AfterValidator, EmailStr, Field

# International phone number: optional +, 7 to 15 digits
PHONE_PATTERN = re.compile(r"^\+?[0-9]{7,15}$")


def validate_phone_number(value: str) -> str:
    """
    Validate and normalize a phone number.

    Accepts formats:
    - +998901234567
    - +998 90 123 45 67
    - +998-90-123-45-67
    - (090) 123-4567

    Returns the number without separators.
    """
    normalized = re.sub(r"[\s\-\(\)]", "", value)

    if not PHONE_PATTERN.match(normalized):
        raise ValueError("Invalid phone number. Use digits with an optional leading +")

    return normalized


def normalize_email(value: str) -> str:
    """Lower-case a validated email address; the provider matches emails case-insensitively."""
    return value.lower()


def validate_student_code(value: str) -> str:
    """Student codes are upper-case letters followed by digits, e.g. AC001."""
    normalized = value.strip().upper()
    if not re.match(r"^[A-Z]+[0-9]+$", normalized):
        raise ValueError("Invalid student code. Use letters followed by digits (e.g., AC001)")
    return normalized


PhoneNumber = Annotated[
    str,
    Field(min_length=7, max_length=30),
    AfterValidator(validate_phone_number),
]

Email = Annotated[EmailStr, AfterValidator(normalize_email)]

StudentCode = Annotated[
    str,
    Field(min_length=2, max_length=20),
    AfterValidator(validate_student_code),
]


def reject_null(value):
    """Optional update fields may be omitted but not cleared when the column is required."""
    if value is None:
        raise ValueError("Field cannot be null")
    return value
