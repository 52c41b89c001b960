"""Field validators for the booking dialogue.

Each ``parse_*`` helper takes the raw user message and returns the value to
store, or ``None`` when the message is not acceptable for that field.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from datetime import date as date_cls
from datetime import datetime

BOOKING_KEYWORDS = (
    "book",
    "schedule",
    "appointment",
    "consultation",
    "call",
    "meeting",
    "talk",
    "discuss",
    "connect",
    "reach out",
    "contact me",
)

# RFC 5322-ish pattern — covers the vast majority of real-world emails
# without requiring an external dependency.
_EMAIL_RE = re.compile(
    r"^[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+"
    r"@[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)+$"
)
_PHONE_RE = re.compile(r"(\+?\d{1,3}[-.\s]?)?\(?\d{3}\)?[-.\s]?\d{3}[-.\s]?\d{4}")
_PHONE_PUNCTUATION_RE = re.compile(r"[-.\s()]")
_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_TIME_RE = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")
_TIMEZONE_RE = re.compile(
    r"\b(IST|EST|PST|MST|CST|GMT|UTC|PDT|EDT|CDT|MDT|JST|CET|EET|WET|BST|GST"
    r"|AEST|AEDT|ACST|ACDT|AWST|NZST|NZDT)\b"
)

MIN_NAME_LENGTH = 2
MIN_RAW_PHONE_LENGTH = 10
MIN_TIMEZONE_LENGTH = 2
SKIP_WORD = "skip"


def has_booking_intent(message: str) -> bool:
    lowered = message.lower()
    return any(keyword in lowered for keyword in BOOKING_KEYWORDS)


def parse_name(message: str) -> str | None:
    name = message.strip()
    return name if len(name) >= MIN_NAME_LENGTH else None


def parse_email(message: str) -> str | None:
    email = message.strip()
    return email if _EMAIL_RE.match(email) else None


def extract_phone(message: str) -> str | None:
    """Return the first phone-like number in *message* without punctuation."""
    match = _PHONE_RE.search(message)
    if not match:
        return None
    return _PHONE_PUNCTUATION_RE.sub("", match.group(0))


def parse_phone(message: str) -> str | None:
    extracted = extract_phone(message)
    if extracted:
        return extracted
    raw = message.strip()
    return raw if len(raw) >= MIN_RAW_PHONE_LENGTH else None


def parse_date(message: str, now: Callable[[], datetime] = datetime.now) -> str | None:
    """Accept ``YYYY-MM-DD`` naming a real date that starts after *now*."""
    value = message.strip()
    if not _DATE_RE.match(value):
        return None
    try:
        day = date_cls.fromisoformat(value)
    except ValueError:
        return None
    current = now()
    start = datetime(day.year, day.month, day.day, tzinfo=current.tzinfo)
    return value if start > current else None


def parse_time(message: str) -> str | None:
    value = message.strip()
    return value if _TIME_RE.match(value) else None


def parse_timezone(message: str) -> str | None:
    upper = message.strip().upper()
    match = _TIMEZONE_RE.search(upper)
    if match:
        return match.group(1)
    return upper if len(upper) >= MIN_TIMEZONE_LENGTH else None


def parse_purpose(message: str) -> str | None:
    """Purpose is optional: blank or ``skip`` leaves it unset."""
    value = message.strip()
    if not value or value.lower() == SKIP_WORD:
        return None
    return value
