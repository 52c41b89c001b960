"""Booking dialogue state: the ordered checklist and the collected fields."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any


class BookingStep(str, Enum):
    """Fields collected in order; ``COMPLETE`` once everything is in."""

    NAME = "name"
    EMAIL = "email"
    PHONE = "phone"
    DATE = "date"
    TIME = "time"
    TIMEZONE = "timezone"
    PURPOSE = "purpose"
    COMPLETE = "complete"

    def next(self) -> BookingStep:
        if self is BookingStep.COMPLETE:
            return self
        steps = list(BookingStep)
        return steps[steps.index(self) + 1]


REQUIRED_FIELDS = ("name", "email", "phone", "date", "time", "timezone")


@dataclass
class BookingState:
    """Progress of one consultation booking.

    ``step`` is always the first field not yet collected (``COMPLETE`` once
    the required fields and the optional purpose step are done).  Only the
    booking engine mutates it, one step per valid turn.
    """

    step: BookingStep = BookingStep.NAME
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    date: str | None = None
    time: str | None = None
    timezone: str | None = None
    purpose: str | None = None

    @property
    def is_complete(self) -> bool:
        return self.step is BookingStep.COMPLETE

    def record(self) -> dict[str, str | None]:
        """The fields handed to the scheduling collaborator."""
        data = asdict(self)
        data.pop("step")
        return data

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["step"] = self.step.value
        return data
