"""Pydantic schemas for the FastAPI endpoints."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ChatRequest(BaseModel):
    """Incoming chat message from the website widget."""

    message: str = Field(..., min_length=1, max_length=2000, description="The visitor's message")
    session_id: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Unique session identifier for conversation continuity",
    )


class ChatResponse(BaseModel):
    """Response from the concierge."""

    reply: str = Field(..., description="The concierge's response message")
    session_id: str = Field(..., description="The session ID for this conversation")
    booking: dict[str, Any] | None = Field(
        None, description="Booking progress for this session, if a booking was started",
    )
    relevant_context: bool = Field(
        False, description="Whether knowledge-base context grounded the reply",
    )


class ScheduleMeetingRequest(BaseModel):
    """Direct booking from the voice widget; fields are checked by the booking validators."""

    name: str = Field(..., max_length=200)
    email: str = Field(..., max_length=320)
    phone: str = Field(..., max_length=50)
    date: str = Field(..., max_length=10, description="YYYY-MM-DD")
    time: str = Field(..., max_length=5, description="HH:MM (24-hour)")
    timezone: str = Field("IST", max_length=64)
    purpose: str | None = Field(None, max_length=2000)


class ScheduleMeetingResponse(BaseModel):
    success: bool = True
    message: str
    reference: str | None = None


class ContactRequest(BaseModel):
    """Website contact-form submission."""

    name: str = Field(..., min_length=1, max_length=200)
    email: str = Field(..., min_length=3, max_length=320)
    phone: str = Field(..., min_length=1, max_length=50)
    message: str = Field(..., min_length=1, max_length=5000)


class ContactResponse(BaseModel):
    success: bool = True
    message: str


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    service: str = "wings9-concierge"
