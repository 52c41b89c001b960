"""Tests for the booking field validators."""

from __future__ import annotations

import pytest

from concierge.booking import validators


class TestBookingIntent:
    @pytest.mark.parametrize(
        "message",
        [
            "I'd like to schedule a consultation",
            "Can I book a call with Prakash?",
            "BOOK A CALL",
            "Please set up a meeting",
            "I want to talk to someone",
            "contact me tomorrow",
        ],
    )
    def test_detects_intent(self, message: str):
        assert validators.has_booking_intent(message) is True

    @pytest.mark.parametrize("message", ["What is Wings9?", "Tell me about golden visas", ""])
    def test_no_intent(self, message: str):
        assert validators.has_booking_intent(message) is False


class TestParseName:
    def test_accepts_two_characters(self):
        assert validators.parse_name("Jo") == "Jo"

    def test_strips_whitespace(self):
        assert validators.parse_name("  Jordan Lee  ") == "Jordan Lee"

    @pytest.mark.parametrize("message", ["", "   ", "J", " J "])
    def test_rejects_short_names(self, message: str):
        assert validators.parse_name(message) is None


class TestParseEmail:
    @pytest.mark.parametrize(
        "email",
        [
            "alice@example.com",
            "a@b.co",
            "bob.jones@firm.co.uk",
            "jane+tag@gmail.com",
            "UPPER@CASE.COM",
            "digits123@test456.io",
        ],
    )
    def test_accepts_valid_emails(self, email: str):
        assert validators.parse_email(email) == email

    def test_strips_whitespace(self):
        assert validators.parse_email("  a@b.co ") == "a@b.co"

    @pytest.mark.parametrize(
        "email",
        [
            "",
            "   ",
            "not-an-email",
            "missing@",
            "@no-local.com",
            "spaces in@email.com",
            "double@@at.com",
            "no-tld@localhost",
            "user@.leading-dot.com",
        ],
    )
    def test_rejects_invalid_emails(self, email: str):
        assert validators.parse_email(email) is None


class TestParsePhone:
    def test_extracts_international_number(self):
        assert validators.parse_phone("+1 415 555 0100") == "+14155550100"

    def test_extracts_number_from_sentence(self):
        assert validators.parse_phone("my number is (415) 555-0100 thanks") == "4155550100"

    def test_keeps_country_code(self):
        assert validators.parse_phone("+91 1234567890") == "+911234567890"

    def test_accepts_long_unrecognised_input_verbatim(self):
        assert validators.parse_phone("  0044-20-7946  ") == "0044-20-7946"

    @pytest.mark.parametrize("message", ["", "12345", "call me"])
    def test_rejects_short_input(self, message: str):
        assert validators.parse_phone(message) is None

    def test_extract_phone_needs_a_phone_shape(self):
        assert validators.extract_phone("0044-20-7946") is None


class TestParseDate:
    def test_accepts_future_date(self, fixed_now):
        assert validators.parse_date("2030-01-01", now=fixed_now) == "2030-01-01"

    def test_accepts_tomorrow(self, fixed_now):
        assert validators.parse_date("2026-03-11", now=fixed_now) == "2026-03-11"

    def test_rejects_today(self, fixed_now):
        # Midnight today is already in the past at 09:30
        assert validators.parse_date("2026-03-10", now=fixed_now) is None

    def test_rejects_past_date(self, fixed_now):
        assert validators.parse_date("2020-01-01", now=fixed_now) is None

    @pytest.mark.parametrize("message", ["01-01-2030", "2030/01/01", "next tuesday", "2030-1-1"])
    def test_rejects_wrong_format(self, fixed_now, message: str):
        assert validators.parse_date(message, now=fixed_now) is None

    def test_rejects_impossible_date(self, fixed_now):
        assert validators.parse_date("2030-02-30", now=fixed_now) is None


class TestParseTime:
    @pytest.mark.parametrize("message", ["00:00", "09:30", "14:00", "23:59", " 14:00 "])
    def test_accepts_24_hour_times(self, message: str):
        assert validators.parse_time(message) == message.strip()

    @pytest.mark.parametrize("message", ["24:00", "9:30", "14:60", "2pm", "14.00", ""])
    def test_rejects_other_formats(self, message: str):
        assert validators.parse_time(message) is None


class TestParseTimezone:
    def test_recognises_abbreviation_case_insensitively(self):
        assert validators.parse_timezone("pst") == "PST"

    def test_finds_abbreviation_in_sentence(self):
        assert validators.parse_timezone("I'm in Dubai, so GST") == "GST"

    def test_accepts_unknown_text_uppercased(self):
        assert validators.parse_timezone("cet+1") == "CET"
        assert validators.parse_timezone("hkt") == "HKT"

    @pytest.mark.parametrize("message", ["", " ", "x"])
    def test_rejects_too_short(self, message: str):
        assert validators.parse_timezone(message) is None


class TestParsePurpose:
    @pytest.mark.parametrize("message", ["", "   ", "skip", "SKIP", " Skip "])
    def test_blank_or_skip_leaves_purpose_unset(self, message: str):
        assert validators.parse_purpose(message) is None

    def test_keeps_free_text(self):
        assert validators.parse_purpose(" Free zone setup ") == "Free zone setup"
