"""Tests for the payment request boundary checks."""

import copy
from datetime import date

import pytest

from app.core.errors import ValidationError
from app.schemas.reservation import ItemType
from app.services.payment_validation import (
    find_missing_fields,
    normalize_card_number,
    parse_payment_request,
    parse_reservation_request,
)


class TestMissingFields:
    def test_complete_body_has_nothing_missing(self, payment_body):
        assert find_missing_fields(payment_body) == []

    def test_reports_every_missing_field_at_once(self, payment_body):
        body = copy.deepcopy(payment_body)
        del body["reservationData"]["checkIn"]
        del body["reservationData"]["email"]
        body["payment"]["cardHolder"] = "   "

        with pytest.raises(ValidationError) as exc:
            parse_payment_request(body)

        assert exc.value.missing == ["email", "checkIn", "cardHolder"]
        assert "checkIn" in exc.value.message
        assert exc.value.status_code == 400

    def test_missing_sections_are_reported(self):
        assert find_missing_fields({}) == ["reservationData", "payment"]

    def test_non_object_section_counts_as_missing(self, payment_body):
        body = copy.deepcopy(payment_body)
        body["payment"] = "4111111111111111"
        assert find_missing_fields(body) == ["payment"]

    def test_none_values_count_as_missing(self, payment_body):
        body = copy.deepcopy(payment_body)
        body["reservationData"]["guests"] = None
        assert find_missing_fields(body) == ["guests"]


class TestParsing:
    def test_parses_into_typed_request(self, payment_body):
        req = parse_payment_request(payment_body)

        assert req.reservationData.itemType is ItemType.SEJOUR
        assert req.reservationData.checkIn == date(2025, 6, 1)
        assert req.reservationData.checkOut == date(2025, 6, 4)
        assert req.reservationData.guests == 2
        assert req.payment.cardHolder == "A. Traveler"

    def test_malformed_values_are_listed(self, payment_body):
        body = copy.deepcopy(payment_body)
        body["reservationData"]["checkIn"] = "first of june"
        body["reservationData"]["itemType"] = "hotel"

        with pytest.raises(ValidationError) as exc:
            parse_payment_request(body)

        assert set(exc.value.invalid) == {"checkIn", "itemType"}
        assert exc.value.missing == []

    def test_guests_must_be_positive(self, payment_body):
        body = copy.deepcopy(payment_body)
        body["reservationData"]["guests"] = 0

        with pytest.raises(ValidationError) as exc:
            parse_payment_request(body)
        assert exc.value.invalid == ["guests"]

    def test_checkout_must_follow_checkin(self, payment_body):
        body = copy.deepcopy(payment_body)
        body["reservationData"]["checkOut"] = "2025-06-01"

        with pytest.raises(ValidationError) as exc:
            parse_payment_request(body)
        assert exc.value.invalid == ["checkOut"]

    @pytest.mark.parametrize("card", ["4111", "4111-1111-1111-111X", "4111 1111 1111 1111 1111"])
    def test_rejects_bad_card_numbers(self, payment_body, card):
        body = copy.deepcopy(payment_body)
        body["payment"]["cardNumber"] = card

        with pytest.raises(ValidationError) as exc:
            parse_payment_request(body)
        assert exc.value.invalid == ["cardNumber"]

    def test_card_separators_are_stripped(self, payment_body):
        body = copy.deepcopy(payment_body)
        body["payment"]["cardNumber"] = "4111 1111-1111 1111"

        req = parse_payment_request(body)
        assert req.payment.cardNumber == "4111111111111111"


def test_normalize_card_number():
    assert normalize_card_number(" 5500 0000-0000 0004 ") == "5500000000000004"
    assert normalize_card_number(None) == ""


class TestReservationParsing:
    def test_parses_bare_reservation_fields(self, payment_body):
        r = parse_reservation_request(payment_body["reservationData"])

        assert r.itemId == 42
        assert r.checkIn == date(2025, 6, 1)

    def test_reports_missing_fields(self, payment_body):
        body = copy.deepcopy(payment_body["reservationData"])
        del body["phone"]
        body["guests"] = None

        with pytest.raises(ValidationError) as exc:
            parse_reservation_request(body)
        assert exc.value.missing == ["phone", "guests"]

    def test_malformed_values_are_listed(self, payment_body):
        body = copy.deepcopy(payment_body["reservationData"])
        body["itemType"] = "hotel"

        with pytest.raises(ValidationError) as exc:
            parse_reservation_request(body)
        assert exc.value.invalid == ["itemType"]

    def test_checkout_must_follow_checkin(self, payment_body):
        body = copy.deepcopy(payment_body["reservationData"])
        body["checkOut"] = body["checkIn"]

        with pytest.raises(ValidationError) as exc:
            parse_reservation_request(body)
        assert exc.value.invalid == ["checkOut"]
