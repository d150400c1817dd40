"""Boundary checks for ``POST /reservations/payment`` and ``POST /reservations``.

The browser posts ``{"reservationData": {...}, "payment": {...}}`` to pay, or the
bare reservation fields to hold a pending reservation. Presence is checked
first so the caller gets every missing field in one response; the payload is
then parsed into ``PaymentRequest`` (or ``ReservationIn``), the typed contract
the rest of the workflow works with.
"""
from __future__ import annotations

import re

from pydantic import ValidationError as SchemaError

from app.core.errors import ValidationError
from app.schemas.reservation import PaymentRequest, ReservationIn

REQUIRED_RESERVATION_FIELDS = ("itemId", "itemType", "email", "phone", "checkIn", "checkOut", "guests")
REQUIRED_PAYMENT_FIELDS = ("cardNumber", "cardHolder")

_CARD_SEPARATORS = re.compile(r"[\s-]")


def _is_missing(value) -> bool:
    if value is None:
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return False


def find_missing_fields(body: dict) -> list[str]:
    missing: list[str] = []
    for section, fields in (("reservationData", REQUIRED_RESERVATION_FIELDS), ("payment", REQUIRED_PAYMENT_FIELDS)):
        data = body.get(section) if isinstance(body, dict) else None
        if not isinstance(data, dict):
            missing.append(section)
            continue
        missing.extend(f for f in fields if _is_missing(data.get(f)))
    return missing


def normalize_card_number(raw: str) -> str:
    return _CARD_SEPARATORS.sub("", raw or "")


def _invalid_fields(e: SchemaError, depth: int) -> list[str]:
    invalid = []
    for err in e.errors():
        loc = err["loc"]
        name = str(loc[depth]) if len(loc) > depth else str(loc[0])
        if name not in invalid:
            invalid.append(name)
    return invalid


def _check_stay(r: ReservationIn) -> None:
    if r.checkOut <= r.checkIn:
        raise ValidationError("checkOut must be after checkIn", invalid=["checkOut"])


def parse_payment_request(body: dict) -> PaymentRequest:
    missing = find_missing_fields(body)
    if missing:
        raise ValidationError("Missing required fields: " + ", ".join(missing), missing=missing)

    try:
        req = PaymentRequest.model_validate(body)
    except SchemaError as e:
        # loc is ("reservationData", "checkIn", ...); report the field name
        invalid = _invalid_fields(e, depth=1)
        raise ValidationError("Invalid fields: " + ", ".join(invalid), invalid=invalid, detail=str(e))

    _check_stay(req.reservationData)

    card = normalize_card_number(req.payment.cardNumber)
    if not card.isdigit() or not 13 <= len(card) <= 19:
        raise ValidationError("Valid card number is required (13-19 digits).", invalid=["cardNumber"])
    req.payment.cardNumber = card
    req.payment.cardHolder = req.payment.cardHolder.strip()
    return req


def parse_reservation_request(body: dict) -> ReservationIn:
    if not isinstance(body, dict):
        raise ValidationError("Reservation data must be an object", invalid=["body"])
    missing = [f for f in REQUIRED_RESERVATION_FIELDS if _is_missing(body.get(f))]
    if missing:
        raise ValidationError("Missing required fields: " + ", ".join(missing), missing=missing)

    try:
        r = ReservationIn.model_validate(body)
    except SchemaError as e:
        invalid = _invalid_fields(e, depth=0)
        raise ValidationError("Invalid fields: " + ", ".join(invalid), invalid=invalid, detail=str(e))

    _check_stay(r)
    return r
