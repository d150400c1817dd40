import secrets
import string
import time
from datetime import date

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import ConflictError
from app.models.payment import Payment

_BASE36 = string.digits + string.ascii_uppercase
MAX_RECEIPT_SEQUENCE = 9999
# fresh draws per attempt before a day is treated as full
RECEIPT_NUMBER_DRAWS = 20


def make_transaction_id(now_ms: int | None = None) -> str:
    """TXN-<epoch ms>-<9 random base-36 chars>, e.g. TXN-1717200000000-K3J9QZ0AB."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    suffix = "".join(secrets.choice(_BASE36) for _ in range(9))
    return f"TXN-{now_ms}-{suffix}"


def format_receipt_number(day: date, sequence: int, prefix: str | None = None) -> str:
    return f"{prefix or settings.RECEIPT_PREFIX}-{day.strftime('%Y%m%d')}-{sequence:04d}"


def _draw_sequence() -> int:
    return secrets.randbelow(MAX_RECEIPT_SEQUENCE) + 1


def next_receipt_number(db: Session, day: date) -> str:
    """A receipt number for `day` with a random NNNN part not yet in use.

    Numbers already stored are redrawn here. Two concurrent payments drawing
    the same free number are caught by the unique constraint on
    payments.receipt_number and the writer retries.
    """
    for _ in range(RECEIPT_NUMBER_DRAWS):
        number = format_receipt_number(day, _draw_sequence())
        taken = db.execute(
            select(Payment.id).where(Payment.receipt_number == number)
        ).scalar_one_or_none()
        if taken is None:
            return number
    raise ConflictError(f"no free receipt number found for {day.isoformat()}")
