from __future__ import annotations

import logging
from datetime import timedelta

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import NotFoundError, ReceiptPendingError, RenderError, StorageError
from app.models.payment import Payment
from app.models.reservation import Reservation
from app.services.audit_service import log_audit
from app.services.receipt_pdf import ReceiptData, render_receipt_pdf_bytes

logger = logging.getLogger(__name__)


def receipt_filename(receipt_number: str) -> str:
    return f"SAFARIA_Receipt_{receipt_number}.pdf"


def _record_receipt_failure(db: Session, payment: Payment, error: str) -> None:
    payment.receipt_status = "failed"
    payment.receipt_attempts = (payment.receipt_attempts or 0) + 1
    payment.receipt_error = error[:2000]
    log_audit(db, actor_user_id="system", action="receipt_pending", entity_type="payment",
              entity_id=payment.transaction_id, details={"error": payment.receipt_error,
                                                         "attempts": payment.receipt_attempts})
    db.commit()
    logger.warning("receipt_pending reservation=%s receipt=%s attempts=%s error=%s",
                   payment.reservation_id, payment.receipt_number, payment.receipt_attempts,
                   payment.receipt_error)


def issue_receipt(db: Session, storage, payment: Payment) -> bool:
    """Render and store the receipt for a committed payment. Idempotent.

    Returns True when the receipt is stored. Failures are recorded on the
    payment row and left for ``process_pending_receipts``; the financial
    record is never touched.
    """
    if payment.receipt_status == "generated" and payment.receipt_object_id:
        return True

    reservation = payment.reservation
    try:
        pdf_bytes = render_receipt_pdf_bytes(ReceiptData.from_records(reservation, payment))
        object_id = storage.upload(payment.receipt_number, pdf_bytes)
    except (RenderError, StorageError) as e:
        _record_receipt_failure(db, payment, f"{e.message}: {e.detail}" if e.detail else e.message)
        return False
    except Exception as e:
        # the payment is already committed; anything else is still just a missing receipt
        logger.exception("unexpected receipt failure receipt=%s", payment.receipt_number)
        _record_receipt_failure(db, payment, f"{type(e).__name__}: {e}")
        return False

    payment.receipt_object_id = object_id
    payment.receipt_storage = storage.backend
    payment.receipt_status = "generated"
    payment.receipt_attempts = (payment.receipt_attempts or 0) + 1
    payment.receipt_error = None
    db.commit()
    logger.info("receipt stored reservation=%s receipt=%s storage=%s",
                payment.reservation_id, payment.receipt_number, storage.backend)
    return True


def process_pending_receipts(db: Session, storage, limit: int = 50) -> dict:
    """Retry receipts left pending or failed after commit. Run periodically via Celery beat."""
    pending = db.execute(
        select(Payment)
        .where(Payment.receipt_status.in_(["pending", "failed"]),
               Payment.receipt_attempts < settings.RECEIPT_MAX_ATTEMPTS)
        .order_by(Payment.created_at.asc())
        .limit(limit)
    ).scalars().all()
    generated, failed = 0, 0
    for payment in pending:
        if issue_receipt(db, storage, payment):
            generated += 1
        else:
            failed += 1
    return {"processed": len(pending), "generated": generated, "failed": failed}


def load_receipt(db: Session, storage, reservation_id: int) -> tuple[str, bytes]:
    """Return (filename, pdf bytes) for a reservation's stored receipt."""
    reservation = db.get(Reservation, reservation_id)
    if not reservation:
        raise NotFoundError("Reservation not found")
    payment = reservation.payment
    if not payment:
        raise NotFoundError("No receipt exists for this reservation")
    if not payment.receipt_object_id:
        raise ReceiptPendingError("Receipt is not available yet, please retry later")
    if payment.receipt_storage != storage.backend:
        raise StorageError(f"Receipt is held in '{payment.receipt_storage}' storage, not '{storage.backend}'")

    expires = timedelta(minutes=settings.RECEIPT_URL_EXPIRE_MINUTES)
    pdf_bytes = storage.fetch(payment.receipt_object_id, expires)
    return receipt_filename(payment.receipt_number), pdf_bytes
