from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import ConflictError, NotFoundError, StorageError, ValidationError
from app.models.payment import Payment
from app.models.reservation import Reservation, RESERVATION_STATUSES
from app.schemas.reservation import PaymentRequest, ReservationIn
from app.services.audit_service import log_audit
from app.services.catalog_service import get_catalog_item
from app.services.identifiers import make_transaction_id, next_receipt_number
from app.services.payment_validation import parse_payment_request, parse_reservation_request
from app.services.pricing import PriceBreakdown, compute_price_breakdown, count_nights
from app.services.receipt_service import issue_receipt

logger = logging.getLogger(__name__)

# columns whose unique constraint makes an insert retryable with fresh identifiers
RETRYABLE_UNIQUE_COLUMNS = ("transaction_id", "receipt_number")


@dataclass
class PaymentResult:
    reservation: Reservation
    payment: Payment
    receipt_stored: bool


def _is_identifier_collision(e: IntegrityError) -> bool:
    msg = str(getattr(e, "orig", e)).lower()
    return any(col in msg for col in RETRYABLE_UNIQUE_COLUMNS)


def _insert_reservation(db: Session, r: ReservationIn, item, breakdown: PriceBreakdown,
                        status: str = "confirmed") -> Reservation:
    reservation = Reservation(
        customer_email=r.email.strip().lower(),
        customer_phone=r.phone.strip(),
        item_type=r.itemType.value,
        item_id=r.itemId,
        item_name=item.name,
        item_price=breakdown.unit_price,
        check_in=r.checkIn,
        check_out=r.checkOut,
        guests=r.guests,
        days=breakdown.days,
        special_requests=(r.specialRequests or "").strip() or None,
        subtotal=breakdown.subtotal,
        service_fee=breakdown.service_fee,
        taxes=breakdown.taxes,
        total_price=breakdown.total,
        status=status,
    )
    db.add(reservation)
    db.flush()
    return reservation


def _insert_payment(db: Session, reservation: Reservation, req: PaymentRequest,
                    transaction_id: str, receipt_number: str) -> Payment:
    p = req.payment
    payment = Payment(
        reservation_id=reservation.id,
        transaction_id=transaction_id,
        receipt_number=receipt_number,
        payment_method=p.paymentMethod or "card",
        card_last_four=p.cardNumber[-4:],
        card_holder=p.cardHolder,
        billing_address=(p.billingAddress or "").strip() or None,
        amount=reservation.total_price,
        currency=settings.CURRENCY,
        status="paid",
        receipt_status="pending",
        receipt_attempts=0,
    )
    db.add(payment)
    db.flush()
    return payment


def record_reservation_payment(db: Session, req: PaymentRequest, item, breakdown: PriceBreakdown,
                               max_attempts: int | None = None) -> tuple[Reservation, Payment]:
    """Insert the reservation and its payment in one transaction.

    Both rows commit together or neither does. A unique-constraint hit on
    the generated identifiers rolls back and retries with fresh ones.
    """
    attempts = max_attempts or settings.ID_MAX_ATTEMPTS
    for attempt in range(1, attempts + 1):
        try:
            transaction_id = make_transaction_id()
            receipt_number = next_receipt_number(db, datetime.now(timezone.utc).date())
            # no gateway here: settlement is recorded as already done upstream
            reservation = _insert_reservation(db, req.reservationData, item, breakdown)
            payment = _insert_payment(db, reservation, req, transaction_id, receipt_number)
            log_audit(db, actor_user_id="public", action="payment_recorded", entity_type="reservation",
                      entity_id=reservation.id, details={"transactionId": transaction_id,
                                                         "receiptNumber": receipt_number,
                                                         "amount": str(payment.amount)})
            db.commit()
        except IntegrityError as e:
            db.rollback()
            if not _is_identifier_collision(e):
                logger.error("reservation insert rejected by the database: %s", e.orig)
                raise StorageError("Failed to record reservation", detail=str(e.orig)) from e
            logger.warning("identifier collision on attempt %s/%s, regenerating", attempt, attempts)
            continue
        except SQLAlchemyError as e:
            db.rollback()
            logger.error("reservation transaction failed: %s", e)
            raise StorageError("Failed to record reservation", detail=str(e)) from e
        except ConflictError:
            db.rollback()
            raise
        return reservation, payment

    raise ConflictError(f"Could not allocate unique payment identifiers after {attempts} attempts")


def process_payment(db: Session, storage, body: dict) -> PaymentResult:
    req = parse_payment_request(body)
    r = req.reservationData

    item = get_catalog_item(db, r.itemType, r.itemId)
    breakdown = compute_price_breakdown(item.price, count_nights(r.checkIn, r.checkOut))

    reservation, payment = record_reservation_payment(db, req, item, breakdown)
    logger.info("payment recorded reservation=%s txn=%s receipt=%s total=%s %s",
                reservation.id, payment.transaction_id, payment.receipt_number,
                payment.amount, payment.currency)

    receipt_stored = issue_receipt(db, storage, payment)
    return PaymentResult(reservation=reservation, payment=payment, receipt_stored=receipt_stored)


def create_reservation(db: Session, body: dict) -> Reservation:
    """Hold a `pending` reservation priced from the catalog; no payment, no receipt."""
    r = parse_reservation_request(body)
    item = get_catalog_item(db, r.itemType, r.itemId)
    breakdown = compute_price_breakdown(item.price, count_nights(r.checkIn, r.checkOut))
    try:
        reservation = _insert_reservation(db, r, item, breakdown, status="pending")
        log_audit(db, actor_user_id="public", action="reservation_created", entity_type="reservation",
                  entity_id=reservation.id, details={"itemType": reservation.item_type,
                                                     "itemId": reservation.item_id})
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("reservation insert failed: %s", e)
        raise StorageError("Failed to create reservation", detail=str(e)) from e
    logger.info("pending reservation created id=%s %s/%s", reservation.id, reservation.item_type, reservation.item_id)
    return reservation


# Administrative paths

def list_reservations(db: Session, status: str | None = None, item_type: str | None = None) -> list[Reservation]:
    stmt = select(Reservation)
    if status:
        stmt = stmt.where(Reservation.status == status)
    if item_type:
        stmt = stmt.where(Reservation.item_type == item_type)
    stmt = stmt.order_by(Reservation.created_at.desc(), Reservation.id.desc())
    return list(db.execute(stmt).scalars().all())


def get_reservation(db: Session, reservation_id: int) -> Reservation:
    reservation = db.get(Reservation, reservation_id)
    if not reservation:
        raise NotFoundError("Reservation not found")
    return reservation


def update_reservation_status(db: Session, reservation_id: int, status: str, actor: str) -> Reservation:
    if status not in RESERVATION_STATUSES:
        raise ValidationError("Invalid status. Must be: " + ", ".join(RESERVATION_STATUSES), invalid=["status"])
    reservation = get_reservation(db, reservation_id)
    previous = reservation.status
    reservation.status = status
    log_audit(db, actor_user_id=actor, action="reservation_status_updated", entity_type="reservation",
              entity_id=reservation.id, details={"from": previous, "to": status})
    db.commit()
    db.refresh(reservation)
    return reservation


def delete_reservation(db: Session, reservation_id: int, actor: str) -> None:
    reservation = get_reservation(db, reservation_id)
    log_audit(db, actor_user_id=actor, action="reservation_deleted", entity_type="reservation",
              entity_id=reservation.id, details={"itemType": reservation.item_type, "itemId": reservation.item_id})
    db.delete(reservation)
    db.commit()
