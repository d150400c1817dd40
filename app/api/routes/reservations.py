from typing import Optional

from fastapi import APIRouter, Body, Depends
from fastapi.responses import Response
from sqlalchemy.orm import Session

from app.api.deps import require_roles
from app.api.responses import send_success
from app.db.session import get_db
from app.models.reservation import Reservation
from app.models.user import User
from app.schemas.reservation import PaymentOut, PaymentSummary, ReservationOut, ReservationStatusUpdate
from app.services import reservation_service
from app.services.catalog_service import catalog_item_details
from app.services.receipt_service import load_receipt
from app.services.receipt_storage import get_receipt_storage

router = APIRouter(tags=["reservations"])

admin_only = require_roles("admin")


def _reservation_out(r: Reservation, item_details: dict | None = None) -> ReservationOut:
    p = r.payment
    return ReservationOut(
        id=r.id,
        email=r.customer_email,
        phone=r.customer_phone,
        itemType=r.item_type,
        itemId=r.item_id,
        itemName=r.item_name,
        itemPrice=r.item_price,
        checkIn=r.check_in,
        checkOut=r.check_out,
        guests=r.guests,
        days=r.days,
        specialRequests=r.special_requests,
        subtotal=r.subtotal,
        serviceFee=r.service_fee,
        taxes=r.taxes,
        totalPrice=r.total_price,
        status=r.status,
        createdAt=r.created_at,
        payment=PaymentSummary(
            transactionId=p.transaction_id,
            receiptNumber=p.receipt_number,
            paymentMethod=p.payment_method,
            cardLastFour=p.card_last_four,
            cardHolder=p.card_holder,
            amount=p.amount,
            currency=p.currency,
            status=p.status,
            receiptStatus=p.receipt_status,
            createdAt=p.created_at,
        ) if p else None,
        itemDetails=item_details,
    )


@router.post("/reservations/payment", status_code=201)
def process_payment(body: dict = Body(...), db: Session = Depends(get_db), storage=Depends(get_receipt_storage)):
    """Record a paid reservation and issue its PDF receipt."""
    result = reservation_service.process_payment(db, storage, body)
    out = PaymentOut(
        reservationId=result.reservation.id,
        transactionId=result.payment.transaction_id,
        receiptNumber=result.payment.receipt_number,
        receiptStatus=result.payment.receipt_status,
        total=result.payment.amount,
        currency=result.payment.currency,
    )
    message = "Payment processed successfully"
    if not result.receipt_stored:
        message += "; the receipt will be available shortly"
    return send_success(out, message, status_code=201)


@router.post("/reservations", status_code=201)
def create_reservation(body: dict = Body(...), db: Session = Depends(get_db)):
    """Hold a pending reservation before payment."""
    r = reservation_service.create_reservation(db, body)
    return send_success(_reservation_out(r), "Reservation created successfully", status_code=201)


@router.get("/reservations/{reservation_id}/receipt")
def download_receipt(reservation_id: int, db: Session = Depends(get_db), storage=Depends(get_receipt_storage)):
    filename, pdf_bytes = load_receipt(db, storage, reservation_id)
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/reservations")
def list_reservations(status: Optional[str] = None, itemType: Optional[str] = None,
                      db: Session = Depends(get_db), user: User = Depends(admin_only)):
    items = reservation_service.list_reservations(db, status=status, item_type=itemType)
    return send_success([_reservation_out(r) for r in items], "Reservations retrieved successfully")


@router.get("/reservations/{reservation_id}")
def get_reservation(reservation_id: int, db: Session = Depends(get_db), user: User = Depends(admin_only)):
    r = reservation_service.get_reservation(db, reservation_id)
    details = catalog_item_details(db, r.item_type, r.item_id)
    return send_success(_reservation_out(r, details), "Reservation retrieved successfully")


@router.put("/reservations/{reservation_id}")
def update_reservation_status(reservation_id: int, body: ReservationStatusUpdate,
                              db: Session = Depends(get_db), user: User = Depends(admin_only)):
    r = reservation_service.update_reservation_status(db, reservation_id, body.status, actor=user.id)
    return send_success(_reservation_out(r), "Reservation status updated successfully")


@router.delete("/reservations/{reservation_id}")
def delete_reservation(reservation_id: int, db: Session = Depends(get_db), user: User = Depends(admin_only)):
    reservation_service.delete_reservation(db, reservation_id, actor=user.id)
    return send_success(None, "Reservation deleted successfully")
