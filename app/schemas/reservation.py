from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class ItemType(str, Enum):
    ARTISANAT = "artisanat"
    SEJOUR = "sejour"
    CARAVANE = "caravane"


class ReservationIn(BaseModel):
    itemId: int
    itemType: ItemType
    email: str  # plain str to allow .local and other dev domains
    phone: str
    checkIn: date
    checkOut: date
    guests: int = Field(ge=1)
    specialRequests: Optional[str] = None


class PaymentIn(BaseModel):
    # expiryDate / cvv may be sent by the browser; they are never read or stored.
    cardNumber: str
    cardHolder: str
    billingAddress: Optional[str] = None
    paymentMethod: str = "card"


class PaymentRequest(BaseModel):
    reservationData: ReservationIn
    payment: PaymentIn


class PaymentOut(BaseModel):
    reservationId: int
    transactionId: str
    receiptNumber: str
    receiptStatus: str
    total: Decimal
    currency: str


class PaymentSummary(BaseModel):
    transactionId: str
    receiptNumber: str
    paymentMethod: str
    cardLastFour: str
    cardHolder: str
    amount: Decimal
    currency: str
    status: str
    receiptStatus: str
    createdAt: Optional[datetime] = None


class ReservationOut(BaseModel):
    id: int
    email: str
    phone: str
    itemType: str
    itemId: int
    itemName: str
    itemPrice: Decimal
    checkIn: date
    checkOut: date
    guests: int
    days: int
    specialRequests: Optional[str] = None
    subtotal: Decimal
    serviceFee: Decimal
    taxes: Decimal
    totalPrice: Decimal
    status: str
    createdAt: Optional[datetime] = None
    payment: Optional[PaymentSummary] = None
    itemDetails: Optional[dict] = None


class ReservationStatusUpdate(BaseModel):
    status: str
