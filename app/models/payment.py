from decimal import Decimal
from sqlalchemy import String, Integer, DateTime, Numeric, Text, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from datetime import datetime, timezone
from app.db.session import Base

class Payment(Base):
    __tablename__ = "payments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    reservation_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("reservations.id", ondelete="CASCADE"), unique=True, index=True,
    )

    transaction_id: Mapped[str] = mapped_column(String(40), unique=True, index=True)
    receipt_number: Mapped[str] = mapped_column(String(30), unique=True, index=True)

    payment_method: Mapped[str] = mapped_column(String(20), default="card")
    card_last_four: Mapped[str] = mapped_column(String(4))  # never the full number
    card_holder: Mapped[str] = mapped_column(String(200))
    billing_address: Mapped[str | None] = mapped_column(Text, nullable=True)

    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    currency: Mapped[str] = mapped_column(String(3), default="MAD")
    status: Mapped[str] = mapped_column(String(20), default="paid")

    # receipt outbox; only these columns change after creation
    receipt_object_id: Mapped[str | None] = mapped_column(String(512), nullable=True)
    receipt_storage: Mapped[str] = mapped_column(String(16), default="local")
    receipt_status: Mapped[str] = mapped_column(String(20), default="pending", index=True)  # pending, generated, failed
    receipt_attempts: Mapped[int] = mapped_column(Integer, default=0)
    receipt_error: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    reservation: Mapped["Reservation"] = relationship("Reservation", back_populates="payment")
