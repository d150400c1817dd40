from decimal import Decimal
from datetime import date, datetime, timezone
from sqlalchemy import String, Integer, Date, DateTime, Numeric, Text, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.db.session import Base

RESERVATION_STATUSES = ("pending", "confirmed", "cancelled", "completed")


class Reservation(Base):
    __tablename__ = "reservations"
    __table_args__ = (
        CheckConstraint("subtotal >= 0 AND service_fee >= 0 AND taxes >= 0 AND total_price >= 0",
                        name="ck_reservations_amounts_non_negative"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    customer_email: Mapped[str] = mapped_column(String(320), index=True)
    customer_phone: Mapped[str] = mapped_column(String(40))

    item_type: Mapped[str] = mapped_column(String(20), index=True)  # artisanat, sejour, caravane
    item_id: Mapped[int] = mapped_column(Integer, index=True)
    # snapshot of the catalog item at booking time
    item_name: Mapped[str] = mapped_column(String(200))
    item_price: Mapped[Decimal] = mapped_column(Numeric(10, 2))

    check_in: Mapped[date] = mapped_column(Date)
    check_out: Mapped[date] = mapped_column(Date)
    guests: Mapped[int] = mapped_column(Integer, default=1)
    days: Mapped[int] = mapped_column(Integer)
    special_requests: Mapped[str | None] = mapped_column(Text, nullable=True)

    subtotal: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    service_fee: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    taxes: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    total_price: Mapped[Decimal] = mapped_column(Numeric(10, 2))

    status: Mapped[str] = mapped_column(String(20), default="pending", index=True)  # pending, confirmed, cancelled, completed

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc),
                                                 onupdate=lambda: datetime.now(timezone.utc))

    payment: Mapped["Payment | None"] = relationship(
        "Payment", back_populates="reservation", uselist=False,
        cascade="all, delete-orphan",
    )
