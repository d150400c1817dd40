from decimal import Decimal
from sqlalchemy import String, Integer, DateTime, Numeric
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime, timezone
from app.db.session import Base


class _CatalogItem:
    """Columns the reservation workflow reads from any catalog table."""

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200))
    city: Mapped[str] = mapped_column(String(100), default="")
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2))  # MAD per night / session
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))


class Artisan(_CatalogItem, Base):
    __tablename__ = "artisans"


class Sejour(_CatalogItem, Base):
    __tablename__ = "sejours"


class Caravane(_CatalogItem, Base):
    __tablename__ = "caravanes"
