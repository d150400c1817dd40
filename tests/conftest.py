"""Pytest configuration and fixtures for the SAFARIA reservations API.

- In-memory SQLite shared across threads (StaticPool) with foreign keys on
- FastAPI TestClient with the DB session and receipt storage overridden
- Catalog, admin and payment-body fixtures
"""

import os
from decimal import Decimal
from typing import Any, Generator

# Settings are read at import time; point them at test values first.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("ENV", "test")
os.environ["RECEIPT_STORAGE"] = "local"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event, func, select
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.main import app
from app.db.session import Base, get_db
from app.core.security import create_access_token, hash_password
from app.models.catalog import Artisan, Caravane, Sejour
from app.models.payment import Payment
from app.models.reservation import Reservation
from app.models.user import User
from app.services.receipt_storage import LocalReceiptStorage, get_receipt_storage

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


@event.listens_for(engine, "connect")
def _enable_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


TestingSessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


# === Database ===


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Fresh schema per test."""
    Base.metadata.create_all(engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(engine)


@pytest.fixture
def storage(tmp_path) -> LocalReceiptStorage:
    return LocalReceiptStorage(tmp_path / "receipts")


@pytest.fixture
def client(db: Session, storage: LocalReceiptStorage) -> Generator[TestClient, None, None]:
    def _get_db():
        session = TestingSessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_receipt_storage] = lambda: storage
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def count_rows(db: Session, model) -> int:
    db.expire_all()
    return db.execute(select(func.count()).select_from(model)).scalar_one()


# === Catalog ===


@pytest.fixture
def sejour(db: Session) -> Sejour:
    item = Sejour(id=42, name="Riad Dar Zitoun", city="Marrakech", price=Decimal("450.00"))
    db.add(item)
    db.commit()
    return item


@pytest.fixture
def artisan(db: Session) -> Artisan:
    item = Artisan(id=7, name="Atelier de poterie de Safi", city="Safi", price=Decimal("350.00"))
    db.add(item)
    db.commit()
    return item


@pytest.fixture
def caravane(db: Session) -> Caravane:
    item = Caravane(id=2, name="Nuit Sous les Étoiles", city="Merzouga", price=Decimal("450.00"))
    db.add(item)
    db.commit()
    return item


# === Auth ===


@pytest.fixture
def admin_user(db: Session) -> User:
    user = User(
        id="0b8f2a9e-5c1d-4c57-9a51-8f0c2d3e4a11",
        email="admin@safaria.ma",
        full_name="Admin",
        role="admin",
        password_hash=hash_password("admin12345"),
        is_active=True,
    )
    db.add(user)
    db.commit()
    return user


@pytest.fixture
def admin_headers(admin_user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(admin_user.id, role='admin')}"}


# === Payloads ===


@pytest.fixture
def payment_body() -> dict[str, Any]:
    """The sejour 42 example: three nights for two guests."""
    return {
        "reservationData": {
            "itemId": 42,
            "itemType": "sejour",
            "itemName": "Riad Dar Zitoun",
            "itemPrice": "450.00",
            "email": "traveler@example.com",
            "phone": "+212600000000",
            "checkIn": "2025-06-01",
            "checkOut": "2025-06-04",
            "guests": 2,
            "specialRequests": "Late arrival around 23:00",
        },
        "payment": {
            "cardNumber": "4111111111111111",
            "cardHolder": "A. Traveler",
            "expiryDate": "12/31",
            "cvv": "123",
            "billingAddress": "12 Rue de la Kasbah, Marrakech",
        },
    }


def make_paid_reservation(db: Session, item, *, transaction_id: str = "TXN-1700000000000-AAAAAAAAA",
                          receipt_number: str = "SAF-20250101-0001") -> Reservation:
    """Insert a reservation + payment directly, bypassing the workflow."""
    from datetime import date

    reservation = Reservation(
        customer_email="seed@example.com",
        customer_phone="+212611111111",
        item_type="sejour",
        item_id=item.id,
        item_name=item.name,
        item_price=item.price,
        check_in=date(2025, 1, 1),
        check_out=date(2025, 1, 2),
        guests=1,
        days=1,
        subtotal=Decimal("450.00"),
        service_fee=Decimal("45.00"),
        taxes=Decimal("22.50"),
        total_price=Decimal("517.50"),
        status="confirmed",
    )
    db.add(reservation)
    db.flush()
    db.add(Payment(
        reservation_id=reservation.id,
        transaction_id=transaction_id,
        receipt_number=receipt_number,
        payment_method="card",
        card_last_four="1111",
        card_holder="Seed Guest",
        amount=Decimal("517.50"),
        currency="MAD",
        status="paid",
        receipt_status="pending",
        receipt_attempts=0,
    ))
    db.commit()
    return reservation
