"""HTTP-level tests for the reservations and auth routers."""

import re
from unittest.mock import patch

from sqlalchemy.exc import OperationalError

from app.core.security import create_access_token, hash_password
from app.models.payment import Payment
from app.models.reservation import Reservation
from app.models.user import User
from app.services import reservation_service
from conftest import count_rows, make_paid_reservation


class TestPaymentEndpoint:
    def test_successful_payment(self, client, db, sejour, payment_body):
        r = client.post("/api/reservations/payment", json=payment_body)

        assert r.status_code == 201
        body = r.json()
        assert body["success"] is True
        data = body["data"]
        assert re.match(r"^TXN-\d+-[A-Z0-9]{9}$", data["transactionId"])
        assert re.match(r"^SAF-\d{8}-\d{4}$", data["receiptNumber"])
        assert data["receiptStatus"] == "generated"
        assert data["total"] == "1552.50"
        assert data["currency"] == "MAD"
        assert count_rows(db, Reservation) == 1

    def test_missing_field_is_rejected_without_writes(self, client, db, sejour, payment_body):
        del payment_body["reservationData"]["checkIn"]

        r = client.post("/api/reservations/payment", json=payment_body)

        assert r.status_code == 400
        body = r.json()
        assert body["success"] is False
        assert "checkIn" in body["message"]
        assert body["errors"]["missingFields"] == ["checkIn"]
        assert count_rows(db, Reservation) == 0
        assert count_rows(db, Payment) == 0

    def test_unknown_item_is_not_found(self, client, db, payment_body):
        r = client.post("/api/reservations/payment", json=payment_body)

        assert r.status_code == 404
        assert r.json()["success"] is False
        assert count_rows(db, Reservation) == 0

    def test_storage_failure_leaves_no_partial_state(self, client, db, sejour, payment_body):
        boom = OperationalError("INSERT INTO payments", {}, Exception("database is locked"))

        with patch.object(reservation_service, "_insert_payment", side_effect=boom):
            r = client.post("/api/reservations/payment", json=payment_body)

        assert r.status_code == 500
        assert r.json()["success"] is False
        assert count_rows(db, Reservation) == 0
        assert count_rows(db, Payment) == 0

    def test_exhausted_identifier_retries_is_a_conflict(self, client, db, sejour, payment_body):
        taken = "TXN-1700000000000-AAAAAAAAA"
        make_paid_reservation(db, sejour, transaction_id=taken)

        with patch.object(reservation_service, "make_transaction_id", return_value=taken):
            r = client.post("/api/reservations/payment", json=payment_body)

        assert r.status_code == 409
        assert count_rows(db, Reservation) == 1

    def test_non_object_body_is_a_validation_error(self, client, db):
        r = client.post("/api/reservations/payment", json=["not", "an", "object"])

        assert r.status_code == 400
        assert r.json()["success"] is False


class TestCreateReservationEndpoint:
    def test_creates_pending_reservation(self, client, db, sejour, payment_body):
        r = client.post("/api/reservations", json=payment_body["reservationData"])

        assert r.status_code == 201
        data = r.json()["data"]
        assert data["status"] == "pending"
        assert data["payment"] is None
        assert data["totalPrice"] == "1552.50"
        assert count_rows(db, Reservation) == 1
        assert count_rows(db, Payment) == 0

    def test_unknown_item_is_not_found(self, client, db, payment_body):
        r = client.post("/api/reservations", json=payment_body["reservationData"])

        assert r.status_code == 404
        assert r.json()["message"] == "sejour with id 42 does not exist"
        assert count_rows(db, Reservation) == 0

    def test_missing_fields_are_listed(self, client, sejour, payment_body):
        body = dict(payment_body["reservationData"])
        del body["email"]

        r = client.post("/api/reservations", json=body)

        assert r.status_code == 400
        assert r.json()["errors"]["missingFields"] == ["email"]


class TestReceiptEndpoint:
    def test_download_after_payment(self, client, sejour, payment_body):
        created = client.post("/api/reservations/payment", json=payment_body).json()["data"]

        r = client.get(f"/api/reservations/{created['reservationId']}/receipt")

        assert r.status_code == 200
        assert r.headers["content-type"] == "application/pdf"
        assert r.headers["content-disposition"] == (
            f'attachment; filename="SAFARIA_Receipt_{created["receiptNumber"]}.pdf"')
        assert r.content.startswith(b"%PDF")
        assert b"1552.50 MAD" in r.content

    def test_unknown_reservation(self, client):
        r = client.get("/api/reservations/999/receipt")

        assert r.status_code == 404
        assert r.json()["success"] is False

    def test_reservation_without_payment_has_no_receipt(self, client, sejour, payment_body):
        created = client.post("/api/reservations", json=payment_body["reservationData"]).json()["data"]

        r = client.get(f"/api/reservations/{created['id']}/receipt")

        assert r.status_code == 404
        assert r.json() == {"success": False, "message": "No receipt exists for this reservation"}

    def test_pending_receipt_is_service_unavailable(self, client, db, sejour):
        reservation = make_paid_reservation(db, sejour)

        r = client.get(f"/api/reservations/{reservation.id}/receipt")

        assert r.status_code == 503
        assert r.json()["success"] is False


class TestAdminEndpoints:
    def test_requires_token(self, client):
        r = client.get("/api/reservations")
        assert r.status_code == 401
        assert r.json() == {"success": False, "message": "Access denied. No token provided."}

    def test_rejects_garbage_token(self, client):
        r = client.get("/api/reservations", headers={"Authorization": "Bearer not-a-jwt"})
        assert r.status_code == 401

    def test_requires_admin_role(self, client, db):
        user = User(id="5d7c9f0e-1a2b-4c3d-8e9f-0a1b2c3d4e5f", email="guest@example.com", role="customer",
                    password_hash=hash_password("guest12345"), is_active=True)
        db.add(user)
        db.commit()
        headers = {"Authorization": f"Bearer {create_access_token(user.id, role='customer')}"}

        r = client.get("/api/reservations", headers=headers)

        assert r.status_code == 403

    def test_list_and_filter(self, client, db, sejour, admin_headers):
        make_paid_reservation(db, sejour)

        r = client.get("/api/reservations", headers=admin_headers)
        assert r.status_code == 200
        items = r.json()["data"]
        assert len(items) == 1
        assert items[0]["payment"]["cardLastFour"] == "1111"
        assert "cardNumber" not in items[0]["payment"]

        r = client.get("/api/reservations", params={"status": "cancelled"}, headers=admin_headers)
        assert r.json()["data"] == []

    def test_get_includes_item_details(self, client, db, sejour, admin_headers):
        reservation = make_paid_reservation(db, sejour)

        r = client.get(f"/api/reservations/{reservation.id}", headers=admin_headers)

        assert r.status_code == 200
        data = r.json()["data"]
        assert data["totalPrice"] == "517.50"
        assert data["itemDetails"]["name"] == "Riad Dar Zitoun"

    def test_update_status(self, client, db, sejour, admin_headers):
        reservation = make_paid_reservation(db, sejour)

        r = client.put(f"/api/reservations/{reservation.id}", json={"status": "cancelled"}, headers=admin_headers)
        assert r.status_code == 200
        assert r.json()["data"]["status"] == "cancelled"

        r = client.put(f"/api/reservations/{reservation.id}", json={"status": "lost"}, headers=admin_headers)
        assert r.status_code == 400

    def test_delete(self, client, db, sejour, admin_headers):
        reservation = make_paid_reservation(db, sejour)

        r = client.delete(f"/api/reservations/{reservation.id}", headers=admin_headers)

        assert r.status_code == 200
        assert count_rows(db, Reservation) == 0
        assert count_rows(db, Payment) == 0
        assert client.delete(f"/api/reservations/{reservation.id}", headers=admin_headers).status_code == 404


class TestAuthEndpoints:
    def test_login_and_me(self, client, admin_user):
        r = client.post("/api/auth/login", json={"email": "Admin@Safaria.ma", "password": "admin12345"})

        assert r.status_code == 200
        token = r.json()["data"]["access_token"]
        me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert me.json()["data"]["email"] == "admin@safaria.ma"
        assert me.json()["data"]["role"] == "admin"

    def test_wrong_password(self, client, admin_user):
        r = client.post("/api/auth/login", json={"email": "admin@safaria.ma", "password": "nope"})

        assert r.status_code == 401
        assert r.json()["success"] is False


def test_health(client):
    r = client.get("/health")

    assert r.status_code == 200
    assert r.json()["success"] is True
    assert r.json()["data"] == {"status": "ok"}
