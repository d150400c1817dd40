import uuid
from decimal import Decimal

from sqlalchemy.orm import Session
from sqlalchemy import text
from sqlalchemy.exc import ProgrammingError, OperationalError

from app.db.session import SessionLocal
from app.core.security import hash_password
from app.models.user import User
from app.models.catalog import Artisan, Sejour, Caravane

ARTISANS = [
    ("Atelier de poterie de Safi", "Safi", "350.00"),
    ("Tissage de tapis berbères", "Ouarzazate", "420.00"),
    ("Dinanderie de la médina", "Fès", "280.00"),
]
SEJOURS = [
    ("Riad Dar Zitoun", "Marrakech", "900.00"),
    ("Kasbah des Oudayas", "Rabat", "750.00"),
    ("Maison d'hôtes Chefchaouen", "Chefchaouen", "620.00"),
]
CARAVANES = [
    ("Nuit Sous les Étoiles", "Merzouga", "450.00"),
    ("Traversée de l'Erg Chigaga", "Mhamid", "1200.00"),
]


def ensure_user(db: Session, email: str, password: str, role: str, name: str):
    u = db.query(User).filter(User.email == email).first()
    if u:
        return
    db.add(
        User(
            id=str(uuid.uuid4()),
            email=email,
            full_name=name,
            role=role,
            password_hash=hash_password(password),
            is_active=True,
        )
    )
    db.commit()


def ensure_catalog(db: Session, model, rows) -> int:
    created = 0
    for name, city, price in rows:
        if db.query(model).filter(model.name == name).first():
            continue
        db.add(model(name=name, city=city, price=Decimal(price)))
        created += 1
    db.commit()
    return created


def run(db=None):
    if db is None:
        db = SessionLocal()
    try:
        # If migrations haven't been applied yet, seeding must not crash the API.
        try:
            db.execute(text("SELECT 1 FROM users LIMIT 1"))
        except (ProgrammingError, OperationalError):
            db.rollback()
            print("[seed] users table not found yet. Skipping seeding (run alembic upgrade head).")
            return

        ensure_user(db, "admin@safaria.ma", "admin12345", "admin", "Admin")

        created = ensure_catalog(db, Artisan, ARTISANS)
        created += ensure_catalog(db, Sejour, SEJOURS)
        created += ensure_catalog(db, Caravane, CARAVANES)
        print(f"[seed] catalog items created: {created}")
    finally:
        db.close()


if __name__ == "__main__":
    run()
