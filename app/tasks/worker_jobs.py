import logging

from sqlalchemy.orm import Session
from sqlalchemy.exc import ProgrammingError

from app.core.errors import StorageError
from app.db.session import SessionLocal
from app.services.receipt_service import process_pending_receipts
from app.services.receipt_storage import build_receipt_storage

logger = logging.getLogger(__name__)


def process_receipt_queue(limit: int = 50, storage=None) -> dict:
    """Complete receipts left pending after a committed payment."""
    db: Session = SessionLocal()
    try:
        try:
            storage = storage or build_receipt_storage()
        except StorageError as e:
            logger.error("receipt storage unavailable: %s", e.message)
            return {"skipped": True, "reason": "storage_unavailable"}
        try:
            result = process_pending_receipts(db, storage, limit=limit)
        except ProgrammingError:
            # DB not migrated yet; don't crash the worker.
            db.rollback()
            return {"skipped": True, "reason": "missing_tables"}
        if result["processed"]:
            logger.info("receipt queue: %s", result)
        return result
    finally:
        db.close()
