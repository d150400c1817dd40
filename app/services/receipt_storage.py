"""Blob storage for receipt PDFs.

Only the opaque object id returned by ``upload`` is persisted on the payment.
Downloads go through a freshly minted signed URL each time.
"""
from __future__ import annotations

import logging
from datetime import timedelta
from pathlib import Path

import requests
from google.api_core import exceptions as gcs_exceptions
from google.auth import exceptions as auth_exceptions
from google.cloud import storage

from app.core.config import settings
from app.core.errors import StorageError

logger = logging.getLogger(__name__)


def receipt_object_name(receipt_number: str) -> str:
    return f"receipt_{receipt_number}.pdf"


class GCSReceiptStorage:
    backend = "gcs"

    def __init__(self, bucket_name: str, prefix: str = "", timeout: float | None = None, client=None):
        if client is None:
            try:
                client = storage.Client()
            except auth_exceptions.GoogleAuthError as e:
                raise StorageError("Google Cloud Storage credentials are not available", detail=str(e)) from e
        self.client = client
        self.bucket = self.client.bucket(bucket_name)
        self.prefix = prefix.strip("/")
        self.timeout = timeout if timeout is not None else settings.STORAGE_TIMEOUT_SECONDS

    def upload(self, receipt_number: str, pdf_bytes: bytes) -> str:
        object_key = receipt_object_name(receipt_number)
        if self.prefix:
            object_key = f"{self.prefix}/{object_key}"
        blob = self.bucket.blob(object_key)
        try:
            blob.upload_from_string(pdf_bytes, content_type="application/pdf", timeout=self.timeout)
        except (gcs_exceptions.GoogleAPIError, auth_exceptions.GoogleAuthError, requests.RequestException) as e:
            raise StorageError(f"Could not upload receipt {receipt_number}", detail=str(e)) from e
        return object_key

    def signed_url(self, object_id: str, expires: timedelta) -> str:
        blob = self.bucket.blob(object_id)
        try:
            return blob.generate_signed_url(version="v4", expiration=expires, method="GET")
        except (gcs_exceptions.GoogleAPIError, auth_exceptions.GoogleAuthError, ValueError, AttributeError) as e:
            # AttributeError: credentials without a private key cannot sign
            raise StorageError("Could not sign receipt download link", detail=str(e)) from e

    def fetch(self, object_id: str, expires: timedelta | None = None) -> bytes:
        url = self.signed_url(object_id, expires or timedelta(minutes=settings.RECEIPT_URL_EXPIRE_MINUTES))
        try:
            r = requests.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            raise StorageError("Receipt download failed", detail=str(e)) from e
        if r.status_code >= 400:
            raise StorageError(f"Receipt download failed ({r.status_code})", detail=r.text[:200])
        return r.content


class LocalReceiptStorage:
    """Files on local disk, for development and tests. Links are plain file:// URIs."""

    backend = "local"

    def __init__(self, base_dir: str | Path):
        self.base_dir = Path(base_dir)

    def _path(self, object_id: str) -> Path:
        path = (self.base_dir / object_id).resolve()
        if self.base_dir.resolve() not in path.parents:
            raise StorageError("Invalid receipt object id")
        return path

    def upload(self, receipt_number: str, pdf_bytes: bytes) -> str:
        object_id = receipt_object_name(receipt_number)
        try:
            self.base_dir.mkdir(parents=True, exist_ok=True)
            self._path(object_id).write_bytes(pdf_bytes)
        except OSError as e:
            raise StorageError(f"Could not store receipt {receipt_number}", detail=str(e)) from e
        return object_id

    def signed_url(self, object_id: str, expires: timedelta) -> str:
        return self._path(object_id).as_uri()

    def fetch(self, object_id: str, expires: timedelta | None = None) -> bytes:
        try:
            return self._path(object_id).read_bytes()
        except OSError as e:
            raise StorageError("Receipt file could not be read", detail=str(e)) from e


def build_receipt_storage():
    if settings.RECEIPT_STORAGE == "gcs":
        if not settings.GCS_BUCKET_NAME:
            raise StorageError("RECEIPT_STORAGE=gcs requires GCS_BUCKET_NAME")
        return GCSReceiptStorage(settings.GCS_BUCKET_NAME, prefix=settings.GCS_RECEIPT_PREFIX)
    return LocalReceiptStorage(settings.RECEIPT_LOCAL_DIR or "./data/receipts")


def get_receipt_storage():
    """FastAPI dependency; tests override it."""
    return build_receipt_storage()
