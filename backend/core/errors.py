"""
Typed errors for the submission path.

Every error carries a machine readable ``code``, the HTTP status the API
answers with, and structured ``details`` that are merged into the JSON body:

    InventoryError (base)
    +-- StructuralValidationError   400  payload shape / counts
    +-- AuthenticationError         401  unknown or inactive access code
    +-- ConflictError               409  (branch, type, week) already submitted
    +-- ReferentialIntegrityError   400  unknown branch or cylinder type id
    +-- TransientStorageError       503 / 408, retry advised
    +-- UnknownServerError          500

``classify_storage_error`` turns SQLAlchemy / driver exceptions into one of
the classes above.
"""
from __future__ import annotations

import asyncio
from typing import Any, Optional

from sqlalchemy import exc as sa_exc

UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"
CHECK_VIOLATION = "23514"
QUERY_CANCELED = "57014"


class InventoryError(Exception):
    code = "INVENTORY_ERROR"
    status_code = 500

    def __init__(self, message: str, *, code: Optional[str] = None, **details: Any):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        self.details = details

    def to_payload(self) -> dict:
        return {"error": self.message, "code": self.code, **self.details}


class StructuralValidationError(InventoryError):
    code = "INVALID_PAYLOAD"
    status_code = 400


class AuthenticationError(InventoryError):
    code = "INVALID_ACCESS_CODE"
    status_code = 401

    def __init__(self, message: str = "Invalid or inactive access code", *, reason: str = "not_found"):
        super().__init__(message)
        # Kept out of the payload; only logged.
        self.reason = reason


class ConflictError(InventoryError):
    code = "DUPLICATE_SUBMISSION"
    status_code = 409

    def __init__(self, message: str, duplicates: list[dict]):
        super().__init__(message, duplicates=duplicates)
        self.duplicates = duplicates


class ReferentialIntegrityError(InventoryError):
    code = "UNKNOWN_REFERENCE"
    status_code = 400


class TransientStorageError(InventoryError):
    code = "STORAGE_UNAVAILABLE"
    status_code = 503

    def __init__(self, message: str, *, timeout: bool = False, **details: Any):
        super().__init__(message, code="STORAGE_TIMEOUT" if timeout else None, **details)
        if timeout:
            self.status_code = 408


class UnknownServerError(InventoryError):
    code = "SERVER_ERROR"
    status_code = 500


def _sqlstate(exc: BaseException) -> Optional[str]:
    orig = getattr(exc, "orig", None) or exc
    for attr in ("sqlstate", "pgcode"):
        value = getattr(orig, attr, None)
        if value:
            return str(value)
    return None


def _driver_detail(exc: BaseException) -> str:
    orig = getattr(exc, "orig", None)
    detail = getattr(orig, "detail", None)
    if detail:
        return str(detail)
    return str(orig if orig is not None else exc)


def classify_storage_error(exc: BaseException, *, expose_details: bool = False) -> InventoryError:
    """Map a storage-layer exception to the typed taxonomy."""
    state = _sqlstate(exc)
    text = str(getattr(exc, "orig", None) or exc).lower()

    if isinstance(exc, sa_exc.IntegrityError):
        if state == UNIQUE_VIOLATION or "unique" in text:
            return ConflictError(
                "Duplicate entry detected during insertion", duplicates=[]
            )
        if state == FOREIGN_KEY_VIOLATION or "foreign key" in text:
            return ReferentialIntegrityError(
                "Invalid branch ID or cylinder type ID", details=_driver_detail(exc)
            )
        if state == CHECK_VIOLATION or "check constraint" in text:
            return StructuralValidationError(
                "Data validation failed", code="CHECK_VIOLATION", details=_driver_detail(exc)
            )

    # Pool checkout timeout: no connection became free in time.
    if isinstance(exc, sa_exc.TimeoutError):
        return TransientStorageError("Database connection issue. Please try again in a moment.")

    # asyncio.TimeoutError is only an alias of TimeoutError from 3.11 on
    if isinstance(exc, (TimeoutError, asyncio.TimeoutError)) or state == QUERY_CANCELED or "timeout" in text or "timed out" in text:
        return TransientStorageError("Database operation timed out. Please try again.", timeout=True)

    if isinstance(exc, sa_exc.DBAPIError) and exc.connection_invalidated:
        return TransientStorageError("Database connection issue. Please try again in a moment.")
    if isinstance(exc, (sa_exc.OperationalError, sa_exc.InterfaceError, ConnectionError, OSError)):
        return TransientStorageError("Database connection issue. Please try again in a moment.")

    if expose_details:
        return UnknownServerError("Server error during submission", detail=str(exc))
    return UnknownServerError("Server error during submission", detail="Internal server error")
