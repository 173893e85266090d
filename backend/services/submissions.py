"""
Weekly cylinder count submissions.

A submission is one branch's counts for one or more cylinder types, sent as a
single batch and stored all-or-nothing:

1. ``validate_submission`` checks the raw JSON body in a fixed order and
   returns a ``SubmissionValidation`` (success carries a typed
   ``SubmissionCreate``, failure carries the StructuralValidationError).
2. ``submit_records`` authenticates the access code, rejects
   (branch, type, week) tuples that already exist or repeat inside the batch,
   inserts every row and commits once.

The unique constraint on inventory_records is what actually prevents double
submissions; the pre-check only lets us name the conflicting tuples up front.
A uniqueness violation raised by a concurrent submitter is reported with the
same ConflictError.
"""
import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import date
from typing import Any, List, Optional

from pydantic import TypeAdapter, ValidationError
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import settings
from core.errors import (
    ConflictError,
    InventoryError,
    ReferentialIntegrityError,
    StructuralValidationError,
    classify_storage_error,
)
from db.database import InventoryRecord as InventoryRecordModel
from schemas.records import RecordCreate, RowId, SubmissionCreate, duplicate_to_schema
from services.access_codes import resolve_access_code

logger = logging.getLogger(__name__)

_branch_id = TypeAdapter(RowId)
_COUNT_FIELDS = ("fullCount", "emptyCount")


@dataclass(frozen=True)
class SubmissionValidation:
    is_valid: bool
    submission: Optional[SubmissionCreate] = None
    error: Optional[StructuralValidationError] = None

    @classmethod
    def success(cls, submission: SubmissionCreate) -> "SubmissionValidation":
        return cls(is_valid=True, submission=submission)

    @classmethod
    def failure(cls, error: StructuralValidationError) -> "SubmissionValidation":
        return cls(is_valid=False, error=error)

    def __bool__(self) -> bool:
        return self.is_valid


@dataclass
class SubmissionResult:
    branch_id: int
    submitted_by: str
    records: List[InventoryRecordModel] = field(default_factory=list)

    @property
    def to_schema(self):
        return {
            "message": "Records saved successfully",
            "data": [r.to_schema for r in self.records],
            "count": len(self.records),
            "submittedBy": self.submitted_by,
            "branchId": self.branch_id,
        }


def _only_negative_counts(exc: ValidationError) -> bool:
    return all(
        e["type"] == "greater_than_equal" and e["loc"] and e["loc"][0] in _COUNT_FIELDS
        for e in exc.errors()
    )


def validate_submission(body: Any) -> SubmissionValidation:
    if not isinstance(body, dict):
        return SubmissionValidation.failure(
            StructuralValidationError("Request body must be a JSON object")
        )

    try:
        branch_id = _branch_id.validate_python(body.get("branchId"))
    except ValidationError:
        branch_id = None
    records = body.get("records")
    if branch_id is None or not isinstance(records, list) or not records:
        return SubmissionValidation.failure(
            StructuralValidationError(
                "branchId and a non-empty records array are required",
                received={
                    "branchId": branch_id is not None,
                    "records": len(records) if isinstance(records, list) else "invalid",
                },
            )
        )

    access_code = body.get("accessCode")
    if not isinstance(access_code, str) or not access_code.strip():
        return SubmissionValidation.failure(
            StructuralValidationError("Access code is required", code="MISSING_ACCESS_CODE")
        )

    # Shape errors anywhere in the batch win over a negative count earlier in it.
    parsed: list[RecordCreate] = []
    first_negative: Optional[int] = None
    for i, record in enumerate(records):
        try:
            parsed.append(RecordCreate.model_validate(record))
        except ValidationError as exc:
            if not _only_negative_counts(exc):
                return SubmissionValidation.failure(
                    StructuralValidationError(
                        f"Missing required fields in record {i + 1}",
                        code="INVALID_RECORD",
                        recordIndex=i,
                        invalidRecord=record,
                    )
                )
            if first_negative is None:
                first_negative = i

    if first_negative is not None:
        return SubmissionValidation.failure(
            StructuralValidationError(
                f"Counts must be 0 or greater in record {first_negative + 1}",
                code="NEGATIVE_COUNT",
                recordIndex=first_negative,
                invalidRecord=records[first_negative],
            )
        )

    submission = SubmissionCreate(branch_id=branch_id, access_code=access_code, records=parsed)
    return SubmissionValidation.success(submission)


async def find_duplicate_records(db: AsyncSession, submission: SubmissionCreate) -> list[tuple[int, int, date]]:
    """Existing (branch, type, week) tuples that this submission would collide with."""
    wanted = set(submission.tuples())
    type_ids = sorted({t for (_, t, _) in wanted})
    weeks = sorted({w for (_, _, w) in wanted})

    res = await db.execute(
        select(
            InventoryRecordModel.branch_id,
            InventoryRecordModel.type_id,
            InventoryRecordModel.week_ending,
        )
        .where(InventoryRecordModel.branch_id == submission.branch_id)
        .where(InventoryRecordModel.type_id.in_(type_ids))
        .where(InventoryRecordModel.week_ending.in_(weeks))
    )
    found = {(b, t, w) for (b, t, w) in res.all()}
    return sorted(found & wanted)


def _repeated_in_batch(submission: SubmissionCreate) -> list[tuple[int, int, date]]:
    counts = Counter(submission.tuples())
    return sorted(t for t, n in counts.items() if n > 1)


async def _rollback(db: AsyncSession) -> None:
    try:
        await db.rollback()
    except (SQLAlchemyError, OSError):
        logger.exception("Rollback failed")


async def _conflict_after_race(db: AsyncSession, submission: SubmissionCreate) -> ConflictError:
    # The rows that beat us are committed now; name them if we can.
    try:
        conflicts = await find_duplicate_records(db, submission)
    except (SQLAlchemyError, OSError):
        logger.exception("Could not re-read conflicting records")
        conflicts = []
    if not conflicts:
        conflicts = sorted(set(submission.tuples()))
    return ConflictError(
        "Duplicate entry detected during insertion",
        duplicates=[duplicate_to_schema(*t) for t in conflicts],
    )


async def submit_records(db: AsyncSession, submission: SubmissionCreate) -> SubmissionResult:
    """Authenticate, check duplicates and insert the whole batch in one transaction."""
    logger.info(
        "Processing submission: branch=%s records=%d",
        submission.branch_id, len(submission.records),
    )
    current_index: Optional[int] = None

    try:
        grant = await resolve_access_code(db, submission.access_code)

        conflicts = sorted(set(await find_duplicate_records(db, submission)) | set(_repeated_in_batch(submission)))
        if conflicts:
            raise ConflictError(
                "Duplicate entries detected. These records have already been submitted.",
                duplicates=[duplicate_to_schema(*t) for t in conflicts],
            )

        inserted: list[InventoryRecordModel] = []
        for i, rec in enumerate(submission.records):
            current_index = i
            row = InventoryRecordModel(
                branch_id=submission.branch_id,
                type_id=rec.type_id,
                week_ending=rec.week_ending,
                full_count=rec.full_count,
                empty_count=rec.empty_count,
                submitted_by_code=submission.access_code,
            )
            db.add(row)
            # flush per row so a constraint failure points at its record
            await db.flush()
            inserted.append(row)
        current_index = None

        await db.commit()
    except InventoryError as e:
        await _rollback(db)
        logger.warning("Submission rejected: branch=%s code=%s reason=%s", submission.branch_id, e.code, getattr(e, "reason", e.message))
        raise
    except Exception as exc:
        await _rollback(db)
        error = classify_storage_error(exc, expose_details=settings.is_development)
        if isinstance(error, ConflictError):
            error = await _conflict_after_race(db, submission)
        elif current_index is not None and isinstance(error, (ReferentialIntegrityError, StructuralValidationError)):
            error.details["recordIndex"] = current_index
        logger.error(
            "Submission rolled back: branch=%s code=%s error=%r",
            submission.branch_id, error.code, exc,
        )
        raise error from exc

    logger.info(
        "Committed %d records for branch %s by %s",
        len(inserted), submission.branch_id, grant.user_name,
    )
    return SubmissionResult(branch_id=submission.branch_id, submitted_by=grant.user_name, records=inserted)
