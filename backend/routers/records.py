import logging
from datetime import date
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from core.errors import StructuralValidationError
from db.database import get_async_session
from services.access_codes import resolve_access_code
from services.records import current_week_ending, list_missing_branches, list_records
from services.submissions import submit_records, validate_submission

logger = logging.getLogger(__name__)

router = APIRouter()


async def read_json_body(request: Request):
    try:
        return await request.json()
    except ValueError:
        raise StructuralValidationError("Request body must be valid JSON")


@router.post("", response_model=Dict, status_code=status.HTTP_201_CREATED)
async def create_records(request: Request, db: AsyncSession = Depends(get_async_session)):
    """Store one branch's weekly counts; all records or none."""
    body = await read_json_body(request)
    if isinstance(body, dict):
        records = body.get("records")
        logger.info(
            "Received submission: branch=%s records=%s code_provided=%s",
            body.get("branchId"),
            len(records) if isinstance(records, list) else None,
            bool(body.get("accessCode")),
        )
    validation = validate_submission(body)
    if not validation:
        logger.info("Submission payload rejected: %s", validation.error.message)
        raise validation.error

    result = await submit_records(db, validation.submission)
    return result.to_schema


@router.post("/test", response_model=Dict)
async def dry_run_submission(request: Request, db: AsyncSession = Depends(get_async_session)):
    """Validate a submission and its access code without writing anything."""
    body = await read_json_body(request)
    validation = validate_submission(body)
    if not validation:
        raise validation.error

    submission = validation.submission
    grant = await resolve_access_code(db, submission.access_code)
    return {
        "success": True,
        "message": "Payload validation successful - ready for actual submission",
        "validatedData": {
            "branchId": submission.branch_id,
            "recordCount": len(submission.records),
            "userName": grant.user_name,
            "sampleRecord": body["records"][0],
        },
    }


@router.get("", response_model=List[Dict])
async def get_records(
    branch_id: Optional[int] = Query(None, alias="branchId"),
    week_ending: Optional[date] = Query(None, alias="date"),
    db: AsyncSession = Depends(get_async_session),
):
    if branch_id is None or week_ending is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing branchId or date")
    return await list_records(db, branch_id=branch_id, week_ending=week_ending)


@router.get("/missing", response_model=List[Dict])
async def get_missing_submissions(
    week_ending: Optional[date] = Query(None, alias="date"),
    db: AsyncSession = Depends(get_async_session),
):
    """Branches with no records for the given week (default: current week)."""
    return await list_missing_branches(db, week_ending or current_week_ending())
