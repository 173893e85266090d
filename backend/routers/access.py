from fastapi import APIRouter, Depends, Request
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from core.errors import StructuralValidationError
from db.database import get_async_session
from routers.records import read_json_body
from schemas.access_codes import AccessCodeLogin
from services.access_codes import resolve_access_code

router = APIRouter()


@router.post("", response_model=dict)
async def login_with_access_code(request: Request, db: AsyncSession = Depends(get_async_session)):
    """Exchange an access code for the branch and name it is bound to."""
    # parsed by hand so a wrongly typed code is a 400 like every other bad code
    body = await read_json_body(request)
    try:
        payload = AccessCodeLogin.model_validate(body)
    except ValidationError:
        raise StructuralValidationError("Access code must be a string")
    if not payload.code:
        raise StructuralValidationError("Access code is required.", code="MISSING_ACCESS_CODE")
    grant = await resolve_access_code(db, payload.code)
    return {"branchId": grant.branch_id, "userName": grant.user_name}
