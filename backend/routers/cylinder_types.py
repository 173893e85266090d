from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Dict, List, Optional

from db.database import (
    get_async_session,
    BranchCylinderType as BranchCylinderTypeModel,
    CylinderGroup as CylinderGroupModel,
    CylinderType as CylinderTypeModel,
)

router = APIRouter()


@router.get("", response_model=List[Dict])
async def list_cylinder_types(
    branch_id: Optional[int] = Query(None, alias="branchId"),
    group: Optional[str] = None,
    db: AsyncSession = Depends(get_async_session),
):
    """Cylinder types a branch counts, optionally narrowed to one group."""
    if branch_id is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing branchId")

    stmt = (
        select(CylinderTypeModel.id, CylinderTypeModel.label, CylinderGroupModel.name.label("group"))
        .join(BranchCylinderTypeModel, BranchCylinderTypeModel.type_id == CylinderTypeModel.id)
        .join(CylinderGroupModel, CylinderTypeModel.group_id == CylinderGroupModel.id)
        .where(BranchCylinderTypeModel.branch_id == branch_id)
    )
    if group:
        stmt = stmt.where(CylinderGroupModel.name == group)
    stmt = stmt.order_by(CylinderGroupModel.name, CylinderTypeModel.label)

    res = await db.execute(stmt)
    return [{"id": r.id, "label": r.label, "group": r.group} for r in res.all()]
