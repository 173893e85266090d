from datetime import date, timedelta
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from db.database import (
    AccessCode as AccessCodeModel,
    Branch as BranchModel,
    CylinderGroup as CylinderGroupModel,
    CylinderType as CylinderTypeModel,
    InventoryRecord as InventoryRecordModel,
)
from services.access_codes import UNKNOWN_USER


def current_week_ending(today: Optional[date] = None) -> date:
    """Sunday on or before ``today``; the label of the current reporting week."""
    today = today or date.today()
    # Monday=0 ... Sunday=6
    return today - timedelta(days=(today.weekday() + 1) % 7)


def _records_select():
    submitted_by = func.coalesce(AccessCodeModel.user_name, UNKNOWN_USER)
    return (
        select(
            InventoryRecordModel.id,
            InventoryRecordModel.branch_id,
            InventoryRecordModel.type_id,
            CylinderTypeModel.label,
            InventoryRecordModel.full_count,
            InventoryRecordModel.empty_count,
            InventoryRecordModel.created_at,
            InventoryRecordModel.week_ending,
            BranchModel.name.label("branch_name"),
            CylinderGroupModel.name.label("group_name"),
            submitted_by.label("submitted_by"),
        )
        .join(CylinderTypeModel, InventoryRecordModel.type_id == CylinderTypeModel.id)
        .join(BranchModel, InventoryRecordModel.branch_id == BranchModel.id)
        .join(CylinderGroupModel, CylinderTypeModel.group_id == CylinderGroupModel.id)
        # soft reference: the code may have been deleted or renamed since
        .outerjoin(AccessCodeModel, InventoryRecordModel.submitted_by_code == AccessCodeModel.code)
    )


def _row_to_schema(row) -> dict:
    return {
        "id": row.id,
        "branchId": row.branch_id,
        "typeId": row.type_id,
        "label": row.label,
        "cylinderType": row.label,
        "fullCount": row.full_count,
        "emptyCount": row.empty_count,
        "submittedAt": row.created_at,
        "weekEnding": row.week_ending,
        "branchName": row.branch_name,
        "groupName": row.group_name,
        "submittedBy": row.submitted_by,
    }


async def list_records(
    db: AsyncSession,
    *,
    branch_id: Optional[int] = None,
    week_ending: Optional[date] = None,
    limit: Optional[int] = None,
) -> list[dict]:
    """Denormalized records (branch, group and submitter names), newest first."""
    stmt = _records_select()
    if branch_id is not None:
        stmt = stmt.where(InventoryRecordModel.branch_id == branch_id)
    if week_ending is not None:
        stmt = stmt.where(InventoryRecordModel.week_ending == week_ending)
    stmt = stmt.order_by(
        InventoryRecordModel.created_at.desc(),
        InventoryRecordModel.week_ending.desc(),
        BranchModel.name,
        CylinderGroupModel.name,
        CylinderTypeModel.label,
    )
    if limit:
        stmt = stmt.limit(limit)
    res = await db.execute(stmt)
    return [_row_to_schema(r) for r in res.all()]


async def list_missing_branches(db: AsyncSession, week_ending: date) -> list[dict]:
    """Branches that have not submitted anything for ``week_ending``."""
    submitted = select(InventoryRecordModel.branch_id).where(InventoryRecordModel.week_ending == week_ending)
    res = await db.execute(
        select(BranchModel).where(BranchModel.id.not_in(submitted)).order_by(BranchModel.id)
    )
    return [b.to_schema for b in res.scalars().all()]
