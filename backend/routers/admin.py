import logging
from datetime import date
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from core.auth import current_active_superuser
from db.database import get_async_session, InventoryRecord as InventoryRecordModel, User
from services.records import list_records

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/records", response_model=List[Dict])
async def admin_list_records(
    branch_id: Optional[int] = Query(None, alias="branchId"),
    week_ending: Optional[date] = Query(None, alias="date"),
    limit: int = Query(100, ge=1, le=10000),
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(current_active_superuser),
):
    return await list_records(db, branch_id=branch_id, week_ending=week_ending, limit=limit)


@router.delete("/records/delete-all", response_model=Dict)
async def delete_all_records(
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(current_active_superuser),
):
    """Remove every inventory record. There is no undo."""
    res = await db.execute(delete(InventoryRecordModel))
    await db.commit()

    count = int(getattr(res, "rowcount", 0) or 0)
    if count == 0:
        return {"message": "No records to delete", "deletedCount": 0}
    logger.warning("Admin %s deleted %d inventory records", getattr(user, "email", "?"), count)
    return {"message": "Successfully deleted all inventory records", "deletedCount": count}
