from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Dict, List

from db.database import get_async_session, Branch as BranchModel

router = APIRouter()


@router.get("", response_model=List[Dict])
async def list_branches(db: AsyncSession = Depends(get_async_session)):
    res = await db.execute(select(BranchModel).order_by(BranchModel.name))
    return [b.to_schema for b in res.scalars().all()]
