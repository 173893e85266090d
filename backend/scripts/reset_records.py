"""
Delete ALL inventory records. Branches, taxonomy and access codes are kept.

Run from backend/:
  python scripts/reset_records.py
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from sqlalchemy import delete

from db.database import async_session_maker, InventoryRecord


async def main() -> None:
    async with async_session_maker() as db:
        res = await db.execute(delete(InventoryRecord))
        await db.commit()

        n = int(getattr(res, "rowcount", 0) or 0)
        print(f"Deleted inventory_records: {n}")


if __name__ == "__main__":
    asyncio.run(main())
