"""
Shared fixtures.

Every test gets its own SQLite file database (aiosqlite, foreign keys on) and
a TestClient whose session and admin dependencies point at it.
"""
import asyncio
import os
import sys
import tempfile
import uuid
from datetime import date
from pathlib import Path
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

# Must be set before the app (and its engine) is imported.
_SCRATCH_DIR = Path(tempfile.mkdtemp(prefix="cylinder-tests-"))
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_SCRATCH_DIR / 'app.db'}"
os.environ.setdefault("AUTH_SECRET", "x" * 48)
os.environ["ENVIRONMENT"] = "test"

BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from core.auth import current_active_superuser  # noqa: E402
from db.database import (  # noqa: E402
    Base,
    enable_sqlite_foreign_keys,
    get_async_session,
    AccessCode,
    Branch,
    BranchCylinderType,
    CylinderGroup,
    CylinderType,
    InventoryRecord,
)
import main as app_module  # noqa: E402


WEEK = date(2025, 7, 6)


@pytest.fixture
def engine(tmp_path):
    # concurrent writers wait for the write lock instead of failing with "database is locked"
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'inventory.db'}",
        poolclass=NullPool,
        connect_args={"timeout": 30},
    )
    enable_sqlite_foreign_keys(engine)

    async def _create():
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    asyncio.run(_create())
    yield engine
    asyncio.run(engine.dispose())


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture
def seeded(session_maker):
    """Two branches, two groups, three types, and three access codes.

    ABC123 (active, branch 1), NORTH01 (active, branch 2), OLD999 (inactive, branch 1).
    """

    async def _seed():
        async with session_maker() as s:
            s.add_all([Branch(id=1, name="Main Depot"), Branch(id=2, name="North Yard")])
            s.add_all([CylinderGroup(id=1, name="Industrial"), CylinderGroup(id=2, name="Medical")])
            s.add_all([
                CylinderType(id=5, label="Oxygen 244cf", group_id=1),
                CylinderType(id=6, label="Argon 330cf", group_id=1),
                CylinderType(id=7, label="Medical O2 E", group_id=2),
            ])
            await s.flush()
            s.add_all([
                BranchCylinderType(branch_id=1, type_id=5),
                BranchCylinderType(branch_id=1, type_id=6),
                BranchCylinderType(branch_id=1, type_id=7),
                BranchCylinderType(branch_id=2, type_id=5),
            ])
            s.add_all([
                AccessCode(id=1, code="ABC123", user_name="Dana Field", branch_id=1, active=True),
                AccessCode(id=2, code="NORTH01", user_name="Sam North", branch_id=2, active=True),
                AccessCode(id=3, code="OLD999", user_name="Former Clerk", branch_id=1, active=False),
            ])
            await s.commit()

    asyncio.run(_seed())
    return session_maker


@pytest.fixture
def count_records(session_maker):
    def _count() -> int:
        async def _run():
            async with session_maker() as s:
                return (await s.execute(select(func.count()).select_from(InventoryRecord))).scalar_one()

        return asyncio.run(_run())

    return _count


@pytest.fixture
def admin_user():
    return SimpleNamespace(id=uuid.uuid4(), email="admin@example.com", is_active=True, is_superuser=True)


@pytest.fixture
def client(session_maker, admin_user):
    async def _session_override():
        async with session_maker() as session:
            yield session

    app = app_module.app
    app.dependency_overrides[get_async_session] = _session_override
    app.dependency_overrides[current_active_superuser] = lambda: admin_user
    # no context manager: the lifespan would create tables on the app engine
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def anonymous_client(session_maker):
    async def _session_override():
        async with session_maker() as session:
            yield session

    app = app_module.app
    app.dependency_overrides[get_async_session] = _session_override
    yield TestClient(app)
    app.dependency_overrides.clear()


def make_payload(records=None, *, branch_id=1, access_code="ABC123"):
    if records is None:
        records = [{"typeId": 5, "weekEnding": WEEK.isoformat(), "fullCount": 10, "emptyCount": 2}]
    return {"branchId": branch_id, "accessCode": access_code, "records": records}
