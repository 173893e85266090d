"""
Seed demo branches, cylinder taxonomy and access codes.

Safe to run repeatedly: existing rows (matched by name / label / code) are kept.

Run from backend/:
  python scripts/seed_demo_data.py
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

# Allow running from repo root by ensuring `backend/` is on sys.path
BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from sqlalchemy import select

from db.database import (
    async_session_maker,
    create_db_and_tables,
    AccessCode,
    Branch,
    BranchCylinderType,
    CylinderGroup,
    CylinderType,
)


BRANCHES = ["Main Depot", "North Yard", "Harbor Branch"]

CYLINDER_TYPES: dict[str, list[str]] = {
    "Industrial": ["Oxygen 244cf", "Acetylene 390cf", "Argon 330cf", "Nitrogen 304cf"],
    "Welding Mix": ["75/25 Ar/CO2 300cf", "90/10 Ar/CO2 300cf"],
    "Medical": ["Medical O2 E", "Medical O2 M60"],
    "Propane": ["Propane 20lb", "Propane 33lb Forklift"],
}

# (code, user name, branch name)
ACCESS_CODES = [
    ("ABC123", "Demo Counter", "Main Depot"),
    ("NORTH01", "North Yard Lead", "North Yard"),
    ("HARBOR1", "Harbor Clerk", "Harbor Branch"),
]


async def get_or_create_branch(session, name: str) -> Branch:
    res = await session.execute(select(Branch).where(Branch.name == name))
    branch = res.scalar_one_or_none()
    if branch:
        return branch
    branch = Branch(name=name)
    session.add(branch)
    await session.flush()
    return branch


async def get_or_create_group(session, name: str) -> CylinderGroup:
    res = await session.execute(select(CylinderGroup).where(CylinderGroup.name == name))
    group = res.scalar_one_or_none()
    if group:
        return group
    group = CylinderGroup(name=name)
    session.add(group)
    await session.flush()
    return group


async def get_or_create_type(session, label: str, group: CylinderGroup) -> CylinderType:
    res = await session.execute(
        select(CylinderType).where(CylinderType.label == label, CylinderType.group_id == group.id)
    )
    ct = res.scalar_one_or_none()
    if ct:
        return ct
    ct = CylinderType(label=label, group_id=group.id)
    session.add(ct)
    await session.flush()
    return ct


async def main() -> None:
    await create_db_and_tables()

    async with async_session_maker() as session:
        branches = {name: await get_or_create_branch(session, name) for name in BRANCHES}

        types: list[CylinderType] = []
        for group_name, labels in CYLINDER_TYPES.items():
            group = await get_or_create_group(session, group_name)
            for label in labels:
                types.append(await get_or_create_type(session, label, group))

        res = await session.execute(select(BranchCylinderType.branch_id, BranchCylinderType.type_id))
        assigned = {(b, t) for (b, t) in res.all()}
        new_links = 0
        for branch in branches.values():
            for ct in types:
                if (branch.id, ct.id) not in assigned:
                    session.add(BranchCylinderType(branch_id=branch.id, type_id=ct.id))
                    new_links += 1

        res = await session.execute(select(AccessCode.code))
        existing_codes = set(res.scalars().all())
        new_codes = 0
        for code, user_name, branch_name in ACCESS_CODES:
            if code in existing_codes:
                continue
            session.add(AccessCode(code=code, user_name=user_name, branch_id=branches[branch_name].id, active=True))
            new_codes += 1

        await session.commit()

    print(
        f"Seeded {len(branches)} branches, {len(types)} cylinder types, "
        f"{new_links} new branch assignments, {new_codes} new access codes"
    )


if __name__ == "__main__":
    asyncio.run(main())
