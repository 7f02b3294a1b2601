"""Queries for units (course modules and exercises) and their test specs."""

from typing import Any
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncConnection

from ..enums import UnitKind
from ..grading import TestSpec
from ..tables import test_specs, units


class UnitNotFoundError(Exception):
    """Raised when a unit cannot be found."""

    pass


async def load_unit(conn: AsyncConnection, unit_id: UUID) -> dict[str, Any]:
    """Load a unit by id. Raises UnitNotFoundError if it doesn't exist."""
    result = await conn.execute(select(units).where(units.c.unit_id == unit_id))
    row = result.mappings().first()
    if row is None:
        raise UnitNotFoundError(f"Unit not found: {unit_id}")
    return dict(row)


async def get_test_specs(conn: AsyncConnection, unit_id: UUID) -> list[TestSpec]:
    """Get a unit's test specs in insertion order."""
    result = await conn.execute(
        select(test_specs)
        .where(test_specs.c.unit_id == unit_id)
        .order_by(test_specs.c.created_at, test_specs.c.test_id)
    )
    return [TestSpec.from_row(dict(row)) for row in result.mappings()]


async def list_exercise_units(conn: AsyncConnection) -> list[dict[str, Any]]:
    """Get the full exercise catalog, newest first."""
    result = await conn.execute(
        select(units)
        .where(units.c.kind == UnitKind.exercise)
        .order_by(units.c.created_at.desc())
    )
    return [dict(row) for row in result.mappings()]


async def count_exercise_units(conn: AsyncConnection) -> int:
    result = await conn.execute(
        select(func.count()).select_from(units).where(units.c.kind == UnitKind.exercise)
    )
    return result.scalar() or 0
