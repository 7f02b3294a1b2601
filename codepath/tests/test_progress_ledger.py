"""Progress ledger tests against a real Postgres database.

Each test runs inside a transaction that is rolled back afterwards, so
nothing is left behind. Skipped when DATABASE_URL isn't set.
"""

import asyncio
import uuid

import pytest
import pytest_asyncio
from sqlalchemy import func, insert, select

from codepath.database import close_engine, get_connection, is_configured
from codepath.enums import ProgressStatus, UnitKind
from codepath.progress import (
    get_completed_unit_ids,
    get_recent_units,
    mark_unit_complete,
    record_attempt,
)
from codepath.tables import progress_records, units

pytestmark = pytest.mark.skipif(
    not is_configured(), reason="DATABASE_URL not configured"
)


@pytest_asyncio.fixture
async def conn():
    async with get_connection() as connection:
        yield connection
        await connection.rollback()
    await close_engine()


async def create_unit(conn, title: str = "Two Sum") -> uuid.UUID:
    result = await conn.execute(
        insert(units)
        .values(title=title, kind=UnitKind.exercise, technologies=["python"])
        .returning(units.c.unit_id)
    )
    return result.scalar_one()


async def count_records(conn, user_id, unit_id) -> int:
    result = await conn.execute(
        select(func.count())
        .select_from(progress_records)
        .where(
            (progress_records.c.user_id == user_id)
            & (progress_records.c.unit_id == unit_id)
        )
    )
    return result.scalar_one()


class TestMarkUnitComplete:
    @pytest.mark.asyncio
    async def test_creates_completed_record(self, conn):
        user_id = uuid.uuid4()
        unit_id = await create_unit(conn)

        record = await mark_unit_complete(conn, user_id=user_id, unit_id=unit_id)

        assert record["status"] == ProgressStatus.completed
        assert record["completed_at"] is not None
        assert await count_records(conn, user_id, unit_id) == 1

    @pytest.mark.asyncio
    async def test_twice_keeps_one_row_and_first_completed_at(self, conn):
        user_id = uuid.uuid4()
        unit_id = await create_unit(conn)

        first = await mark_unit_complete(conn, user_id=user_id, unit_id=unit_id)
        await asyncio.sleep(0.01)
        second = await mark_unit_complete(conn, user_id=user_id, unit_id=unit_id)

        assert await count_records(conn, user_id, unit_id) == 1
        assert second["id"] == first["id"]
        assert second["completed_at"] == first["completed_at"]
        assert second["updated_at"] >= first["updated_at"]

    @pytest.mark.asyncio
    async def test_completes_an_in_progress_record(self, conn):
        user_id = uuid.uuid4()
        unit_id = await create_unit(conn)

        await record_attempt(conn, user_id=user_id, unit_id=unit_id, code="x = 1")
        record = await mark_unit_complete(conn, user_id=user_id, unit_id=unit_id)

        assert record["status"] == ProgressStatus.completed
        assert record["code"] == "x = 1"
        assert await count_records(conn, user_id, unit_id) == 1


class TestRecordAttempt:
    @pytest.mark.asyncio
    async def test_starts_in_progress(self, conn):
        user_id = uuid.uuid4()
        unit_id = await create_unit(conn)

        record = await record_attempt(
            conn, user_id=user_id, unit_id=unit_id, code="def solution(): pass"
        )

        assert record["status"] == ProgressStatus.in_progress
        assert record["completed_at"] is None

    @pytest.mark.asyncio
    async def test_does_not_regress_completed(self, conn):
        user_id = uuid.uuid4()
        unit_id = await create_unit(conn)

        done = await mark_unit_complete(conn, user_id=user_id, unit_id=unit_id)
        record = await record_attempt(conn, user_id=user_id, unit_id=unit_id, code="y")

        assert record["status"] == ProgressStatus.completed
        assert record["completed_at"] == done["completed_at"]
        assert record["code"] == "y"


class TestLedgerReads:
    @pytest.mark.asyncio
    async def test_completed_ids_scoped_to_user_and_units(self, conn):
        user_id = uuid.uuid4()
        other_user = uuid.uuid4()
        a = await create_unit(conn, "A")
        b = await create_unit(conn, "B")
        c = await create_unit(conn, "C")

        await mark_unit_complete(conn, user_id=user_id, unit_id=a)
        await mark_unit_complete(conn, user_id=user_id, unit_id=b)
        await record_attempt(conn, user_id=user_id, unit_id=c, code=None)
        await mark_unit_complete(conn, user_id=other_user, unit_id=c)

        assert await get_completed_unit_ids(conn, user_id) == {a, b}
        assert await get_completed_unit_ids(conn, user_id, [b, c]) == {b}
        assert await get_completed_unit_ids(conn, user_id, []) == set()

    @pytest.mark.asyncio
    async def test_recent_units_most_recent_first(self, conn):
        user_id = uuid.uuid4()
        first = await create_unit(conn, "First")
        second = await create_unit(conn, "Second")

        await record_attempt(conn, user_id=user_id, unit_id=first, code="1")
        await asyncio.sleep(0.01)
        await mark_unit_complete(conn, user_id=user_id, unit_id=second)

        recent = await get_recent_units(conn, user_id, limit=5)

        assert [u["unit_id"] for u in recent] == [second, first]
        assert recent[0]["title"] == "Second"
        assert recent[0]["progress"]["status"] == ProgressStatus.completed
        assert recent[1]["progress"]["code"] == "1"
