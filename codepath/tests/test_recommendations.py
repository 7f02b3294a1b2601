"""Tests for recommendation ranking."""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, patch
from uuid import UUID, uuid4

import pytest

from codepath.recommendations import mastered_technologies, rank_units, recommend_units

T0 = datetime(2026, 1, 1, tzinfo=timezone.utc)


def unit(n: int, technologies: list[str], created_days: int) -> dict:
    return {
        "unit_id": UUID(int=n),
        "title": f"Exercise {n}",
        "technologies": technologies,
        "created_at": T0 + timedelta(days=created_days),
    }


class TestMasteredTechnologies:
    def test_union_of_completed_units(self):
        catalog = [
            unit(1, ["react", "node"], 0),
            unit(2, ["node", "sql"], 1),
            unit(3, ["vue"], 2),
        ]
        mastered = mastered_technologies(catalog, {UUID(int=1), UUID(int=2)})
        assert mastered == {"react", "node", "sql"}

    def test_nothing_completed(self):
        assert mastered_technologies([unit(1, ["react"], 0)], set()) == set()


class TestRankUnits:
    def test_overlap_beats_recency(self):
        older_match = unit(1, ["react", "node"], 0)
        newer_no_match = unit(2, ["vue"], 5)

        ranked = rank_units([newer_no_match, older_match], set(), {"react"})

        assert [u["unit_id"] for u in ranked] == [UUID(int=1), UUID(int=2)]

    def test_more_overlap_ranks_higher(self):
        one = unit(1, ["react"], 3)
        two = unit(2, ["react", "node"], 0)

        ranked = rank_units([one, two], set(), {"react", "node"})

        assert [u["unit_id"] for u in ranked] == [UUID(int=2), UUID(int=1)]

    def test_ties_broken_by_recency(self):
        catalog = [unit(1, ["sql"], 0), unit(2, ["sql"], 2), unit(3, ["sql"], 1)]

        ranked = rank_units(catalog, set(), {"sql"})

        assert [u["unit_id"] for u in ranked] == [UUID(int=2), UUID(int=3), UUID(int=1)]

    def test_empty_mastered_set_is_recency_order(self):
        catalog = [unit(1, ["a"], 0), unit(2, ["b"], 3), unit(3, [], 1)]

        ranked = rank_units(catalog, set(), set())

        assert [u["unit_id"] for u in ranked] == [UUID(int=2), UUID(int=3), UUID(int=1)]

    def test_completed_units_are_excluded(self):
        catalog = [unit(1, ["react"], 0), unit(2, ["react"], 1)]

        ranked = rank_units(catalog, {UUID(int=2)}, {"react"})

        assert [u["unit_id"] for u in ranked] == [UUID(int=1)]

    def test_limit(self):
        catalog = [unit(n, [], n) for n in range(1, 10)]

        assert len(rank_units(catalog, set(), set())) == 5
        assert len(rank_units(catalog, set(), set(), limit=2)) == 2

    def test_ranking_is_repeatable(self):
        catalog = [unit(n, ["x"] if n % 2 else [], 0) for n in range(1, 8)]

        first = rank_units(catalog, set(), {"x"}, limit=7)
        second = rank_units(list(reversed(catalog)), set(), {"x"}, limit=7)

        assert [u["unit_id"] for u in first] == [u["unit_id"] for u in second]

    def test_missing_technologies_count_as_none(self):
        bare = {"unit_id": UUID(int=1), "technologies": None, "created_at": None}
        ranked = rank_units([bare], set(), {"react"})
        assert ranked == [bare]


class TestRecommendUnits:
    @pytest.mark.asyncio
    async def test_uses_completed_units_for_mastered_set(self):
        done = unit(1, ["react"], 0)
        match = unit(2, ["react"], 1)
        newer = unit(3, ["go"], 9)

        with (
            patch(
                "codepath.recommendations.list_exercise_units",
                new_callable=AsyncMock,
                return_value=[newer, match, done],
            ),
            patch(
                "codepath.recommendations.get_completed_unit_ids",
                new_callable=AsyncMock,
                return_value={UUID(int=1)},
            ),
        ):
            ranked = await recommend_units(object(), uuid4(), limit=5)

        assert [u["unit_id"] for u in ranked] == [UUID(int=2), UUID(int=3)]
