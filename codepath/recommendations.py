"""Exercise recommendations based on technologies the user already knows."""

import logging
from datetime import datetime, timezone
from typing import Any, Iterable
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncConnection

from .progress import get_completed_unit_ids
from .queries.units import list_exercise_units

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 5

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def mastered_technologies(
    catalog: Iterable[dict[str, Any]], completed_ids: set[UUID]
) -> set[str]:
    """Union of technology tags across the completed units."""
    mastered: set[str] = set()
    for unit in catalog:
        if unit["unit_id"] in completed_ids:
            mastered.update(unit.get("technologies") or [])
    return mastered


def _created_ts(unit: dict[str, Any]) -> float:
    created_at = unit.get("created_at")
    if created_at is None:
        return _EPOCH.timestamp()
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    return created_at.timestamp()


def rank_units(
    catalog: list[dict[str, Any]],
    completed_ids: set[UUID],
    mastered: set[str],
    limit: int = DEFAULT_LIMIT,
) -> list[dict[str, Any]]:
    """Order the units the user hasn't completed by relevance.

    Units sharing more technologies with `mastered` come first; ties go to
    the most recently created unit, then to unit id so repeated calls give
    the same order. With nothing mastered this is plain recency order.
    """
    candidates = [u for u in catalog if u["unit_id"] not in completed_ids]

    def sort_key(unit: dict[str, Any]):
        overlap = len(set(unit.get("technologies") or []) & mastered)
        return (-overlap, -_created_ts(unit), str(unit["unit_id"]))

    return sorted(candidates, key=sort_key)[: max(limit, 0)]


async def recommend_units(
    conn: AsyncConnection, user_id: UUID, limit: int = DEFAULT_LIMIT
) -> list[dict[str, Any]]:
    """Recommend up to `limit` exercises the user hasn't completed yet."""
    catalog = await list_exercise_units(conn)
    completed_ids = await get_completed_unit_ids(conn, user_id)
    mastered = mastered_technologies(catalog, completed_ids)

    logger.debug(
        "Recommending for user %s: %d completed, mastered=%s",
        user_id,
        len(completed_ids),
        sorted(mastered),
    )
    return rank_units(catalog, completed_ids, mastered, limit)
