"""Saved-workshop persistence.

Only plans that pass validation are stored, and what is stored is always the
normalized plan so every reader sees the canonical shape.
"""

import logging
from typing import Any

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from nejiba.db.models import SavedWorkshop, utcnow
from nejiba.schemas.workshop import ValidationResult
from nejiba.services.taxonomy import DEFAULT_RULES, PlanRules
from nejiba.services.validator import validate_workshop_json

logger = logging.getLogger(__name__)


class InvalidWorkshopError(Exception):
    def __init__(self, result: ValidationResult):
        super().__init__(f"Workshop plan has {len(result.errors)} validation error(s)")
        self.result = result


def plan_metadata(plan: dict) -> dict[str, str]:
    """Searchable columns derived from the plan body."""
    title = plan.get("title") if isinstance(plan.get("title"), dict) else {}
    info = plan.get("generalInfo") if isinstance(plan.get("generalInfo"), dict) else {}
    return {
        "topic": str(title.get("ar") or ""),
        "duration": str(info.get("duration") or ""),
        "age_range": str(info.get("ageGroup") or ""),
    }


def _validated_plan(plan: Any, rules: PlanRules) -> dict:
    result = validate_workshop_json(plan, rules)
    if not result.is_valid:
        raise InvalidWorkshopError(result)
    return result.fixed_plan


async def save_workshop(
    db: AsyncSession,
    plan: Any,
    source: str,
    imported_from: str | None = None,
    rules: PlanRules = DEFAULT_RULES,
) -> SavedWorkshop:
    fixed = _validated_plan(plan, rules)
    workshop = SavedWorkshop(
        plan=fixed,
        source=source,
        imported_from=imported_from,
        **plan_metadata(fixed),
    )
    db.add(workshop)
    await db.flush()
    logger.info("Saved workshop %s (%s)", workshop.id, source)
    return workshop


async def list_workshops(db: AsyncSession, search: str | None = None) -> list[SavedWorkshop]:
    result = await db.execute(select(SavedWorkshop).order_by(SavedWorkshop.created_at))
    workshops = list(result.scalars().all())

    if search:
        query = search.lower()
        workshops = [w for w in workshops if _matches(w, query)]

    return workshops


async def get_workshop(db: AsyncSession, workshop_id: str) -> SavedWorkshop | None:
    return await db.get(SavedWorkshop, workshop_id)


async def update_workshop(
    db: AsyncSession,
    workshop_id: str,
    plan: Any,
    rules: PlanRules = DEFAULT_RULES,
) -> SavedWorkshop | None:
    workshop = await db.get(SavedWorkshop, workshop_id)
    if workshop is None:
        return None

    fixed = _validated_plan(plan, rules)
    workshop.plan = fixed
    for column, value in plan_metadata(fixed).items():
        setattr(workshop, column, value)
    workshop.last_modified = utcnow()
    await db.flush()
    return workshop


async def delete_workshop(db: AsyncSession, workshop_id: str) -> bool:
    workshop = await db.get(SavedWorkshop, workshop_id)
    if workshop is None:
        return False
    await db.delete(workshop)
    await db.flush()
    return True


async def count_workshops(db: AsyncSession) -> int:
    result = await db.execute(select(func.count()).select_from(SavedWorkshop))
    return result.scalar_one()


async def clear_workshops(db: AsyncSession) -> int:
    result = await db.execute(delete(SavedWorkshop))
    await db.flush()
    logger.warning("Cleared %d saved workshops", result.rowcount)
    return result.rowcount


def _matches(workshop: SavedWorkshop, query: str) -> bool:
    title = workshop.plan.get("title") if isinstance(workshop.plan.get("title"), dict) else {}
    haystacks = [workshop.topic, title.get("ar"), title.get("en")]
    return any(isinstance(text, str) and query in text.lower() for text in haystacks)
