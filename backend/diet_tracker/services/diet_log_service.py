import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import delete, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from diet_tracker.models.diet_log import DietLog
from diet_tracker.models.schemas import DietLogCreate, DietLogUpdate

logger = logging.getLogger(__name__)


class DietLogNotFoundError(Exception):
    def __init__(self, entry_id: int):
        super().__init__(f"Diet log {entry_id} not found")
        self.entry_id = entry_id


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


async def list_for_user(db: AsyncSession, user_id: str) -> List[DietLog]:
    stmt = (
        select(DietLog)
        .where(DietLog.user_id == user_id)
        .order_by(DietLog.logged_at.desc(), DietLog.id.desc())
    )
    return list((await db.execute(stmt)).scalars().all())


async def get_entry(db: AsyncSession, entry_id: int) -> Optional[DietLog]:
    return await db.get(DietLog, entry_id)


async def create_entry(db: AsyncSession, payload: DietLogCreate) -> DietLog:
    stmt = (
        insert(DietLog)
        .values(
            user_id=payload.user_id,
            food_name=payload.food_name,
            notes=payload.notes,
            logged_at=payload.logged_at or _utcnow(),
        )
        .returning(DietLog)
    )
    entry = (await db.execute(stmt)).scalar_one()
    await db.commit()
    logger.info("Created diet log %s for user %s", entry.id, entry.user_id)
    return entry


async def update_entry(db: AsyncSession, entry_id: int, patch: DietLogUpdate) -> DietLog:
    changes = patch.changes()
    if not changes:
        entry = await get_entry(db, entry_id)
        if entry is None:
            raise DietLogNotFoundError(entry_id)
        return entry

    stmt = (
        update(DietLog)
        .where(DietLog.id == entry_id)
        .values(**changes)
        .returning(DietLog)
        .execution_options(populate_existing=True)
    )
    entry = (await db.execute(stmt)).scalar_one_or_none()
    if entry is None:
        await db.rollback()
        raise DietLogNotFoundError(entry_id)

    await db.commit()
    logger.info("Updated diet log %s fields=%s", entry_id, sorted(changes))
    return entry


async def delete_entry(db: AsyncSession, entry_id: int) -> DietLog:
    stmt = delete(DietLog).where(DietLog.id == entry_id).returning(DietLog)
    entry = (await db.execute(stmt)).scalar_one_or_none()
    if entry is None:
        await db.rollback()
        raise DietLogNotFoundError(entry_id)

    await db.commit()
    logger.info("Deleted diet log %s", entry_id)
    return entry
