from typing import Any, Type

from loguru import logger
from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.core.errors import Internal

UNIQUE_VIOLATION_SQLSTATE = "23505"


def is_unique_violation(error: IntegrityError) -> bool:
    """True for duplicate-key errors; foreign key and check failures are not."""
    orig = error.orig
    if getattr(orig, "sqlstate", None) == UNIQUE_VIOLATION_SQLSTATE:
        return True
    # asyncpg: 'duplicate key value violates unique constraint "uq_..."'
    # sqlite: 'UNIQUE constraint failed: likes.liked_by_id, likes.video_id'
    return "unique constraint" in str(orig).lower()


async def insert_unique(db: AsyncSession, entity: Any) -> bool:
    """Insert and commit ``entity``; a uniqueness violation means it is already there.

    Returns True when a new row was written. Any other integrity error is
    raised as Internal. Callers must not touch ORM instances loaded before
    this call once it returns False, the rollback expires them.
    """
    name = type(entity).__name__
    db.add(entity)
    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        if not is_unique_violation(e):
            logger.error(f"Could not store {name}: {e.orig}")
            raise Internal(f"Could not store {name}") from e
        logger.debug(f"{name} already present: {e.orig}")
        return False
    return True


async def toggle_edge(db: AsyncSession, model: Type[Any], **keys: Any) -> bool:
    """Flip the edge identified by ``keys``; returns True when the edge now exists."""
    result = await db.execute(
        delete(model).where(*[getattr(model, name) == value for name, value in keys.items()])
    )
    if result.rowcount:
        await db.commit()
        logger.info(f"{model.__name__} removed: {keys}")
        return False

    if await insert_unique(db, model(**keys)):
        logger.info(f"{model.__name__} created: {keys}")
    return True
