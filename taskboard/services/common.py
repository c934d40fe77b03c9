from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.core.exceptions import ConflictError


async def commit_or_conflict(db: AsyncSession, conflict_message: str) -> None:
    """
    Commit the current transaction.

    A unique/foreign key violation rolls the transaction back and surfaces as
    ConflictError; other store errors propagate to the API error handlers.
    """
    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        raise ConflictError(conflict_message) from e
