"""Member directory lookups keyed by email."""
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from treehouse.models.member import Member


def normalize_email(value: str | None) -> str:
    return (value or "").strip().lower()


async def find_member_by_email(db: AsyncSession, email: str | None) -> Member | None:
    key = normalize_email(email)
    if not key:
        return None
    result = await db.execute(select(Member).where(Member.email == key))
    return result.scalars().first()
