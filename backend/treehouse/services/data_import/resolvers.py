"""Natural-key lookups shared by the importers."""
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from treehouse.models.member import Member
from treehouse.models.program import Program
from treehouse.services.data_import.errors import ReferenceResolutionError
from treehouse.services.members import find_member_by_email, normalize_email

__all__ = [
    "find_member_by_email",
    "find_program_by_name",
    "normalize_email",
    "require_member",
    "require_program",
]


async def find_program_by_name(db: AsyncSession, name: str | None) -> Program | None:
    key = (name or "").strip()
    if not key:
        return None
    result = await db.execute(select(Program).where(Program.name == key))
    return result.scalars().first()


async def require_member(db: AsyncSession, email: str) -> Member:
    member = await find_member_by_email(db, email)
    if member is None:
        raise ReferenceResolutionError("Member", email)
    return member


async def require_program(db: AsyncSession, name: str) -> Program:
    program = await find_program_by_name(db, name)
    if program is None:
        raise ReferenceResolutionError("Program", name)
    return program
