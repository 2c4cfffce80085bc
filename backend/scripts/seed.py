"""Seed script: creates dashboard users and a sample classroom program.

Idempotent: checks for existing records before inserting, then prints an
access token per user for trying the import API locally.
Run: python scripts/seed.py
"""
import asyncio
import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from treehouse.core.security import create_access_token
from treehouse.db.session import AsyncSessionLocal, engine
from treehouse.models.program import Program
from treehouse.models.user import User

USERS = [
    ("admin@treehouse.local", "Admin User", "admin"),
    ("staff@treehouse.local", "Staff User", "staff"),
    ("volunteer@treehouse.local", "Volunteer User", "volunteer"),
]

PROGRAMS = [
    ("After-School Reading", "classroom", "Weekday reading circle for grades K-5"),
    ("Summer Reading Program", "custom", "Summer reading challenge"),
]


# ─── Upsert helpers ───────────────────────────────────────────────────────────

async def _upsert_user(db: AsyncSession, email: str, name: str, role: str) -> User:
    result = await db.execute(select(User).where(User.email == email))
    user = result.scalars().first()
    if user:
        print(f"  [skip] User {email}")
        return user
    user = User(email=email, name=name, role=role, is_active=True)
    db.add(user)
    await db.flush()
    print(f"  [new]  User {email} ({role})")
    return user


async def _upsert_program(db: AsyncSession, name: str, template_type: str, description: str) -> Program:
    result = await db.execute(select(Program).where(Program.name == name))
    program = result.scalars().first()
    if program:
        print(f"  [skip] Program {name}")
        return program
    program = Program(name=name, template_type=template_type, description=description)
    db.add(program)
    await db.flush()
    print(f"  [new]  Program {name} ({template_type})")
    return program


async def seed() -> None:
    async with AsyncSessionLocal() as db:
        print("Users:")
        users = [await _upsert_user(db, *fields) for fields in USERS]
        print("Programs:")
        for fields in PROGRAMS:
            await _upsert_program(db, *fields)
        await db.commit()

    await engine.dispose()
    print("\nAccess tokens:")
    for user in users:
        print(f"  {user.role:<10} {create_access_token(str(user.id), user.role)}")


if __name__ == "__main__":
    asyncio.run(seed())
