"""Shared fixtures: an in-memory SQLite database and dashboard users."""
import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("APP_ENV", "test")

from collections.abc import AsyncGenerator  # noqa: E402

import pytest_asyncio  # noqa: E402
from sqlalchemy import event  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

import treehouse.models  # noqa: E402,F401  registers every table
from treehouse.db.base import Base  # noqa: E402
from treehouse.models.member import Member  # noqa: E402
from treehouse.models.program import Program  # noqa: E402
from treehouse.models.user import User  # noqa: E402


# ─── Database ─────────────────────────────────────────────────────────────────

def _sqlite_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # aiosqlite defers BEGIN on its own, which breaks SAVEPOINT; let SQLAlchemy issue it.
    # Foreign keys are off by default in SQLite.
    @event.listens_for(engine.sync_engine, "connect")
    def _configure(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")

    return engine


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    engine = _sqlite_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    session_factory = async_sessionmaker(engine, expire_on_commit=False, autocommit=False, autoflush=False)
    async with session_factory() as session:
        yield session
    await engine.dispose()


# ─── Users & directory ────────────────────────────────────────────────────────

async def _add_user(db: AsyncSession, role: str) -> User:
    user = User(email=f"{role}@treehouse.local", name=f"{role.title()} User", role=role, is_active=True)
    db.add(user)
    await db.commit()
    return user


@pytest_asyncio.fixture
async def staff_user(db_session) -> User:
    return await _add_user(db_session, "staff")


@pytest_asyncio.fixture
async def volunteer_user(db_session) -> User:
    return await _add_user(db_session, "volunteer")


@pytest_asyncio.fixture
async def member(db_session) -> Member:
    m = Member(first_name="John", last_name="Doe", email="john@example.com")
    db_session.add(m)
    await db_session.commit()
    return m


@pytest_asyncio.fixture
async def classroom_program(db_session) -> Program:
    program = Program(name="After-School Reading", template_type="classroom", auto_sync_attendees=True)
    db_session.add(program)
    await db_session.commit()
    return program
