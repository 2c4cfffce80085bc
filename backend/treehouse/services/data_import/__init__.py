# backend/treehouse/services/data_import/__init__.py
import uuid
from typing import Dict, Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from .attendees import AttendeesImporter
from .base import BaseImporter, ImportResult
from .checkouts import CheckoutsImporter
from .donations import DonationsImporter
from .errors import (
    DataImportError,
    ImportRunNotFoundError,
    ParseError,
    RollbackStateError,
    UnsupportedImportTypeError,
)
from .members import MembersImporter
from .parser import parse_csv
from .programs import ProgramsImporter
from .templates import CSV_TEMPLATES, template_csv, type_key
from .validation import validate_row

REGISTRY: dict[str, BaseImporter] = {
    "members": MembersImporter(),
    "checkouts": CheckoutsImporter(),
    "donations": DonationsImporter(),
    "programs": ProgramsImporter(),
    "attendees": AttendeesImporter(),
}


def get_importer(import_type) -> BaseImporter:
    key = type_key(import_type).lower().strip()
    if key not in REGISTRY:
        raise UnsupportedImportTypeError(type_key(import_type))
    return REGISTRY[key]


async def import_members(db: AsyncSession, rows: Iterable[Dict], user_id: uuid.UUID | None = None) -> ImportResult:
    return await REGISTRY["members"].import_rows(rows, db, user_id)


async def import_checkouts(db: AsyncSession, rows: Iterable[Dict], user_id: uuid.UUID | None = None) -> ImportResult:
    return await REGISTRY["checkouts"].import_rows(rows, db, user_id)


async def import_donations(db: AsyncSession, rows: Iterable[Dict], user_id: uuid.UUID | None = None) -> ImportResult:
    return await REGISTRY["donations"].import_rows(rows, db, user_id)


async def import_programs(db: AsyncSession, rows: Iterable[Dict], user_id: uuid.UUID | None = None) -> ImportResult:
    return await REGISTRY["programs"].import_rows(rows, db, user_id)


async def import_attendees(db: AsyncSession, rows: Iterable[Dict], user_id: uuid.UUID | None = None) -> ImportResult:
    return await REGISTRY["attendees"].import_rows(rows, db, user_id)


__all__ = [
    "CSV_TEMPLATES",
    "DataImportError",
    "ImportResult",
    "ImportRunNotFoundError",
    "ParseError",
    "REGISTRY",
    "RollbackStateError",
    "UnsupportedImportTypeError",
    "get_importer",
    "import_attendees",
    "import_checkouts",
    "import_donations",
    "import_members",
    "import_programs",
    "parse_csv",
    "template_csv",
    "validate_row",
]
