"""Run CSV imports from the command line, bypassing the web upload.

Usage:
  python scripts/import_csv.py preview members data/members.csv
  python scripts/import_csv.py execute members data/members.csv --user admin@treehouse.local
  python scripts/import_csv.py rollback 6f1c...-uuid
  python scripts/import_csv.py history --page 2
"""
import argparse
import asyncio
import json
import os
import sys
from pathlib import Path

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from sqlalchemy import select

from treehouse.core.logging import setup_logging
from treehouse.db.session import AsyncSessionLocal, engine
from treehouse.models.user import User
from treehouse.services.data_import import CSV_TEMPLATES, DataImportError
from treehouse.services.import_rollback import rollback_import
from treehouse.services.import_runs import execute_import, list_import_history, preview_import


def _read(path: str) -> str:
    return Path(path).read_text(encoding="utf-8-sig")


async def _staff_user(db, email: str) -> User:
    result = await db.execute(select(User).where(User.email == email.lower()))
    user = result.scalars().first()
    if user is None or user.role not in ("staff", "admin"):
        raise SystemExit(f"No active staff/admin user with email {email}")
    return user


async def cmd_preview(args) -> int:
    preview = preview_import(_read(args.file), args.import_type)
    print(json.dumps(preview, indent=2, default=str))
    return 0 if preview["invalid_rows"] == 0 else 2


async def cmd_execute(args) -> int:
    async with AsyncSessionLocal() as db:
        user = await _staff_user(db, args.user)
        history = await execute_import(db, _read(args.file), args.import_type, user.id, Path(args.file).name)
        print(f"[ok] import {history.id}: {history.successful} successful, {history.failed} failed")
        for err in history.errors:
            print(f"  row {err['row']}: {err['error']}")
        return 0 if history.failed == 0 else 2


async def cmd_rollback(args) -> int:
    async with AsyncSessionLocal() as db:
        result = await rollback_import(db, args.import_id)
    print(f"[ok] rolled back {args.import_id}: {result['deleted']} deleted, {len(result['errors'])} errors")
    for err in result["errors"]:
        print(f"  {err['model']} {err['record_id']}: {err['error']}")
    return 0 if not result["errors"] else 2


async def cmd_history(args) -> int:
    async with AsyncSessionLocal() as db:
        page = await list_import_history(db, page=args.page)
        for run in page["items"]:
            print(
                f"{run.started_at:%Y-%m-%d %H:%M}  {run.id}  {run.import_type:<10} "
                f"{run.status:<11} {run.successful}/{run.total_rows}  {run.file_name or ''}"
            )
        print(f"page {page['page']} of {page['total_pages']} ({page['total']} runs)")
    return 0


async def run(args) -> int:
    try:
        return await args.func(args)
    finally:
        await engine.dispose()


def main():
    ap = argparse.ArgumentParser(description="Preview, execute or roll back CSV data imports.")
    sub = ap.add_subparsers(dest="command", required=True)

    p = sub.add_parser("preview", help="Validate a CSV without writing")
    p.add_argument("import_type", choices=sorted(CSV_TEMPLATES))
    p.add_argument("file")
    p.set_defaults(func=cmd_preview)

    p = sub.add_parser("execute", help="Import a CSV")
    p.add_argument("import_type", choices=sorted(CSV_TEMPLATES))
    p.add_argument("file")
    p.add_argument("--user", required=True, help="Email of the staff/admin user running the import")
    p.set_defaults(func=cmd_execute)

    p = sub.add_parser("rollback", help="Delete the records an import created")
    p.add_argument("import_id")
    p.set_defaults(func=cmd_rollback)

    p = sub.add_parser("history", help="List past imports")
    p.add_argument("--page", type=int, default=1)
    p.set_defaults(func=cmd_history)

    args = ap.parse_args()
    setup_logging()
    try:
        sys.exit(asyncio.run(run(args)))
    except DataImportError as exc:
        print(f"[ERR] {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
