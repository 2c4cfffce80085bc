"""Tests for the per-entity importers.

Each importer runs against an in-memory SQLite session; rows are plain dicts
as produced by parse_csv.
"""
from unittest.mock import patch

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from treehouse.models.attendee import Attendee
from treehouse.models.checkout import Checkout
from treehouse.models.donation import Donation
from treehouse.models.member import Member
from treehouse.models.program import Program
from treehouse.services.data_import import (
    import_attendees,
    import_checkouts,
    import_donations,
    import_members,
    import_programs,
)
from treehouse.services.data_import.members import MembersImporter


async def _count(db, model) -> int:
    return (await db.execute(select(func.count()).select_from(model))).scalar_one()


async def _one(db, stmt):
    return (await db.execute(stmt)).scalars().one()


def _member_rows(*emails):
    return [{"firstName": f"First{i}", "lastName": f"Last{i}", "email": e} for i, e in enumerate(emails)]


# ─── Members ──────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_import_members_creates_one_member_per_row(db_session):
    rows = _member_rows("a@example.com", "b@example.com", "c@example.com")
    result = await import_members(db_session, rows)

    assert result.successful == 3
    assert result.failed == 0
    assert await _count(db_session, Member) == 3
    assert [r["model"] for r in result.imported_records] == ["Member"] * 3


@pytest.mark.asyncio
async def test_import_members_normalizes_email_and_defaults(db_session):
    rows = [{"firstName": " Ann ", "lastName": "Lee", "email": "Ann.Lee@Example.COM", "dateOfBirth": "2010-05-15"}]
    await import_members(db_session, rows)

    member = await _one(db_session, select(Member))
    assert member.first_name == "Ann"
    assert member.email == "ann.lee@example.com"
    assert member.member_type == "adult"
    assert member.date_of_birth.isoformat() == "2010-05-15"


@pytest.mark.asyncio
async def test_import_members_rejects_existing_email(db_session, member):
    result = await import_members(db_session, _member_rows("JOHN@example.com"))

    assert result.successful == 0
    assert result.errors == [{
        "row": 2,
        "data": {"firstName": "First0", "lastName": "Last0", "email": "JOHN@example.com"},
        "error": "Member with this email already exists",
    }]
    assert await _count(db_session, Member) == 1


@pytest.mark.asyncio
async def test_import_members_rejects_duplicate_within_batch(db_session):
    result = await import_members(db_session, _member_rows("dup@example.com", "dup@example.com"))
    assert result.successful == 1
    assert result.failed == 1
    assert result.errors[0]["row"] == 3


@pytest.mark.asyncio
async def test_unique_index_violation_reported_as_duplicate(db_session, member):
    """A concurrent insert that slips past the pre-check hits the unique index instead."""
    with patch("treehouse.services.data_import.base.DuplicatePolicy.exists", return_value=False):
        result = await import_members(db_session, _member_rows("john@example.com", "new@example.com"))

    assert result.failed == 1
    assert result.errors[0]["error"] == "Member with this email already exists"
    # the savepoint kept the failure to that row
    assert result.successful == 1
    assert await _count(db_session, Member) == 2


@pytest.mark.asyncio
async def test_other_constraint_failures_keep_database_message(db_session):
    broken = {"first_name": None, "last_name": "Lee", "email": "ann@example.com"}
    with patch.object(MembersImporter, "build", return_value=broken):
        result = await import_members(db_session, _member_rows("ann@example.com"))

    assert result.failed == 1
    error = result.errors[0]["error"]
    assert error != "Member with this email already exists"
    assert "NOT NULL" in error
    assert await _count(db_session, Member) == 0


def test_duplicate_policy_matches_only_unique_key_errors():
    policy = MembersImporter.duplicate_policy

    def _err(message):
        return IntegrityError("INSERT INTO members ...", {}, Exception(message))

    assert policy.violated_by(_err("UNIQUE constraint failed: members.email"))
    assert policy.violated_by(_err('duplicate key value violates unique constraint "ix_members_email"'))
    assert not policy.violated_by(_err("NOT NULL constraint failed: members.email"))
    assert not policy.violated_by(_err("FOREIGN KEY constraint failed"))
    assert not policy.violated_by(_err("UNIQUE constraint failed: members.phone"))


@pytest.mark.asyncio
async def test_import_members_links_parent_created_earlier_in_batch(db_session):
    rows = [
        {"firstName": "Pat", "lastName": "Doe", "email": "pat@example.com"},
        {"firstName": "Kid", "lastName": "Doe", "email": "kid@example.com", "parentEmail": "PAT@example.com"},
    ]
    await import_members(db_session, rows)

    parent = await _one(db_session, select(Member).where(Member.email == "pat@example.com"))
    kid = await _one(db_session, select(Member).where(Member.email == "kid@example.com"))
    assert kid.parent_id == parent.id


@pytest.mark.asyncio
async def test_invalid_rows_do_not_abort_batch(db_session):
    rows = [
        {"firstName": "Bad", "lastName": "", "email": "nope"},
        {"firstName": "Good", "lastName": "Row", "email": "good@example.com"},
    ]
    result = await import_members(db_session, rows)
    assert result.successful == 1
    assert result.errors[0] == {
        "row": 2,
        "data": rows[0],
        "error": "Missing required field: lastName, Invalid email format",
    }


# ─── Checkouts & donations ────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_import_checkouts_resolves_member(db_session, member, staff_user):
    rows = [
        {"memberEmail": "John@Example.com", "checkoutDate": "2024-01-15", "numberOfBooks": "5",
         "genres": "Kids Board Books, Young Adult", "weight": "2.5"},
        {"memberEmail": "john@example.com", "checkoutDate": "2024-01-15", "numberOfBooks": "5"},
    ]
    result = await import_checkouts(db_session, rows, staff_user.id)

    # checkouts are events: identical rows both import
    assert result.successful == 2
    checkouts = (await db_session.execute(select(Checkout))).scalars().all()
    assert {c.member_id for c in checkouts} == {member.id}
    first = next(c for c in checkouts if c.weight is not None)
    assert first.genres == ["Kids Board Books", "Young Adult"]
    assert first.weight == 2.5
    assert first.number_of_books == 5
    assert first.recorded_by == staff_user.id


@pytest.mark.asyncio
async def test_fractional_book_count_is_truncated(db_session, member):
    rows = [{"memberEmail": "john@example.com", "checkoutDate": "2024-01-15", "numberOfBooks": "2.5"}]
    result = await import_checkouts(db_session, rows)

    assert result.successful == 1
    checkout = await _one(db_session, select(Checkout))
    assert checkout.number_of_books == 2


@pytest.mark.asyncio
async def test_import_checkouts_unknown_member(db_session):
    rows = [{"memberEmail": "ghost@example.com", "checkoutDate": "2024-01-15", "numberOfBooks": "1"}]
    result = await import_checkouts(db_session, rows)
    assert result.failed == 1
    assert result.errors[0]["error"] == "Member not found: ghost@example.com"
    assert await _count(db_session, Checkout) == 0


@pytest.mark.asyncio
async def test_import_donations(db_session, member):
    rows = [{"memberEmail": "john@example.com", "donatedAt": "2024-01-10", "numberOfBooks": "10",
             "condition": "Good", "genres": "Mystery,Biography"}]
    result = await import_donations(db_session, rows)

    assert result.successful == 1
    donation = await _one(db_session, select(Donation))
    assert donation.member_id == member.id
    assert donation.donation_type == "used"
    assert donation.donor_name == "John Doe"
    assert donation.genres == ["Mystery", "Biography"]


@pytest.mark.asyncio
async def test_unexpected_row_error_is_collected(db_session, member):
    rows = [{"memberEmail": "john@example.com", "donatedAt": "2024-01-10", "numberOfBooks": "2",
             "donationType": "gently loved"}]
    result = await import_donations(db_session, rows)
    assert result.failed == 1
    assert result.errors[0]["error"].startswith("donationType must be one of")
    assert result.imported_records == []


# ─── Programs ─────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_import_programs_rejects_existing_name(db_session, classroom_program):
    rows = [
        {"name": "After-School Reading"},
        {"name": "Book Club", "templateType": "Workshop", "active": "no"},
        {"name": "Story Hour"},
    ]
    result = await import_programs(db_session, rows)

    assert result.successful == 2
    assert result.errors[0]["error"] == "Program with this name already exists"
    book_club = await _one(db_session, select(Program).where(Program.name == "Book Club"))
    assert book_club.template_type == "workshop"
    assert book_club.active is False
    story_hour = await _one(db_session, select(Program).where(Program.name == "Story Hour"))
    assert story_hour.active is True


# ─── Attendees ────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_import_attendees_unknown_program(db_session):
    rows = [{"programName": "Chess", "firstName": "Sarah", "lastName": "Johnson"}]
    result = await import_attendees(db_session, rows)
    assert result.errors[0]["error"] == "Program not found: Chess"


@pytest.mark.asyncio
async def test_classroom_attendee_syncs_child_member(db_session, classroom_program, member):
    rows = [{"programName": "After-School Reading", "firstName": "Sarah", "lastName": "Johnson",
             "grade": "3", "parentEmail": "john@example.com"}]
    result = await import_attendees(db_session, rows)

    assert result.successful == 1
    attendee = await _one(db_session, select(Attendee))
    child = await db_session.get(Member, attendee.member_id)
    assert child.member_type == "child"
    assert child.parent_id == member.id
    assert child.email.endswith("@student.treehouse.local")
    assert attendee.parent_member_id == member.id
    # side-effect member precedes the attendee in the manifest
    assert result.imported_records == [
        {"model": "Member", "record_id": str(child.id)},
        {"model": "Attendee", "record_id": str(attendee.id)},
    ]


@pytest.mark.asyncio
async def test_classroom_attendee_links_existing_member_by_email(db_session, classroom_program, member):
    rows = [{"programName": "After-School Reading", "firstName": "John", "lastName": "Doe",
             "email": "john@example.com", "school": "Lincoln Elementary"}]
    result = await import_attendees(db_session, rows)

    attendee = await _one(db_session, select(Attendee))
    assert attendee.member_id == member.id
    assert member.school == "Lincoln Elementary"
    assert [r["model"] for r in result.imported_records] == ["Attendee"]
    assert await _count(db_session, Member) == 1


@pytest.mark.asyncio
async def test_non_classroom_attendee_is_not_synced(db_session):
    db_session.add(Program(name="Story Hour", template_type="custom"))
    await db_session.commit()

    result = await import_attendees(
        db_session, [{"programName": "Story Hour", "firstName": "Ava", "lastName": "Kim"}]
    )

    attendee = await _one(db_session, select(Attendee))
    assert attendee.member_id is None
    assert [r["model"] for r in result.imported_records] == ["Attendee"]
