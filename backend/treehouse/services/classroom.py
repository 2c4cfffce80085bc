"""Classroom programs: keep attendees mirrored in the member directory."""
import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from treehouse.models.attendee import Attendee
from treehouse.models.member import Member
from treehouse.services.members import find_member_by_email, normalize_email

logger = logging.getLogger(__name__)

STUDENT_EMAIL_DOMAIN = "student.treehouse.local"


def student_placeholder_email(first_name: str, last_name: str) -> str:
    """Unique stand-in address for a child with no email of their own."""
    local = f"{first_name}.{last_name}".lower().replace(" ", "")
    return f"{local}.{uuid.uuid4().hex[:8]}@{STUDENT_EMAIL_DOMAIN}"


async def sync_attendee_to_member(
    db: AsyncSession,
    attendee: Attendee,
    parent_member_id: uuid.UUID | None = None,
) -> tuple[Member, bool]:
    """Link an attendee to a child Member, creating one when needed.

    Returns (member, created). An attendee already linked, or whose email
    belongs to an existing member, refreshes that member instead of creating
    a second one.
    """
    member = await db.get(Member, attendee.member_id) if attendee.member_id else None
    if member is None and attendee.email:
        member = await find_member_by_email(db, attendee.email)

    created = member is None
    if created:
        member = Member(
            first_name=attendee.first_name,
            last_name=attendee.last_name,
            email=normalize_email(attendee.email)
            or student_placeholder_email(attendee.first_name, attendee.last_name),
            phone=attendee.phone,
            member_type="child",
            date_of_birth=attendee.date_of_birth,
            grade=attendee.grade,
            school=attendee.school,
            parent_id=parent_member_id,
        )
        db.add(member)
    else:
        member.date_of_birth = attendee.date_of_birth or member.date_of_birth
        member.grade = attendee.grade or member.grade
        member.school = attendee.school or member.school
        if parent_member_id and not member.parent_id:
            member.parent_id = parent_member_id
    await db.flush()

    attendee.member_id = member.id
    if parent_member_id:
        attendee.parent_member_id = parent_member_id
    await db.flush()

    logger.debug("Attendee %s synced to member %s (created=%s)", attendee.id, member.id, created)
    return member, created
