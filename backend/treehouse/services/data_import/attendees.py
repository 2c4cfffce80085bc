from treehouse.services.classroom import sync_attendee_to_member
from treehouse.services.data_import.base import BaseImporter, manifest_entry, optional
from treehouse.services.data_import.registry import EntityType
from treehouse.services.data_import.resolvers import find_member_by_email, require_program
from treehouse.services.data_import.validation import parse_date


class AttendeesImporter(BaseImporter):
    import_type = "attendees"
    entity = EntityType.Attendee
    duplicate_policy = None

    async def resolve(self, row, db):
        return {
            "program": await require_program(db, row["programName"]),
            "parent": await find_member_by_email(db, row.get("parentEmail")),
        }

    def build(self, row, refs, user_id):
        parent = refs["parent"]
        dob = optional(row, "dateOfBirth")
        return dict(
            program_id=refs["program"].id,
            first_name=row["firstName"].strip(),
            last_name=row["lastName"].strip(),
            grade=optional(row, "grade"),
            date_of_birth=parse_date(dob) if dob else None,
            school=optional(row, "school"),
            email=optional(row, "email"),
            phone=optional(row, "phone"),
            parent_member_id=parent.id if parent else None,
        )

    async def after_create(self, record, refs, db):
        if not refs["program"].syncs_attendees:
            return []
        parent = refs["parent"]
        member, created = await sync_attendee_to_member(db, record, parent.id if parent else None)
        return [manifest_entry(EntityType.Member, member.id)] if created else []
