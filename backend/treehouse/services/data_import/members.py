from treehouse.models.member import Member
from treehouse.services.data_import.base import BaseImporter, DuplicatePolicy, optional
from treehouse.services.data_import.registry import EntityType
from treehouse.services.data_import.resolvers import find_member_by_email, normalize_email
from treehouse.services.data_import.validation import parse_date


class MembersImporter(BaseImporter):
    import_type = "members"
    entity = EntityType.Member
    # Email is the member's natural key
    duplicate_policy = DuplicatePolicy(
        model=Member,
        column="email",
        key=lambda row: normalize_email(row.get("email")),
        message="Member with this email already exists",
    )

    async def resolve(self, row, db):
        # A parent that is not on file yet is left unlinked rather than failing the row
        return {"parent": await find_member_by_email(db, row.get("parentEmail"))}

    def build(self, row, refs, user_id):
        parent = refs["parent"]
        dob = optional(row, "dateOfBirth")
        return dict(
            first_name=row["firstName"].strip(),
            last_name=row["lastName"].strip(),
            email=normalize_email(row["email"]),
            phone=optional(row, "phone"),
            address=optional(row, "address"),
            member_type=optional(row, "memberType") or "adult",
            date_of_birth=parse_date(dob) if dob else None,
            grade=optional(row, "grade"),
            school=optional(row, "school"),
            parent_id=parent.id if parent else None,
            notes=optional(row, "notes"),
        )
