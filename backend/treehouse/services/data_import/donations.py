from treehouse.models.donation import DONATION_TYPES
from treehouse.services.data_import.base import BaseImporter, optional
from treehouse.services.data_import.checkouts import as_timestamp
from treehouse.services.data_import.registry import EntityType
from treehouse.services.data_import.resolvers import require_member
from treehouse.services.data_import.validation import parse_int, split_list


class DonationsImporter(BaseImporter):
    import_type = "donations"
    entity = EntityType.Donation
    duplicate_policy = None  # donations are events, not entities

    async def resolve(self, row, db):
        return {"member": await require_member(db, row["memberEmail"])}

    def build(self, row, refs, user_id):
        member = refs["member"]
        donation_type = (optional(row, "donationType") or "used").lower()
        if donation_type not in DONATION_TYPES:
            raise ValueError(f"donationType must be one of: {', '.join(DONATION_TYPES)}")
        return dict(
            donation_type=donation_type,
            donor_type="person",
            donor_name=f"{member.first_name} {member.last_name}",
            member_id=member.id,
            donated_at=as_timestamp(row["donatedAt"]),
            number_of_books=parse_int(row["numberOfBooks"]),
            condition=optional(row, "condition"),
            genres=split_list(row.get("genres") or ""),
            recorded_by=user_id,
        )
