from datetime import datetime, time, timezone

from treehouse.services.data_import.base import BaseImporter, optional
from treehouse.services.data_import.registry import EntityType
from treehouse.services.data_import.resolvers import require_member
from treehouse.services.data_import.validation import parse_date, parse_float, parse_int, split_list


def as_timestamp(value: str) -> datetime:
    """Calendar date from the CSV -> midnight UTC."""
    return datetime.combine(parse_date(value), time.min, tzinfo=timezone.utc)


class CheckoutsImporter(BaseImporter):
    import_type = "checkouts"
    entity = EntityType.Checkout
    duplicate_policy = None  # every row is a separate checkout event

    async def resolve(self, row, db):
        return {"member": await require_member(db, row["memberEmail"])}

    def build(self, row, refs, user_id):
        weight = optional(row, "weight")
        return dict(
            member_id=refs["member"].id,
            checkout_date=as_timestamp(row["checkoutDate"]),
            number_of_books=parse_int(row["numberOfBooks"]),
            genres=split_list(row.get("genres") or ""),
            weight=parse_float(weight) if weight else None,
            total_weight=parse_float(weight) if weight else 0,
            recorded_by=user_id,
        )
