"""Entity-type tag -> storage accessor used by importers and rollback."""
import enum
import uuid
from dataclasses import dataclass

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from treehouse.db.base import Base
from treehouse.models.attendee import Attendee
from treehouse.models.checkout import Checkout
from treehouse.models.donation import Donation
from treehouse.models.member import Member
from treehouse.models.program import Program
from treehouse.services.data_import.errors import RecordNotFoundError


class EntityType(str, enum.Enum):
    Member = "Member"
    Checkout = "Checkout"
    Donation = "Donation"
    Program = "Program"
    Attendee = "Attendee"


@dataclass(frozen=True)
class EntityStore:
    entity: EntityType
    model: type[Base]

    async def create(self, db: AsyncSession, **data) -> Base:
        record = self.model(**data)
        db.add(record)
        await db.flush()
        return record

    async def get(self, db: AsyncSession, record_id: uuid.UUID | str) -> Base | None:
        return await db.get(self.model, _as_uuid(record_id))

    async def delete_by_id(self, db: AsyncSession, record_id: uuid.UUID | str) -> None:
        result = await db.execute(delete(self.model).where(self.model.id == _as_uuid(record_id)))
        if result.rowcount == 0:
            raise RecordNotFoundError(self.entity.value, str(record_id))


def _as_uuid(record_id: uuid.UUID | str) -> uuid.UUID:
    return record_id if isinstance(record_id, uuid.UUID) else uuid.UUID(str(record_id))


ENTITY_REGISTRY: dict[EntityType, EntityStore] = {
    store.entity: store
    for store in (
        EntityStore(EntityType.Member, Member),
        EntityStore(EntityType.Checkout, Checkout),
        EntityStore(EntityType.Donation, Donation),
        EntityStore(EntityType.Program, Program),
        EntityStore(EntityType.Attendee, Attendee),
    )
}


def get_store(entity: EntityType | str) -> EntityStore:
    """Look up a store by tag; raises KeyError for tags outside EntityType."""
    try:
        return ENTITY_REGISTRY[EntityType(entity)]
    except ValueError:
        raise KeyError(f"Unknown entity type: {entity}") from None
