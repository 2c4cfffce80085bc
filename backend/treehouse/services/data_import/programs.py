from treehouse.models.program import TEMPLATE_TYPES, Program
from treehouse.services.data_import.base import BaseImporter, DuplicatePolicy, optional
from treehouse.services.data_import.registry import EntityType
from treehouse.services.data_import.validation import parse_flag


class ProgramsImporter(BaseImporter):
    import_type = "programs"
    entity = EntityType.Program
    duplicate_policy = DuplicatePolicy(
        model=Program,
        column="name",
        key=lambda row: (row.get("name") or "").strip(),
        message="Program with this name already exists",
    )

    def build(self, row, refs, user_id):
        template_type = (optional(row, "templateType") or "custom").lower()
        if template_type not in TEMPLATE_TYPES:
            raise ValueError(f"templateType must be one of: {', '.join(TEMPLATE_TYPES)}")
        active = optional(row, "active")
        return dict(
            name=row["name"].strip(),
            description=optional(row, "description"),
            template_type=template_type,
            active=parse_flag(active) if active is not None else True,
        )
