"""Column templates for each CSV import type.

Every field names its `kind`; the kind picks the format check in
validation.VALIDATORS and the converter the importers use, so adding an
import type is a matter of adding a template here.
"""
import csv
import io
from dataclasses import dataclass


@dataclass(frozen=True)
class FieldSpec:
    name: str
    kind: str = "text"
    required: bool = False
    example: str = ""


def _req(name: str, kind: str = "text", example: str = "") -> FieldSpec:
    return FieldSpec(name, kind, True, example)


def _opt(name: str, kind: str = "text", example: str = "") -> FieldSpec:
    return FieldSpec(name, kind, False, example)


CSV_TEMPLATES: dict[str, tuple[FieldSpec, ...]] = {
    "members": (
        _req("firstName", example="John"),
        _req("lastName", example="Doe"),
        _req("email", "email", "john.doe@example.com"),
        _opt("phone", example="555-1234"),
        _opt("address", example="123 Main St"),
        _opt("memberType", example="adult"),
        _opt("dateOfBirth", "date", "2010-05-15"),
        _opt("grade", example="5"),
        _opt("school", example="Lincoln Elementary"),
        _opt("parentEmail", "email", "parent@example.com"),
        _opt("notes", example="Allergic to peanuts"),
    ),
    "checkouts": (
        _req("memberEmail", "email", "john.doe@example.com"),
        _req("checkoutDate", "date", "2024-01-15"),
        _req("numberOfBooks", "integer", "5"),
        _opt("genres", "list", "Kids Board Books,Young Adult"),
        _opt("weight", "number", "2.5"),
    ),
    "donations": (
        _req("memberEmail", "email", "jane.smith@example.com"),
        _req("donatedAt", "date", "2024-01-10"),
        _req("numberOfBooks", "integer", "10"),
        _opt("donationType", example="used"),
        _opt("condition", example="Good"),
        _opt("genres", "list", "Mystery,Biography"),
    ),
    "programs": (
        _req("name", example="Summer Reading Program"),
        _opt("description", example="Summer reading program for grades K-5"),
        _opt("templateType", example="classroom"),
        _opt("active", "flag", "true"),
    ),
    "attendees": (
        _req("programName", example="After-School Reading"),
        _req("firstName", example="Sarah"),
        _req("lastName", example="Johnson"),
        _opt("grade", example="3"),
        _opt("dateOfBirth", "date", "2012-08-20"),
        _opt("school", example="Washington Elementary"),
        _opt("email", "email", "sarah.j@example.com"),
        _opt("phone", example="555-5678"),
        _opt("parentEmail", "email", "parent@example.com"),
    ),
}


def type_key(import_type) -> str:
    return getattr(import_type, "value", import_type) or ""


def get_template(import_type) -> tuple[FieldSpec, ...] | None:
    return CSV_TEMPLATES.get(type_key(import_type))


def required_columns(import_type) -> list[str]:
    return [f.name for f in get_template(import_type) or () if f.required]


def optional_columns(import_type) -> list[str]:
    return [f.name for f in get_template(import_type) or () if not f.required]


def template_csv(import_type) -> str:
    """Header plus one example row, for the "download template" link."""
    fields = get_template(import_type)
    if fields is None:
        raise KeyError(type_key(import_type))
    out = io.StringIO()
    writer = csv.writer(out, lineterminator="\n")
    writer.writerow([f.name for f in fields])
    writer.writerow([f.example for f in fields])
    return out.getvalue()
