"""Row validation and value coercion, dispatched on FieldSpec.kind."""
import math
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Callable

from treehouse.services.data_import.templates import get_template, type_key

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
DATE_FORMATS = ("%Y-%m-%d", "%m/%d/%Y", "%d/%m/%Y", "%Y/%m/%d")
TRUTHY = {"true", "1", "yes", "y"}


@dataclass
class RowValidation:
    valid: bool
    errors: list[str] = field(default_factory=list)


# ─── Coercion ───

def parse_date(value: str) -> date | None:
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            pass
    try:
        return datetime.fromisoformat(value).date()
    except ValueError:
        return None


def parse_int(value: str) -> int | None:
    """Any finite number, truncated toward zero ("2.5" -> 2)."""
    number = parse_float(value)
    return int(number) if number is not None else None


def parse_float(value: str) -> float | None:
    try:
        number = float(value.replace(",", ""))
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def parse_flag(value: str) -> bool:
    return value.strip().lower() in TRUTHY


def split_list(value: str) -> list[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


# ─── Kind registry ───

KindCheck = Callable[[str, str], str | None]

VALIDATORS: dict[str, KindCheck] = {}


def validator(kind: str):
    def register(fn: KindCheck) -> KindCheck:
        VALIDATORS[kind] = fn
        return fn
    return register


@validator("email")
def _check_email(name: str, value: str) -> str | None:
    return None if EMAIL_RE.match(value) else f"Invalid {name} format"


@validator("date")
def _check_date(name: str, value: str) -> str | None:
    return None if parse_date(value) else f"Invalid {name} format (use YYYY-MM-DD)"


@validator("integer")
def _check_integer(name: str, value: str) -> str | None:
    return None if parse_int(value) is not None else f"{name} must be a number"


@validator("number")
def _check_number(name: str, value: str) -> str | None:
    return None if parse_float(value) is not None else f"{name} must be a number"


def validate_row(row: dict[str, str], import_type) -> RowValidation:
    """Check required columns first, then format checks on non-blank fields."""
    fields = get_template(import_type)
    if fields is None:
        return RowValidation(False, [f"Unknown import type: {type_key(import_type)}"])

    errors = [
        f"Missing required field: {f.name}"
        for f in fields
        if f.required and not (row.get(f.name) or "").strip()
    ]
    for f in fields:
        value = (row.get(f.name) or "").strip()
        check = VALIDATORS.get(f.kind)
        if value and check:
            message = check(f.name, value)
            if message:
                errors.append(message)
    return RowValidation(not errors, errors)
