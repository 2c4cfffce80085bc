"""CSV text -> list of row dicts."""
import csv
import io

from treehouse.services.data_import.errors import ParseError


def decode_upload(content: bytes) -> str:
    return content.decode("utf-8-sig", errors="replace")


def parse_csv(text: str) -> list[dict[str, str]]:
    """Parse CSV text using the first non-blank line as the header.

    Values and header names are trimmed and blank lines skipped. Rows with
    fewer cells than the header simply lack the trailing keys; surplus cells
    are dropped. Malformed quoting raises ParseError.
    """
    reader = csv.reader(io.StringIO(text.lstrip("\ufeff")), strict=True)
    header: list[str] | None = None
    rows: list[dict[str, str]] = []
    try:
        for cells in reader:
            if not any(cell.strip() for cell in cells):
                continue
            if header is None:
                header = [cell.strip() for cell in cells]
                continue
            rows.append({
                name: value.strip()
                for name, value in zip(header, cells)
                if name
            })
    except csv.Error as exc:
        raise ParseError(f"CSV parsing failed: {exc}") from exc
    return rows


def columns_of(rows: list[dict[str, str]]) -> list[str]:
    return list(rows[0].keys()) if rows else []
