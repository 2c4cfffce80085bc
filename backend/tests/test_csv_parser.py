"""Tests for CSV parsing: headers, trimming, blank lines and malformed quoting."""
import pytest

from treehouse.services.data_import.errors import ParseError
from treehouse.services.data_import.parser import columns_of, decode_upload, parse_csv


def test_first_line_is_header():
    rows = parse_csv("firstName,lastName,email\nJohn,Doe,john@example.com\n")
    assert rows == [{"firstName": "John", "lastName": "Doe", "email": "john@example.com"}]


def test_values_and_headers_are_trimmed():
    rows = parse_csv(" firstName , lastName \n  Jane ,  Roe  \n")
    assert rows == [{"firstName": "Jane", "lastName": "Roe"}]


def test_blank_lines_are_skipped():
    rows = parse_csv("\nname\n\nReading Club\n   \n\nMath Club\n")
    assert [r["name"] for r in rows] == ["Reading Club", "Math Club"]


def test_short_rows_lack_trailing_columns():
    rows = parse_csv("firstName,lastName,email\nJohn,Doe\n")
    assert rows == [{"firstName": "John", "lastName": "Doe"}]


def test_extra_cells_are_dropped():
    rows = parse_csv("name\nReading Club,unexpected,cells\n")
    assert rows == [{"name": "Reading Club"}]


def test_quoted_commas_stay_in_one_value():
    rows = parse_csv('memberEmail,genres\njohn@example.com,"Young Adult, Black Author"\n')
    assert rows[0]["genres"] == "Young Adult, Black Author"


def test_header_only_yields_no_rows():
    assert parse_csv("firstName,lastName,email\n") == []
    assert parse_csv("") == []


def test_byte_order_mark_is_ignored():
    text = decode_upload("\ufeffname\nReading Club\n".encode("utf-8"))
    assert parse_csv(text) == [{"name": "Reading Club"}]


def test_columns_come_from_first_row():
    rows = parse_csv("a,b,c\n1,2,3\n")
    assert columns_of(rows) == ["a", "b", "c"]
    assert columns_of([]) == []


@pytest.mark.parametrize("text", [
    'name\n"Reading Club\n',           # unterminated quote
    'name,notes\n"Reading" Club,x\n',  # stray text after closing quote
])
def test_malformed_quoting_raises_parse_error(text):
    with pytest.raises(ParseError, match="CSV parsing failed"):
        parse_csv(text)
