"""Parse an uploaded consignee CSV into delivery locations.

The caller gets every row back (numbered 1..n in file order) together with
warnings for repeated (district, block, facility) keys, and decides what to
persist. Nothing here touches the database.

Accepted format: UTF-8 (BOM tolerated), comma separated, header row required.
Columns are matched by name so their order is free; unknown columns are
ignored and missing ones read as empty strings.
"""
import csv
import io
import logging

from app.schemas.consignee_import import ImportResult, LocationRecord

logger = logging.getLogger(__name__)

# Column names double as LocationRecord field names.
LOCATION_COLUMNS = (
    "district_name",
    "block_name",
    "facility_name",
    "contact_name",
    "contact_phone",
    "contact_email",
)

TEMPLATE_FILENAME = "consignee_template.csv"


class ParseError(ValueError):
    """Uploaded content is not decodable or not well-formed CSV."""

    def __init__(self, message: str, line: int | None = None):
        self.line = line
        super().__init__(f"Line {line}: {message}" if line else message)


# ─── Helpers ───

def _decode(content: bytes) -> str:
    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise ParseError(f"File is not valid UTF-8 (byte offset {exc.start})") from exc


def _is_blank(row: list[str]) -> bool:
    return not row or (len(row) == 1 and not row[0].strip())


def _read_rows(text: str) -> tuple[list[str], list[list[str]]]:
    """Return (header, data rows) with blank lines removed."""
    reader = csv.reader(io.StringIO(text, newline=""), strict=True)
    header: list[str] | None = None
    rows: list[list[str]] = []
    try:
        for row in reader:
            if _is_blank(row):
                continue
            if header is None:
                header = [name.strip() for name in row]
                duplicates = sorted({name for name in header if name and header.count(name) > 1})
                if duplicates:
                    raise ParseError(f"Duplicate column(s) in header: {', '.join(duplicates)}", reader.line_num)
                continue
            if len(row) != len(header):
                raise ParseError(
                    f"Expected {len(header)} columns but found {len(row)}", reader.line_num
                )
            rows.append(row)
    except csv.Error as exc:
        raise ParseError(f"Malformed CSV: {exc}", reader.line_num) from exc

    if header is None:
        raise ParseError("CSV file is empty")
    return header, rows


def _find_duplicates(locations: list[LocationRecord]) -> list[str]:
    warnings: list[str] = []
    seen: set[tuple[str, str, str]] = set()
    for location in locations:
        key = location.location_key
        if key in seen:
            warnings.append(f"Duplicate entry found: {'-'.join(key)}")
        seen.add(key)
    return warnings


# ─── Public API ───

def import_locations(content: bytes) -> ImportResult:
    """Parse raw CSV bytes into an ImportResult.

    Raises:
        ParseError: the bytes are not UTF-8, the file is empty, or a row is
            structurally invalid (unterminated quote, wrong column count).
    """
    header, rows = _read_rows(_decode(content))
    positions = {name: idx for idx, name in enumerate(header)}

    locations = []
    for serial, row in enumerate(rows, start=1):
        values = {
            column: row[positions[column]].strip() if column in positions else ""
            for column in LOCATION_COLUMNS
        }
        locations.append(LocationRecord(serial_number=str(serial), **values))

    warnings = _find_duplicates(locations)
    logger.info(
        "Parsed consignee CSV: %d location(s), %d duplicate warning(s)",
        len(locations), len(warnings),
    )
    return ImportResult(locations=locations, warnings=warnings or None)


def generate_template() -> bytes:
    """Header-only CSV users can fill in and upload."""
    return (",".join(LOCATION_COLUMNS) + "\n").encode("utf-8")
