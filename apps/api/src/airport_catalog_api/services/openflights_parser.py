"""Parser for the OpenFlights ``airports.dat`` CSV feed.

Columns, in order::

    id, name, city, country, iata, icao, latitude, longitude,
    altitude, timezone, dst, tz, type, source

``\\N`` in the IATA / ICAO columns means the code is absent.
"""

from __future__ import annotations

import logging
import math

from sqlalchemy import String

from airport_catalog_db.models import Airport

logger = logging.getLogger(__name__)

FIELD_COUNT = 14
_NULL_TOKEN = "\\N"

# Records must fit the airports table: signed 32-bit integers and the
# declared text column widths.
_INT_MIN, _INT_MAX = -(2**31), 2**31 - 1
_TEXT_LIMITS = {
    column.name: column.type.length
    for column in Airport.__table__.columns
    if isinstance(column.type, String) and column.name not in ("iata", "icao")
}


def split_csv_line(line: str) -> list[str]:
    """Split one CSV line on commas that are outside double quotes."""
    fields: list[str] = []
    current: list[str] = []
    in_quotes = False

    for char in line:
        if char == '"':
            in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            fields.append("".join(current))
            current = []
        else:
            current.append(char)

    fields.append("".join(current))
    return fields


def clean_field(field: str) -> str:
    return field.strip().strip('"').strip()


def _to_int(value: str) -> int:
    try:
        return int(value)
    except ValueError:
        pass
    number = _to_float(value)
    return int(number)


def _to_float(value: str) -> float:
    try:
        number = float(value)
    except ValueError:
        return 0.0
    return number if math.isfinite(number) else 0.0


def _code(value: str, length: int) -> str | None:
    # Anything that is not a code of the expected length counts as absent.
    if value == _NULL_TOKEN or len(value) != length:
        return None
    return value.upper()


def parse_airport_line(line: str) -> dict | None:
    """Parse one feed line into an airport record, or *None* if unusable."""
    fields = [clean_field(f) for f in split_csv_line(line)]
    if len(fields) < FIELD_COUNT:
        return None

    record = {
        "id": _to_int(fields[0]),
        "name": fields[1],
        "city": fields[2],
        "country": fields[3],
        "iata": _code(fields[4], 3),
        "icao": _code(fields[5], 4),
        "latitude": _to_float(fields[6]),
        "longitude": _to_float(fields[7]),
        "altitude": _to_int(fields[8]),
        "timezone": _to_float(fields[9]),
        "dst": fields[10],
        "tz": fields[11],
        "type": fields[12],
        "source": fields[13],
    }
    if not 0 < record["id"] <= _INT_MAX:
        return None
    if not _INT_MIN <= record["altitude"] <= _INT_MAX:
        return None
    if not (record["name"] and record["city"] and record["country"]):
        return None
    if any(len(record[name]) > limit for name, limit in _TEXT_LIMITS.items()):
        return None
    return record


def parse_airports(text: str) -> list[dict]:
    """Parse a whole feed, skipping malformed lines and duplicate ids."""
    airports: list[dict] = []
    seen: set[int] = set()
    skipped = 0

    for line_no, line in enumerate(text.splitlines(), start=1):
        if not line.strip():
            continue
        record = parse_airport_line(line)
        if record is None:
            skipped += 1
            logger.warning("Skipping malformed line %d: %.120s", line_no, line)
            continue
        if record["id"] in seen:
            skipped += 1
            logger.warning(
                "Skipping duplicate airport id %d on line %d", record["id"], line_no
            )
            continue
        seen.add(record["id"])
        airports.append(record)

    logger.info("Parsed %d airports (%d lines skipped)", len(airports), skipped)
    return airports
