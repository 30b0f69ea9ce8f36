"""Tests for the OpenFlights CSV parser."""

from __future__ import annotations

import pytest

from airport_catalog_api.schemas.airports import AirportItem
from airport_catalog_api.services.openflights_parser import (
    parse_airport_line,
    parse_airports,
    split_csv_line,
)


def test_parses_full_record(heathrow_line):
    record = parse_airport_line(heathrow_line)

    assert record == {
        "id": 507,
        "name": "London Heathrow",
        "city": "London",
        "country": "United Kingdom",
        "iata": "LHR",
        "icao": "EGLL",
        "latitude": 51.4706,
        "longitude": -0.461941,
        "altitude": 83,
        "timezone": 0.0,
        "dst": "E",
        "tz": "Europe/London",
        "type": "airport",
        "source": "OurAirports",
    }


def test_null_token_means_absent_code(no_iata_line):
    record = parse_airport_line(no_iata_line)

    assert record is not None
    assert record["iata"] is None
    assert record["icao"] == "BIXX"
    assert AirportItem(**record).model_dump(mode="json")["iata"] is None


def test_commas_inside_quotes_do_not_split():
    fields = split_csv_line('1,"Name, With Comma","City",x')

    assert fields == ["1", '"Name, With Comma"', '"City"', "x"]


def test_lines_with_too_few_fields_are_skipped():
    assert parse_airport_line('1,"Only","Three"') is None


def test_unparseable_numbers_default_to_zero():
    line = (
        '42,"Field","Town","Chile","abc","scxx",'
        'north,nan,12.7,bad,"S","America/Santiago","airport","OurAirports"'
    )
    record = parse_airport_line(line)

    assert record is not None
    assert record["latitude"] == 0.0
    assert record["longitude"] == 0.0
    assert record["altitude"] == 12
    assert record["timezone"] == 0.0
    # Codes are stored uppercase
    assert record["iata"] == "ABC"
    assert record["icao"] == "SCXX"


def test_records_without_id_or_name_are_rejected(heathrow_line):
    assert parse_airport_line(heathrow_line.replace("507,", "x,", 1)) is None
    assert parse_airport_line(heathrow_line.replace('"London Heathrow"', '""')) is None


def test_parse_airports_skips_bad_lines_and_duplicate_ids(heathrow_line, no_iata_line):
    text = "\n".join(
        [
            heathrow_line,
            "",
            "garbage line",
            no_iata_line,
            heathrow_line.replace("London Heathrow", "Duplicate"),
        ]
    )

    airports = parse_airports(text)

    assert [a["id"] for a in airports] == [507, 9999]
    assert airports[0]["name"] == "London Heathrow"


def test_codes_of_the_wrong_length_are_absent(heathrow_line):
    line = heathrow_line.replace('"LHR","EGLL"', '"LHRX",""')

    record = parse_airport_line(line)

    assert record["iata"] is None
    assert record["icao"] is None


@pytest.mark.parametrize(
    ("old", "new"),
    [
        ('"London Heathrow"', f'"{"H" * 256}"'),
        ('"London","United Kingdom"', f'"London","{"K" * 256}"'),
        ('"E","Europe/London"', '"EUROPE-DST","Europe/London"'),
        ('"Europe/London"', f'"{"Z" * 65}"'),
        ('"airport"', f'"{"a" * 33}"'),
        ("507,", "2147483648,"),
        (",83,", ",99999999999,"),
    ],
)
def test_records_that_do_not_fit_the_table_are_rejected(heathrow_line, old, new):
    line = heathrow_line.replace(old, new, 1)
    assert line != heathrow_line

    assert parse_airport_line(line) is None
    valid = heathrow_line.replace("507,", "508,", 1)
    assert [a["id"] for a in parse_airports(f"{valid}\n{line}\n")] == [508]


def test_longest_values_that_fit_are_kept(heathrow_line):
    line = heathrow_line.replace('"London Heathrow"', f'"{"H" * 255}"').replace(
        "507,", "2147483647,", 1
    )

    record = parse_airport_line(line)

    assert record["id"] == 2**31 - 1
    assert len(record["name"]) == 255
