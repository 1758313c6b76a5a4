import csv
import io
import json
import re

from alumni_api.utils.export import render_csv, render_json, export_filename


def test_render_csv_header_and_blank_nulls():
    rows = [
        {"id": "1", "email": "a@example.com", "phone": None},
        {"id": "2", "email": "b@example.com", "phone": "+252611000001", "extra": "ignored"},
    ]

    content = render_csv(rows, ["id", "email", "phone"])
    parsed = list(csv.DictReader(io.StringIO(content)))

    assert content.splitlines()[0] == "id,email,phone"
    assert parsed[0]["phone"] == ""
    assert parsed[1]["phone"] == "+252611000001"
    assert "extra" not in parsed[1]


def test_render_csv_quotes_commas():
    content = render_csv([{"title": "Gala, 2025"}], ["title"])

    assert content.splitlines()[1] == '"Gala, 2025"'


def test_render_csv_empty():
    assert render_csv([], ["id", "email"]).strip() == "id,email"


def test_render_json():
    assert json.loads(render_json([{"amount": 25.0}])) == [{"amount": 25.0}]


def test_export_filename():
    assert re.fullmatch(r"events_export_\d{8}_\d{6}\.csv", export_filename("events", "csv"))
