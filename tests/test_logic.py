"""Tests for search, sort and library import/export."""

import pytest

from logic import (
    export_library,
    get_category_counts,
    import_library,
    package_matches,
    search_components,
    sort_components,
)
from models import Component


@pytest.fixture
def parts():
    return [
        Component(id="1", name="ATmega328P", category="microcontrollers", package="TQFP-32",
                  manufacturer="Microchip", tags=["avr"], created_at="2026-10-01T00:00:00+00:00",
                  usage_count=3),
        Component(id="2", name="1N4007", category="diodes", package="DO-41",
                  description="Rectifier", tags=["silicon"], created_at="2020-01-01T00:00:00+00:00",
                  usage_count=7, is_favorite=True),
        Component(id="3", name="ESP32", category="microcontrollers", package="Module",
                  manufacturer="Espressif", tags=["wifi"], created_at="2026-10-10T00:00:00+00:00"),
    ]


@pytest.mark.parametrize("package, package_class, expected", [
    ("SOIC-8", "smd", True),
    ("QFN-20", "qfn", True),
    ("DFN-8", "qfn", True),
    ("DIP-8", "through-hole", True),
    ("TO-92", "through-hole", True),
    ("DIP-8", "smd", False),
    ("Module", "module", True),
    ("BGA-256", "bga", True),
])
def test_package_matches(package, package_class, expected):
    assert package_matches(package, package_class) is expected


def test_search_text_matches_name_description_manufacturer_tags(parts):
    assert [c.id for c in search_components(parts, query="atmega")] == ["1"]
    assert [c.id for c in search_components(parts, query="RECTIFIER")] == ["2"]
    assert [c.id for c in search_components(parts, query="espressif")] == ["3"]
    assert [c.id for c in search_components(parts, query="wifi")] == ["3"]


def test_search_filters(parts):
    assert [c.id for c in search_components(parts, category="microcontrollers")] == ["1", "3"]
    assert [c.id for c in search_components(parts, category="all")] == ["1", "2", "3"]
    assert [c.id for c in search_components(parts, packages=["through-hole"])] == ["2"]
    assert [c.id for c in search_components(parts, favorites=True)] == ["2"]
    assert "2" not in [c.id for c in search_components(parts, recent=True)]


def test_sort_components(parts):
    assert [c.id for c in sort_components(parts, "name")] == ["2", "1", "3"]
    assert [c.id for c in sort_components(parts, "date")] == ["3", "1", "2"]
    assert [c.id for c in sort_components(parts, "usage")] == ["2", "1", "3"]
    assert [c.id for c in sort_components(parts, "bogus")] == ["1", "2", "3"]


def test_category_counts(parts):
    counts = get_category_counts(parts)
    assert counts["all"] == 3
    assert counts["microcontrollers"] == 2
    assert counts["diodes"] == 1
    assert counts["resistors"] == 0


def test_export_only_own_components(store, auth, user, record):
    store.add_component(record, user.id)
    store.add_component(dict(record, name="Other"), auth.demo_user_id())

    data = export_library(store.get_components(), user)

    assert data["format"] == "Component Library"
    assert data["user"] == user.username
    assert [c["name"] for c in data["components"]] == ["NE555"]
    assert data["components"][0]["specifications"][0]["unit"] == "V"


def test_import_library(store, user, record):
    data = {"components": [
        dict(record, id="comp_old", user_id="someone", created_at="x"),
        "garbage",
    ]}
    results = import_library(store, data, user.id)

    assert results["imported"] == 1
    assert results["skipped"] == 1
    [component] = store.get_components()
    assert component.id != "comp_old"
    assert component.user_id == user.id


def test_import_records_store_errors(store, record):
    results = import_library(store, {"components": [record]}, None)
    assert results == {
        "imported": 0,
        "skipped": 1,
        "errors": ["NE555: User must be logged in to add components"],
    }


def test_import_invalid_format(store, user):
    with pytest.raises(ValueError, match="Invalid library format"):
        import_library(store, {"items": []}, user.id)


def test_import_continues_past_malformed_record(store, user, record):
    data = {"components": [
        record,
        {"name": "B", "category": "logic", "specifications": ["oops"]},
        dict(record, name="NE556"),
    ]}
    results = import_library(store, data, user.id)

    assert results["imported"] == 2
    assert results["skipped"] == 1
    assert results["errors"][0].startswith("B: Specification row must be a mapping")
    assert [c.name for c in store.get_components()] == ["NE555", "NE556"]


@pytest.mark.parametrize("bad, message", [
    ({"name": "", "category": ""}, "Component name is required"),
    ({"name": "X", "category": "widgets"}, "Unknown category"),
    ({"name": "X", "category": "logic", "tags": ["a,b"]}, "comma"),
    ({"name": "X", "category": "logic", "tags": 7}, "Tags must be a list"),
    ({"name": ["X"], "category": "logic"}, "must be text"),
])
def test_import_skips_invalid_records(store, user, bad, message):
    results = import_library(store, {"components": [bad]}, user.id)
    assert results["imported"] == 0
    assert results["skipped"] == 1
    assert message in results["errors"][0]
    assert store.count_components() == 0


def test_import_normalizes_records(store, user):
    data = {"components": [{
        "name": " 74HC00 ",
        "category": "logic",
        "tags": ["a", "", " b "],
        "specifications": [
            {"parameter": "Gates", "value": "4", "unit": None},
            {"parameter": "", "value": "dropped", "unit": "V"},
        ],
    }]}
    assert import_library(store, data, user.id)["imported"] == 1

    [component] = store.get_components()
    assert component.name == "74HC00"
    assert component.tags == ["a", "b"]
    assert [s.to_dict() for s in component.specifications] == [
        {"parameter": "Gates", "value": "4", "unit": ""}
    ]
