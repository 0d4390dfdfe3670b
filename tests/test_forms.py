"""Tests for form collection and validation."""

import pytest

from errors import ValidationError
from forms import (
    ComponentForm,
    SpecificationEditor,
    SpecRow,
    collect_component,
    collect_specifications,
    normalize_component,
    parse_tags,
    validate_component,
)


# ── Tags ──


class TestParseTags:
    def test_drops_empty_entries_and_trims(self):
        assert parse_tags("a, ,b ,") == ["a", "b"]

    def test_preserves_order(self):
        assert parse_tags("zeta, alpha, mid") == ["zeta", "alpha", "mid"]

    def test_empty_input(self):
        assert parse_tags("") == []
        assert parse_tags(" , ,") == []


# ── Specification rows ──


class TestCollectSpecifications:
    def test_keeps_complete_row_and_drops_empty_row(self):
        rows = [SpecRow("Voltage", "5", "V"), SpecRow()]
        assert collect_specifications(rows) == [
            {"parameter": "Voltage", "value": "5", "unit": "V"}
        ]

    def test_row_needs_parameter_and_value(self):
        rows = [
            SpecRow("Voltage", "", "V"),
            SpecRow("", "5", "V"),
            SpecRow("  ", " ", "V"),
            SpecRow(" Current ", " 2 ", ""),
        ]
        assert collect_specifications(rows) == [
            {"parameter": "Current", "value": "2", "unit": ""}
        ]


class TestSpecificationEditor:
    def test_starts_with_one_blank_row(self):
        editor = SpecificationEditor()
        assert len(editor) == 1
        assert editor.rows[0] == SpecRow()

    def test_cannot_remove_last_row(self):
        editor = SpecificationEditor()
        assert editor.remove_row(0) is False
        assert len(editor) == 1

    def test_add_and_remove(self):
        editor = SpecificationEditor()
        editor.add_row("Voltage", "5", "V")
        assert len(editor) == 2
        assert editor.remove_row(0) is True
        assert editor.rows == [SpecRow("Voltage", "5", "V")]
        assert editor.remove_row(0) is False

    def test_reset(self):
        editor = SpecificationEditor()
        editor.add_row("a", "b")
        editor.reset()
        assert editor.rows == [SpecRow()]


# ── Whole form ──


def test_collect_component_trims_fields():
    form = ComponentForm(
        name="  LM7805 ", category="voltage-regulators", package=" TO-220 ",
        value=" 5V ", description=" regulator ", manufacturer=" ST ",
        datasheet=" http://x ", tags="ldo, ,linear",
    )
    form.specifications.rows[0] = SpecRow("Voltage", "5", "V")
    form.specifications.add_row()

    record = collect_component(form)

    assert record == {
        "name": "LM7805",
        "category": "voltage-regulators",
        "package": "TO-220",
        "value": "5V",
        "description": "regulator",
        "manufacturer": "ST",
        "datasheet": "http://x",
        "tags": ["ldo", "linear"],
        "specifications": [{"parameter": "Voltage", "value": "5", "unit": "V"}],
    }


def test_form_reset_clears_everything():
    form = ComponentForm(name="x", category="logic", tags="a")
    form.specifications.add_row("p", "v")
    form.reset()
    assert form.name == "" and form.category == "" and form.tags == ""
    assert len(form.specifications) == 1


class TestValidateComponent:
    def test_name_required(self):
        with pytest.raises(ValidationError, match="Component name is required"):
            validate_component({"name": "", "category": "logic"})

    def test_category_required(self):
        with pytest.raises(ValidationError, match="Category is required"):
            validate_component({"name": "74HC00", "category": ""})

    def test_unknown_category(self):
        with pytest.raises(ValidationError, match="Unknown category"):
            validate_component({"name": "74HC00", "category": "widgets"})

    def test_valid_record(self):
        validate_component({"name": "74HC00", "category": "logic"})


# ── Normalizing records from other sources ──


class TestNormalizeComponent:
    def test_matches_form_shape(self):
        record = normalize_component({
            "name": " 7805 ",
            "category": "voltage-regulators",
            "tags": ["a", "", " b "],
            "specifications": [
                {"parameter": "Vout", "value": "5", "unit": "V"},
                {"parameter": "", "value": "x"},
                {"parameter": "Iout", "value": " 1 ", "unit": None},
            ],
            "usage_count": 4,
        })
        assert record["name"] == "7805"
        assert record["package"] == ""
        assert record["tags"] == ["a", "b"]
        assert record["specifications"] == [
            {"parameter": "Vout", "value": "5", "unit": "V"},
            {"parameter": "Iout", "value": "1", "unit": ""},
        ]
        assert "usage_count" not in record

    def test_comma_string_tags_are_split(self):
        record = normalize_component({"name": "x", "category": "logic", "tags": "a, ,b ,"})
        assert record["tags"] == ["a", "b"]

    @pytest.mark.parametrize("record, message", [
        ({"name": "", "category": "logic"}, "Component name is required"),
        ({"name": "x", "category": ""}, "Category is required"),
        ({"name": "x", "category": "widgets"}, "Unknown category"),
        ({"name": 5, "category": "logic"}, "must be text"),
        ({"name": "x", "category": "logic", "tags": [1]}, "Tag must be text"),
        ({"name": "x", "category": "logic", "tags": ["a,b"]}, "may not contain a comma"),
        ({"name": "x", "category": "logic", "tags": 3}, "list of text"),
        ({"name": "x", "category": "logic", "specifications": ["oops"]}, "must be a mapping"),
        ({"name": "x", "category": "logic", "specifications": "foo"}, "list of rows"),
        ({"name": "x", "category": "logic", "specifications": [{"parameter": 1, "value": "2"}]},
         "must be text"),
        ("garbage", "Not a component record"),
    ])
    def test_rejects_invalid_records(self, record, message):
        with pytest.raises(ValidationError, match=message):
            normalize_component(record)
