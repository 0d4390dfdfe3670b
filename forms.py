"""
Form state and validation for the "add component" dialog.

The presentation layer fills a ComponentForm with raw strings; everything
below works on that plain object and never touches the terminal.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List

from errors import ValidationError
from models import CATEGORIES


@dataclass
class SpecRow:
    """One editable parameter/value/unit row."""
    parameter: str = ""
    value: str = ""
    unit: str = ""


class SpecificationEditor:
    """
    Ordered list of specification rows that never becomes empty.
    """

    def __init__(self):
        self.rows: List[SpecRow] = [SpecRow()]

    def __len__(self):
        return len(self.rows)

    def add_row(self, parameter: str = "", value: str = "", unit: str = "") -> SpecRow:
        row = SpecRow(parameter, value, unit)
        self.rows.append(row)
        return row

    def remove_row(self, index: int) -> bool:
        """
        Remove the row at index.

        Returns:
            False if only one row is left (it is kept), True if removed
        """
        if len(self.rows) <= 1:
            return False
        del self.rows[index]
        return True

    def reset(self) -> None:
        self.rows = [SpecRow()]


@dataclass
class ComponentForm:
    """Raw field values of the entry form, as typed by the user."""
    name: str = ""
    category: str = ""
    package: str = ""
    value: str = ""
    description: str = ""
    manufacturer: str = ""
    datasheet: str = ""
    tags: str = ""
    specifications: SpecificationEditor = field(default_factory=SpecificationEditor)

    def reset(self) -> None:
        """Clear every field and leave a single blank specification row."""
        for name in ("name", "category", "package", "value", "description",
                     "manufacturer", "datasheet", "tags"):
            setattr(self, name, "")
        self.specifications.reset()


def parse_tags(text: str) -> List[str]:
    """Split a comma-separated tag field, dropping empty entries and keeping order."""
    return [tag.strip() for tag in (text or "").split(",") if tag.strip()]


def collect_specifications(rows: Iterable[SpecRow]) -> List[Dict[str, str]]:
    """Keep rows whose parameter and value are both non-empty after trimming."""
    specifications = []
    for row in rows:
        parameter = (row.parameter or "").strip()
        value = (row.value or "").strip()
        unit = (row.unit or "").strip()
        if parameter and value:
            specifications.append({"parameter": parameter, "value": value, "unit": unit})
    return specifications


def collect_component(form: ComponentForm) -> Dict[str, Any]:
    """Turn the raw form into a trimmed component record."""
    return {
        "name": form.name.strip(),
        "category": form.category.strip(),
        "package": form.package.strip(),
        "value": form.value.strip(),
        "description": form.description.strip(),
        "manufacturer": form.manufacturer.strip(),
        "datasheet": form.datasheet.strip(),
        "tags": parse_tags(form.tags),
        "specifications": collect_specifications(form.specifications.rows),
    }


def validate_component(record: Dict[str, Any]) -> None:
    """
    Check the required fields of a collected record.

    Raises:
        ValidationError: If name or category is missing, or the category is unknown
    """
    if not record.get("name"):
        raise ValidationError("Component name is required")
    if not record.get("category"):
        raise ValidationError("Category is required")
    if record["category"] not in CATEGORIES:
        raise ValidationError(f"Unknown category: {record['category']}")


TEXT_FIELDS = ("name", "category", "package", "value", "description", "manufacturer", "datasheet")


def _text(record: Dict[str, Any], name: str) -> str:
    value = record.get(name)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError(f"Field '{name}' must be text")
    return value.strip()


def _normalize_tags(tags: Any) -> List[str]:
    if tags is None:
        return []
    if isinstance(tags, str):
        return parse_tags(tags)
    if not isinstance(tags, (list, tuple)):
        raise ValidationError("Tags must be a list of text")
    result = []
    for tag in tags:
        if not isinstance(tag, str):
            raise ValidationError(f"Tag must be text: {tag!r}")
        # tags are stored comma-joined
        if "," in tag:
            raise ValidationError(f"Tag may not contain a comma: {tag!r}")
        if tag.strip():
            result.append(tag.strip())
    return result


def _normalize_specifications(specs: Any) -> List[Dict[str, str]]:
    if specs is None:
        return []
    if not isinstance(specs, (list, tuple)):
        raise ValidationError("Specifications must be a list of rows")
    rows = []
    for spec in specs:
        if hasattr(spec, "to_dict"):
            spec = spec.to_dict()
        if not isinstance(spec, dict):
            raise ValidationError(f"Specification row must be a mapping: {spec!r}")
        values = [spec.get(key) or "" for key in ("parameter", "value", "unit")]
        if not all(isinstance(v, str) for v in values):
            raise ValidationError(f"Specification fields must be text: {spec!r}")
        rows.append(SpecRow(*values))
    return collect_specifications(rows)


def normalize_component(record: Dict[str, Any]) -> Dict[str, Any]:
    """
    Bring a record from any source (form, edit, import) to the shape the form produces.

    Text fields are trimmed, tags and specification rows are filtered the
    same way the form filters them, and the result is validated.

    Raises:
        ValidationError: If a field has the wrong type or the record is invalid
    """
    if not isinstance(record, dict):
        raise ValidationError(f"Not a component record: {record!r}")
    normalized = {name: _text(record, name) for name in TEXT_FIELDS}
    normalized["tags"] = _normalize_tags(record.get("tags"))
    normalized["specifications"] = _normalize_specifications(record.get("specifications"))
    validate_component(normalized)
    return normalized
