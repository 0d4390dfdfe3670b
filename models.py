from dataclasses import dataclass, field
from typing import List, Optional

# Fixed category set offered by the entry form.
CATEGORIES = {
    "resistors": "Resistors",
    "capacitors": "Capacitors",
    "inductors": "Inductors",
    "semiconductors": "Semiconductors",
    "connectors": "Connectors",
    "crystals": "Crystals & Oscillators",
    "mechanical": "Mechanical",
    "microcontrollers": "Microcontrollers",
    "op-amps": "Operational Amplifiers",
    "diodes": "Diodes",
    "transistors": "Transistors",
    "voltage-regulators": "Voltage Regulators",
    "sensors": "Sensors",
    "logic": "Logic ICs",
    "custom": "Custom Components",
}


@dataclass
class Specification:
    """
    One parameter/value/unit triple describing a property of a component.

    Attributes:
        parameter: Property name (e.g., 'Supply Voltage')
        value: Property value as entered (e.g., '3-32')
        unit: Optional unit (e.g., 'V')
    """
    parameter: str
    value: str
    unit: str = ""

    def to_dict(self) -> dict:
        return {"parameter": self.parameter, "value": self.value, "unit": self.unit}


@dataclass
class Component:
    """
    Dataclass representing one catalog entry of the component library.

    Attributes:
        id: Unique identifier ('comp_<hex>')
        name: Component name (e.g., 'ATmega328P')
        category: Key of CATEGORIES (e.g., 'microcontrollers')
        package: Physical package (e.g., 'TQFP-32')
        value: Value or rating (e.g., '10k', 'ATmega328P-AU')
        description: Free-text description
        manufacturer: Manufacturer name
        datasheet: Datasheet URL
        tags: Ordered list of tags
        specifications: Ordered list of Specification rows
        user_id: Owner of the record
        created_at: ISO timestamp of creation
        updated_at: ISO timestamp of last modification
        usage_count: How many times the part was used
        is_favorite: Favorite flag
    """
    id: Optional[str] = None
    name: str = ""
    category: str = ""
    package: str = ""
    value: str = ""
    description: str = ""
    manufacturer: str = ""
    datasheet: str = ""
    tags: List[str] = field(default_factory=list)
    specifications: List[Specification] = field(default_factory=list)
    user_id: Optional[str] = None
    created_at: str = ""
    updated_at: str = ""
    usage_count: int = 0
    is_favorite: bool = False

    @property
    def category_label(self) -> str:
        return CATEGORIES.get(self.category, self.category)

    def to_dict(self) -> dict:
        """Plain record suitable for JSON export."""
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "package": self.package,
            "value": self.value,
            "description": self.description,
            "manufacturer": self.manufacturer,
            "datasheet": self.datasheet,
            "tags": list(self.tags),
            "specifications": [spec.to_dict() for spec in self.specifications],
            "user_id": self.user_id,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "usage_count": self.usage_count,
            "is_favorite": self.is_favorite,
        }


@dataclass
class User:
    """
    Dataclass representing a registered library user.

    Attributes:
        id: Unique identifier ('user_<hex>')
        email: Login email
        username: Normalized username
        display_name: Name shown in the interface
        created_at: ISO timestamp of registration
    """
    id: str = ""
    email: str = ""
    username: str = ""
    display_name: str = ""
    created_at: str = ""

    @property
    def name(self) -> str:
        return self.display_name or self.username
