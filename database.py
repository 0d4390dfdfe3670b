import json
import logging
import sqlite3
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from errors import StoreError
from models import Component, Specification, User

logger = logging.getLogger(__name__)

COMPONENT_COLUMNS = (
    "id", "name", "category", "package", "value_rating", "description",
    "manufacturer", "datasheet_url", "tags", "specifications", "user_id",
    "created_at", "updated_at", "usage_count", "is_favorite",
)

# Component attribute -> column for fields that may be edited after creation
UPDATABLE_FIELDS = {
    "name": "name",
    "category": "category",
    "package": "package",
    "value": "value_rating",
    "description": "description",
    "manufacturer": "manufacturer",
    "datasheet": "datasheet_url",
    "tags": "tags",
    "specifications": "specifications",
    "is_favorite": "is_favorite",
}


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _encode_tags(tags) -> str:
    if isinstance(tags, (list, tuple)):
        if not all(isinstance(tag, str) and "," not in tag for tag in tags):
            raise StoreError(f"Tags must be text without commas: {tags!r}")
        return ",".join(tags)
    if tags is not None and not isinstance(tags, str):
        raise StoreError(f"Tags must be text: {tags!r}")
    return tags or ""


def _decode_tags(text: str) -> List[str]:
    return [tag.strip() for tag in text.split(",")] if text else []


def _encode_specs(specs) -> str:
    if specs is not None and not isinstance(specs, (list, tuple)):
        raise StoreError(f"Specifications must be a list of rows: {specs!r}")
    rows = []
    for spec in specs or []:
        if isinstance(spec, Specification):
            rows.append(spec.to_dict())
        elif isinstance(spec, dict):
            rows.append({
                "parameter": spec.get("parameter", ""),
                "value": spec.get("value", ""),
                "unit": spec.get("unit", ""),
            })
        else:
            raise StoreError(f"Specification row must be a mapping: {spec!r}")
    return json.dumps(rows)


def _decode_specs(text: str) -> List[Specification]:
    return [Specification(**row) for row in json.loads(text or "[]")]


def _row_to_component(row) -> Component:
    (cid, name, category, package, value, description, manufacturer,
     datasheet, tags, specs, user_id, created_at, updated_at,
     usage_count, is_favorite) = row
    try:
        decoded_tags = _decode_tags(tags)
        decoded_specs = _decode_specs(specs)
    except (ValueError, TypeError, AttributeError) as e:
        raise StoreError(f"Corrupt component record {cid}: {e}") from e
    return Component(
        id=cid, name=name, category=category, package=package or "",
        value=value or "", description=description or "",
        manufacturer=manufacturer or "", datasheet=datasheet or "",
        tags=decoded_tags, specifications=decoded_specs,
        user_id=user_id, created_at=created_at, updated_at=updated_at,
        usage_count=usage_count, is_favorite=bool(is_favorite),
    )


class ComponentLibraryDB:
    """
    SQLite store for the component library.

    Holds component records and the users that own them. Tags are stored
    comma-joined and specifications as a JSON array, and both are decoded
    back into lists when a Component is read.
    """

    def __init__(self, db_path: str = "library.db"):
        """
        Open the database and create tables if they don't exist.

        Args:
            db_path: Path to SQLite database file (':memory:' for a throwaway store)
        """
        try:
            self.conn = sqlite3.connect(db_path)
            self.conn.execute("PRAGMA foreign_keys = ON")
            self._create_tables()
        except sqlite3.Error as e:
            raise StoreError(f"Cannot open component library '{db_path}': {e}") from e
        self.db_path = db_path

    def _create_tables(self) -> None:
        """Create all required tables with proper schema and constraints."""
        self.conn.execute("""
        CREATE TABLE IF NOT EXISTS users (
            id TEXT PRIMARY KEY,
            email TEXT UNIQUE NOT NULL,
            username TEXT UNIQUE NOT NULL,
            display_name TEXT NOT NULL,
            password_hash TEXT NOT NULL,
            created_at TEXT NOT NULL,
            last_login TEXT
        )
        """)

        self.conn.execute("""
        CREATE TABLE IF NOT EXISTS components (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            category TEXT NOT NULL,
            package TEXT DEFAULT '',
            value_rating TEXT DEFAULT '',
            description TEXT DEFAULT '',
            manufacturer TEXT DEFAULT '',
            datasheet_url TEXT DEFAULT '',
            tags TEXT DEFAULT '',
            specifications TEXT DEFAULT '[]',
            user_id TEXT,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL,
            usage_count INTEGER DEFAULT 0 CHECK(usage_count >= 0),
            is_favorite INTEGER DEFAULT 0,
            FOREIGN KEY (user_id) REFERENCES users(id)
        )
        """)

        self.conn.execute("CREATE INDEX IF NOT EXISTS idx_components_category ON components(category)")
        self.conn.execute("CREATE INDEX IF NOT EXISTS idx_components_user ON components(user_id)")
        self.conn.commit()

    # ===== COMPONENT OPERATIONS =====
    def add_component(self, record: Dict[str, Any], user_id: Optional[str]) -> Component:
        """
        Persist a new component record owned by a user.

        Args:
            record: Plain component record (name, category, package, value,
                description, manufacturer, datasheet, tags, specifications)
            user_id: Owner of the new component

        Returns:
            The stored Component with its generated id and timestamps

        Raises:
            StoreError: If no user is given or the insert fails
        """
        if not user_id:
            raise StoreError("User must be logged in to add components")

        now = utc_now()
        component = Component(
            id=f"comp_{uuid.uuid4().hex}",
            name=record.get("name", ""),
            category=record.get("category", ""),
            package=record.get("package") or "",
            value=record.get("value") or "",
            description=record.get("description") or "",
            manufacturer=record.get("manufacturer") or "",
            datasheet=record.get("datasheet") or "",
            tags=_decode_tags(_encode_tags(record.get("tags"))),
            specifications=_decode_specs(_encode_specs(record.get("specifications"))),
            user_id=user_id,
            created_at=now,
            updated_at=now,
        )

        query = f"""
        INSERT INTO components ({', '.join(COMPONENT_COLUMNS)})
        VALUES ({', '.join('?' for _ in COMPONENT_COLUMNS)})
        """
        params = (
            component.id, component.name, component.category, component.package,
            component.value, component.description, component.manufacturer,
            component.datasheet, _encode_tags(component.tags),
            _encode_specs(component.specifications), component.user_id,
            component.created_at, component.updated_at, 0, 0,
        )
        try:
            self.conn.execute(query, params)
            self.conn.commit()
        except sqlite3.Error as e:
            self.conn.rollback()
            logger.error("Error adding component %r: %s", component.name, e)
            raise StoreError(f"Failed to add component: {e}") from e

        logger.debug("Added component %s (%s)", component.name, component.id)
        return component

    def get_component(self, component_id: str) -> Optional[Component]:
        """Retrieve a component by its ID."""
        cursor = self.conn.execute(
            f"SELECT {', '.join(COMPONENT_COLUMNS)} FROM components WHERE id = ?",
            (component_id,)
        )
        row = cursor.fetchone()
        return _row_to_component(row) if row else None

    def get_components(self) -> List[Component]:
        """Return every stored component ordered by name."""
        try:
            cursor = self.conn.execute(
                f"SELECT {', '.join(COMPONENT_COLUMNS)} FROM components ORDER BY name ASC"
            )
            return [_row_to_component(row) for row in cursor.fetchall()]
        except sqlite3.Error as e:
            raise StoreError(f"Failed to load components: {e}") from e

    def count_components(self) -> int:
        return self.conn.execute("SELECT COUNT(*) FROM components").fetchone()[0]

    def _get_owned(self, component_id: str, user_id: Optional[str]) -> Component:
        existing = self.get_component(component_id)
        if not existing or not user_id or existing.user_id != user_id:
            raise StoreError("Component not found or access denied")
        return existing

    def update_component(self, component_id: str, updates: Dict[str, Any],
                         user_id: Optional[str]) -> Component:
        """
        Update fields of a component owned by the given user.

        Args:
            component_id: Component to update
            updates: Attribute -> new value; unknown attributes are rejected
            user_id: Must be the owner of the component

        Returns:
            The updated Component

        Raises:
            StoreError: If the component is missing, owned by someone else,
                or an attribute cannot be updated
        """
        self._get_owned(component_id, user_id)

        assignments = []
        params = []
        for attr, value in updates.items():
            column = UPDATABLE_FIELDS.get(attr)
            if column is None:
                raise StoreError(f"Field '{attr}' cannot be updated")
            if attr == "tags":
                value = _encode_tags(value)
            elif attr == "specifications":
                value = _encode_specs(value)
            elif attr == "is_favorite":
                value = 1 if value else 0
            assignments.append(f"{column} = ?")
            params.append(value)

        assignments.append("updated_at = ?")
        params.append(utc_now())
        params.append(component_id)

        try:
            self.conn.execute(
                f"UPDATE components SET {', '.join(assignments)} WHERE id = ?",
                params
            )
            self.conn.commit()
        except sqlite3.Error as e:
            self.conn.rollback()
            raise StoreError(f"Failed to update component: {e}") from e

        return self.get_component(component_id)

    def delete_component(self, component_id: str, user_id: Optional[str]) -> bool:
        """
        Delete a component owned by the given user.

        Raises:
            StoreError: If the component is missing or owned by someone else
        """
        self._get_owned(component_id, user_id)
        cursor = self.conn.execute("DELETE FROM components WHERE id = ?", (component_id,))
        self.conn.commit()
        return cursor.rowcount > 0

    def toggle_favorite(self, component_id: str, user_id: Optional[str]) -> bool:
        """Flip the favorite flag and return the new state."""
        component = self._get_owned(component_id, user_id)
        updated = self.update_component(
            component_id, {"is_favorite": not component.is_favorite}, user_id
        )
        return updated.is_favorite

    def record_usage(self, component_id: str) -> bool:
        """Increment the usage counter of a component."""
        cursor = self.conn.execute(
            "UPDATE components SET usage_count = usage_count + 1 WHERE id = ?",
            (component_id,)
        )
        self.conn.commit()
        return cursor.rowcount > 0

    # ===== USER OPERATIONS =====
    def create_user(self, email: str, username: str, password_hash: str,
                    display_name: str = "") -> User:
        """
        Insert a new user.

        Raises:
            StoreError: If the email or username is already taken
        """
        user = User(
            id=f"user_{uuid.uuid4().hex}",
            email=email,
            username=username,
            display_name=display_name or username,
            created_at=utc_now(),
        )
        try:
            self.conn.execute(
                """INSERT INTO users (id, email, username, display_name, password_hash, created_at)
                VALUES (?, ?, ?, ?, ?, ?)""",
                (user.id, user.email, user.username, user.display_name,
                 password_hash, user.created_at)
            )
            self.conn.commit()
        except sqlite3.IntegrityError as e:
            self.conn.rollback()
            raise StoreError("A user with this email or username already exists") from e
        return user

    def get_user_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        """Return the user row (including password hash) as a dict."""
        cursor = self.conn.execute(
            "SELECT id, email, username, display_name, created_at, password_hash "
            "FROM users WHERE email = ?",
            (email,)
        )
        columns = [desc[0] for desc in cursor.description]
        row = cursor.fetchone()
        return dict(zip(columns, row)) if row else None

    def touch_login(self, user_id: str) -> None:
        self.conn.execute("UPDATE users SET last_login = ? WHERE id = ?", (utc_now(), user_id))
        self.conn.commit()

    def count_users(self) -> int:
        return self.conn.execute("SELECT COUNT(*) FROM users").fetchone()[0]

    def close(self) -> None:
        """Close the database connection."""
        self.conn.close()

    def __enter__(self):
        """Support context manager protocol."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Ensure connection is closed when exiting context."""
        self.close()
