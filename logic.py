import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional

from database import ComponentLibraryDB
from errors import LibraryError
from forms import normalize_component
from models import CATEGORIES, Component, User

logger = logging.getLogger(__name__)

RECENT_DAYS = 30
LIBRARY_FORMAT = "Component Library"
LIBRARY_VERSION = "1.0"

PACKAGE_CLASSES = {
    "smd": ("smd", "sot", "sop", "soic", "qfn", "bga", "lga", "qfp", "0402", "0603", "0805", "1206"),
    "through-hole": ("dip", "through", "radial", "axial", "to-", "do-"),
    "bga": ("bga",),
    "qfn": ("qfn", "dfn"),
}


def package_matches(package: str, package_class: str) -> bool:
    """
    Check whether a package name belongs to a package class.

    Unknown classes are treated as a plain substring of the package name.
    """
    pkg = package.lower()
    needles = PACKAGE_CLASSES.get(package_class, (package_class.lower(),))
    return any(needle in pkg for needle in needles)


def _matches_query(component: Component, term: str) -> bool:
    return (
        term in component.name.lower()
        or term in component.description.lower()
        or term in component.manufacturer.lower()
        or any(term in tag.lower() for tag in component.tags)
    )


def search_components(components: Iterable[Component], query: str = "",
                      category: str = "all", packages: Optional[List[str]] = None,
                      favorites: bool = False, recent: bool = False) -> List[Component]:
    """
    Filter components in memory.

    Args:
        components: Components to filter (usually store.get_components())
        query: Case-insensitive text matched against name, description,
            manufacturer and tags
        category: Category key, or 'all'
        packages: Package classes (see PACKAGE_CLASSES); a component must
            match at least one. None or empty disables the filter.
        favorites: Keep only favorites
        recent: Keep only components created in the last RECENT_DAYS days

    Returns:
        Matching components in their original order
    """
    result = list(components)

    if query:
        term = query.lower()
        result = [c for c in result if _matches_query(c, term)]

    if category and category != "all":
        result = [c for c in result if c.category == category]

    if packages:
        result = [c for c in result if any(package_matches(c.package, p) for p in packages)]

    if favorites:
        result = [c for c in result if c.is_favorite]

    if recent:
        cutoff = (datetime.now(timezone.utc) - timedelta(days=RECENT_DAYS)).isoformat()
        result = [c for c in result if c.created_at > cutoff]

    return result


SORT_KEYS = {
    "name": (lambda c: c.name.lower(), False),
    "category": (lambda c: c.category, False),
    "package": (lambda c: c.package.lower(), False),
    "date": (lambda c: c.created_at, True),
    "usage": (lambda c: c.usage_count, True),
}


def sort_components(components: Iterable[Component], key: str = "name") -> List[Component]:
    """Sort by name, category, package, date (newest first) or usage (most used first)."""
    if key not in SORT_KEYS:
        return list(components)
    key_func, reverse = SORT_KEYS[key]
    return sorted(components, key=key_func, reverse=reverse)


def get_category_counts(components: Iterable[Component]) -> Dict[str, int]:
    """Count components per category, plus an 'all' total."""
    components = list(components)
    counts = {"all": len(components)}
    for category in CATEGORIES:
        counts[category] = sum(1 for c in components if c.category == category)
    return counts


def export_library(components: Iterable[Component], user: Optional[User]) -> Dict[str, Any]:
    """
    Build a JSON-ready export of the components owned by a user.

    Args:
        components: All components in the library
        user: Owner whose components are exported

    Returns:
        Dictionary with format, version, export time, user name and components
    """
    user_id = user.id if user else None
    return {
        "format": LIBRARY_FORMAT,
        "version": LIBRARY_VERSION,
        "exported_at": datetime.now(timezone.utc).isoformat(),
        "user": user.username if user else None,
        "components": [c.to_dict() for c in components if c.user_id == user_id],
    }


def import_library(db: ComponentLibraryDB, data: Dict[str, Any], user_id: Optional[str]) -> Dict[str, Any]:
    """
    Add every component of an export to the library under a new id.

    Args:
        db: Target store
        data: Parsed export document
        user_id: Owner of the imported components

    Returns:
        Dictionary with 'imported' and 'skipped' counts and 'errors' messages

    Raises:
        ValueError: If the document has no components list
    """
    components = data.get("components") if isinstance(data, dict) else None
    if not isinstance(components, list):
        raise ValueError("Invalid library format")

    results = {"imported": 0, "skipped": 0, "errors": []}
    for record in components:
        name = record.get("name", "?") if isinstance(record, dict) else repr(record)
        try:
            db.add_component(normalize_component(record), user_id)
            results["imported"] += 1
        except Exception as e:
            logger.warning("Skipping imported component %s: %s", name, e,
                           exc_info=not isinstance(e, LibraryError))
            results["errors"].append(f"{name}: {e}")
            results["skipped"] += 1

    return results
