"""
Application layer of the component library.

Every handler takes a LibraryContext built once by initialize_library_app()
and reports outcomes to the user through ctx.notifier.
"""
import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from auth import AuthManager
from database import ComponentLibraryDB
from errors import LibraryError, StoreError, ValidationError
from forms import ComponentForm, collect_component, normalize_component, validate_component
from logic import export_library, import_library
from models import Component
from sample_data import initialize_sample_data

logger = logging.getLogger(__name__)


class Notifier:
    """Blocking user-visible notification; prints to the terminal."""

    def alert(self, message: str) -> None:
        print(message)


@dataclass
class LibraryContext:
    """Handles to the collaborators, shared by every handler."""
    auth: AuthManager
    store: ComponentLibraryDB
    view: Any
    notifier: Notifier

    @property
    def user_id(self) -> Optional[str]:
        user = self.auth.current_user
        return user.id if user else None


def current_user_label(auth: AuthManager) -> str:
    user = auth.current_user
    return user.name if user else "Guest"


def initialize_library_app(db_path: str,
                           view_factory: Callable[[ComponentLibraryDB], Any],
                           notifier: Optional[Notifier] = None) -> LibraryContext:
    """
    Open the library, seed it with sample parts when empty, and draw it once.

    Args:
        db_path: SQLite file of the library
        view_factory: Builds the renderer from the store; the renderer must
            offer render_components()
        notifier: Where user-visible messages go (defaults to Notifier())

    Returns:
        The ready LibraryContext

    Raises:
        LibraryError: If any startup step fails; the user has been alerted
    """
    notifier = notifier or Notifier()
    store = None
    try:
        store = ComponentLibraryDB(db_path)
        auth = AuthManager(store)
        auth.initialize()
        logger.info("Library user: %s", current_user_label(auth))

        view = view_factory(store)
        ctx = LibraryContext(auth=auth, store=store, view=view, notifier=notifier)

        components = store.get_components()
        logger.info("Found %d components", len(components))
        if not components:
            owner = ctx.user_id or auth.demo_user_id()
            initialize_sample_data(store, owner)

        view.render_components()
        logger.info("Library app initialized")
        return ctx

    except LibraryError as e:
        logger.error("Failed to initialize library app: %s", e)
        notifier.alert(f"Failed to initialize library: {e}")
        if store is not None:
            store.close()
        raise


def save_component(ctx: LibraryContext, form: ComponentForm) -> Optional[Component]:
    """
    Validate the entry form and add the component to the store.

    On a validation failure the user is warned, the store is not called and
    the form keeps its values. On success the form is reset and the view
    redrawn.

    Returns:
        The stored Component, or None if nothing was saved
    """
    record = collect_component(form)
    try:
        validate_component(record)
    except ValidationError as e:
        ctx.notifier.alert(str(e))
        return None

    try:
        component = ctx.store.add_component(record, ctx.user_id)
    except LibraryError as e:
        logger.error("Error saving component: %s", e)
        ctx.notifier.alert(f"Failed to save component: {e}")
        return None

    # saved from here on; a refresh failure must not read as a failed save
    form.reset()
    try:
        ctx.view.render_components()
    except LibraryError as e:
        logger.error("Error refreshing component list: %s", e)
        ctx.notifier.alert(f"Component added, but the list could not be refreshed: {e}")
        return component

    ctx.notifier.alert("Component added successfully!")
    return component


def show_component_details(ctx: LibraryContext, component_id: str) -> Optional[Component]:
    component = ctx.store.get_component(component_id)
    if component is None:
        ctx.notifier.alert("Component not found")
    return component


def _normalize_updates(current: Component, updates: Dict[str, Any]) -> Dict[str, Any]:
    """Validate updates against the whole record; returns normalized values for the updated keys."""
    merged = current.to_dict()
    merged.update(updates)
    normalized = normalize_component(merged)
    return {key: normalized.get(key, value) for key, value in updates.items()}


def edit_component(ctx: LibraryContext, component_id: str,
                   updates: Dict[str, Any]) -> Optional[Component]:
    """Apply updates to a component owned by the current user."""
    try:
        current = ctx.store.get_component(component_id)
        if current is None or not ctx.user_id or current.user_id != ctx.user_id:
            raise StoreError("Component not found or access denied")
        component = ctx.store.update_component(
            component_id, _normalize_updates(current, updates), ctx.user_id
        )
    except LibraryError as e:
        logger.error("Error updating component %s: %s", component_id, e)
        ctx.notifier.alert(f"Failed to update component: {e}")
        return None
    ctx.view.render_components()
    return component


def delete_component(ctx: LibraryContext, component_id: str) -> bool:
    try:
        deleted = ctx.store.delete_component(component_id, ctx.user_id)
    except LibraryError as e:
        logger.error("Error deleting component %s: %s", component_id, e)
        ctx.notifier.alert(f"Failed to delete component: {e}")
        return False
    ctx.view.render_components()
    return deleted


def toggle_favorite(ctx: LibraryContext, component_id: str) -> Optional[bool]:
    try:
        state = ctx.store.toggle_favorite(component_id, ctx.user_id)
    except LibraryError as e:
        ctx.notifier.alert(f"Failed to update component: {e}")
        return None
    ctx.view.render_components()
    return state


def import_library_file(ctx: LibraryContext, path: str) -> Optional[Dict[str, Any]]:
    """Import a JSON library export as the current user."""
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.error("Cannot read library file %s: %s", path, e)
        ctx.notifier.alert("Invalid file format")
        return None

    try:
        results = import_library(ctx.store, data, ctx.user_id)
    except ValueError as e:
        ctx.notifier.alert(f"Import failed: {e}")
        return None

    ctx.notifier.alert(
        f"Import complete: {results['imported']} imported, {results['skipped']} skipped"
    )
    ctx.view.render_components()
    return results


def export_library_file(ctx: LibraryContext, path: str) -> Optional[Dict[str, Any]]:
    """Write the current user's components to a JSON file."""
    try:
        data = export_library(ctx.store.get_components(), ctx.auth.current_user)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
    except (OSError, LibraryError) as e:
        logger.error("Export to %s failed: %s", path, e)
        ctx.notifier.alert(f"Export failed: {e}")
        return None
    ctx.notifier.alert(f"Exported {len(data['components'])} components to {path}")
    return data
