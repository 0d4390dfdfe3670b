import logging
import os
import shlex
from typing import Callable, List

from prompt_toolkit import PromptSession
from prompt_toolkit.history import InMemoryHistory
from tabulate import tabulate

from database import ComponentLibraryDB
from errors import LibraryError
from forms import ComponentForm, parse_tags
from library_app import (
    LibraryContext, Notifier, current_user_label, delete_component,
    edit_component, export_library_file, import_library_file,
    initialize_library_app, save_component, show_component_details,
    toggle_favorite,
)
from logic import SORT_KEYS, get_category_counts, search_components, sort_components
from models import CATEGORIES, Component
from strings import FIELDS, HELP_TEXT, SPEC_PROMPT

logger = logging.getLogger(__name__)

VIEW_MODES = ("all", "favorites", "recent")


class LibraryView:
    """
    Terminal renderer of the component list.

    Filter and sort state lives here; render_components() redraws the
    list from the store every time it is called.
    """

    def __init__(self, store: ComponentLibraryDB, out: Callable[[str], None] = print):
        self.store = store
        self.out = out
        self.query = ""
        self.category = "all"
        self.package_filters: List[str] = []
        self.mode = "all"
        self.sort = "name"

    def reset_filters(self) -> None:
        self.query = ""
        self.category = "all"
        self.package_filters = []
        self.mode = "all"
        self.sort = "name"

    def visible_components(self) -> List[Component]:
        components = search_components(
            self.store.get_components(),
            query=self.query,
            category=self.category,
            packages=self.package_filters,
            favorites=self.mode == "favorites",
            recent=self.mode == "recent",
        )
        return sort_components(components, self.sort)

    def render_components(self) -> None:
        components = self.visible_components()
        if not components:
            self.out("No components found.")
            return
        table = [[
            c.id, "*" if c.is_favorite else "", c.name, c.category_label,
            c.package, c.value, c.manufacturer, ", ".join(c.tags[:3])
        ] for c in components]
        headers = ["ID", "Fav", "Name", "Category", "Package", "Value", "Manufacturer", "Tags"]
        self.out(tabulate(table, headers=headers, tablefmt="github"))


def render_details(component: Component, out: Callable[[str], None] = print) -> None:
    table = [
        ["Name", component.name],
        ["Category", component.category_label],
        ["Package", component.package],
        ["Value", component.value],
        ["Manufacturer", component.manufacturer],
        ["Datasheet", component.datasheet],
        ["Description", component.description],
        ["Tags", ", ".join(component.tags)],
        ["Used", component.usage_count],
    ]
    out(tabulate(table, tablefmt="github"))
    if component.specifications:
        rows = [[s.parameter, s.value, s.unit] for s in component.specifications]
        out(tabulate(rows, headers=["Parameter", "Value", "Unit"], tablefmt="github"))


def fill_form(form: ComponentForm, ask: Callable[[str], str]) -> None:
    """Read the entry form field by field, then the specification rows."""
    form.name = ask("Name: ")
    form.category = ask(f"Category ({', '.join(CATEGORIES)}): ")
    form.package = ask("Package: ")
    form.value = ask("Value: ")
    form.description = ask("Description: ")
    form.manufacturer = ask("Manufacturer: ")
    form.datasheet = ask("Datasheet URL: ")
    form.tags = ask("Tags (comma separated): ")

    print(SPEC_PROMPT)
    editor = form.specifications
    while True:
        line = ask("  spec: ").strip()
        if not line:
            break
        if line == "-":
            if not editor.remove_row(len(editor) - 1):
                print("At least one specification row is required.")
            continue
        parts = [part.strip() for part in line.split(";")] + ["", ""]
        blank = editor.rows[-1]
        if not (blank.parameter or blank.value or blank.unit):
            blank.parameter, blank.value, blank.unit = parts[:3]
        else:
            editor.add_row(*parts[:3])


def handle_command(ctx: LibraryContext, command: str, ask: Callable[[str], str] = input):
    try:
        tokens = shlex.split(command)
        if not tokens:
            return

        cmd = tokens[0].lower()
        view = ctx.view

        if cmd in ("help", "h"):
            print(HELP_TEXT)

        elif cmd == "f":
            print("Fields:")
            for field in FIELDS:
                print(f"- {field}")

        elif cmd == "c":
            counts = get_category_counts(ctx.store.get_components())
            table = [["all", "All", counts["all"]]]
            table += [[key, label, counts[key]] for key, label in CATEGORIES.items()]
            print(tabulate(table, headers=["Key", "Category", "Count"], tablefmt="github"))

        elif cmd == "l":
            view.render_components()

        elif cmd == "s":
            # a flag given without a value parses as True
            args = {k: v for k, v in parse_args(tokens[1:]).items() if v is not True}
            if not args:
                view.reset_filters()
            else:
                sort = args.get("-o", view.sort)
                mode = args.get("-r", view.mode)
                category = args.get("-c", view.category)
                if sort not in SORT_KEYS:
                    print(f"Unknown sort '{sort}'. Use one of: {', '.join(SORT_KEYS)}")
                    return
                if mode not in VIEW_MODES:
                    print(f"Unknown mode '{mode}'. Use one of: {', '.join(VIEW_MODES)}")
                    return
                if category != "all" and category not in CATEGORIES:
                    print(f"Unknown category '{category}'.")
                    return
                view.query = args.get("-v", view.query)
                view.category = category
                view.sort = sort
                view.mode = mode
                if "-p" in args:
                    view.package_filters = [p for p in parse_tags(args["-p"]) if p]
            view.render_components()

        elif cmd == "a":
            form = ComponentForm()
            fill_form(form, ask)
            component = save_component(ctx, form)
            if component:
                print(f"Component added with ID: {component.id}")

        elif cmd == "info":
            args = parse_args(tokens[1:])
            component = show_component_details(ctx, args.get("-id"))
            if component:
                render_details(component)

        elif cmd == "u":
            args = parse_args(tokens[1:])
            field = args.get("-f")
            value = args.get("-v", "")
            if field == "specifications":
                print("Specifications cannot be edited with 'u'; re-add the component with 'a'.")
                return
            if field == "tags":
                value = parse_tags(value)
            if edit_component(ctx, args.get("-id"), {field: value}):
                print("Updated.")

        elif cmd == "d":
            args = parse_args(tokens[1:])
            comp_id = args.get("-id")
            confirm = ask(f"Delete component {comp_id}? [y/N]: ").strip().lower()
            if confirm != 'y':
                print("Cancelled.")
                return
            print("Deleted." if delete_component(ctx, comp_id) else "Not found.")

        elif cmd == "fav":
            args = parse_args(tokens[1:])
            state = toggle_favorite(ctx, args.get("-id"))
            if state is not None:
                print("Marked as favorite." if state else "Removed from favorites.")

        elif cmd == "use":
            args = parse_args(tokens[1:])
            if not ctx.user_id:
                print("Log in to record component usage.")
                return
            print("Recorded." if ctx.store.record_usage(args.get("-id")) else "Component not found.")

        elif cmd == "ex":
            if len(tokens) < 2:
                print("Please specify a file name")
                return
            export_library_file(ctx, tokens[1])

        elif cmd == "im":
            if len(tokens) < 2:
                print("Please specify a file name")
                return
            import_library_file(ctx, tokens[1])

        elif cmd == "login":
            user = ctx.auth.login(ask("Email: ").strip(), ask("Password: "))
            print(f"Logged in as {user.name}.")

        elif cmd == "register":
            user = ctx.auth.register(
                ask("Email: ").strip(), ask("Username: ").strip(),
                ask("Password: "), ask("Confirm password: ")
            )
            print(f"Registered {user.username}. Use 'login' to sign in.")

        elif cmd == "logout":
            ctx.auth.logout()
            print("Logged out.")

        elif cmd == "who":
            print(current_user_label(ctx.auth))

        elif cmd == "x":
            print("Exiting.")
            return "exit"

        else:
            print("Unknown command. Type 'h' for help.")

    except LibraryError as e:
        logger.debug("Command %r failed", command, exc_info=True)
        print(f"Error: {str(e)}")
    except Exception as e:
        logger.error("Command %r failed", command, exc_info=True)
        print(f"Error: {str(e)}")


def parse_args(tokens: list) -> dict:
    args = {}
    i = 0
    while i < len(tokens):
        if tokens[i].startswith("-") and not tokens[i].startswith("--") and i + 1 < len(tokens):
            args[tokens[i]] = tokens[i + 1]
            i += 2
        else:
            args[tokens[i]] = True
            i += 1
    return args


def repl(db_path: str = "library.db") -> int:
    session = PromptSession(history=InMemoryHistory())
    try:
        ctx = initialize_library_app(db_path, LibraryView, Notifier())
    except LibraryError:
        return 1

    print("Component Library Shell. Type 'h' for help.")
    with ctx.store:
        while True:
            try:
                prompt = f"{current_user_label(ctx.auth)} >>> "
                lines = session.prompt(prompt).strip().splitlines()
                for line in lines:
                    line = line.strip()
                    if not line:
                        continue
                    if handle_command(ctx, line, ask=session.prompt) == "exit":
                        return 0
            except KeyboardInterrupt:
                continue
            except EOFError:
                break
    return 0


def main() -> int:
    logging.basicConfig(
        level=os.environ.get("LIBRARY_LOG_LEVEL", "WARNING").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return repl(os.environ.get("LIBRARY_DB", "library.db"))


if __name__ == "__main__":
    raise SystemExit(main())
