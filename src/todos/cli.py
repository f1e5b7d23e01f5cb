"""
todos - simple todo tool backed by a remote JSON store.

Usage:
    JSONSTORE_TOKEN=<store id> python -m todos.cli [ls]
    python -m todos.cli add "buy milk"
    python -m todos.cli complete 3
    python -m todos.cli delete 3
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from jsonstore import JsonStoreClient, JsonStoreError, NoValueForKey, StoreClient

from .models import Metadata, Todo, TodoCollection, filter_todos, iter_todos


logger = logging.getLogger(__name__)

LIST_COMMAND = "ls"
ADD_COMMAND = "add"
COMPLETE_COMMAND = "complete"
DELETE_COMMAND = "delete"
HELP_COMMAND = "help"

TODO_KEY = "todos"
METADATA_KEY = "metadata"
NEXT_ID_KEY = "metadata/nextId"


class CommandError(Exception):
    """User-facing command failure (bad arguments)."""


def _todo_key(todo_id: int) -> str:
    return f"{TODO_KEY}/{todo_id}"


def _parse_id(raw: Optional[str]) -> int:
    if raw is None:
        raise CommandError("No todo id provided")
    try:
        return int(raw)
    except ValueError:
        raise CommandError(f"Invalid todo id: '{raw}'") from None


def help_text() -> str:
    return "\n".join(
        [
            "todos - simple todo tool to demonstrate the jsonstore client",
            "",
            f"{LIST_COMMAND}       - lists all active todos",
            f"{ADD_COMMAND}      - adds a new todo",
            f"{COMPLETE_COMMAND} - marks a todo as completed",
            f"{DELETE_COMMAND}   - deletes a todo",
        ]
    )


class TodoApp:
    """Todo commands on top of a store client. Metadata is loaded once at start-up."""

    def __init__(self, store: StoreClient, metadata: Metadata) -> None:
        self.store = store
        self.metadata = metadata

    @classmethod
    def load(cls, store: StoreClient) -> "TodoApp":
        """Read `metadata`, seeding it when the store has none yet."""
        try:
            metadata = store.get(METADATA_KEY, Metadata)
        except NoValueForKey:
            logger.info("No todos metadata found, seeding defaults")
            metadata = Metadata()
            store.put(METADATA_KEY, metadata.model_dump(by_alias=True))
        return cls(store, metadata)

    def next_id(self) -> int:
        todo_id = self.metadata.next_id
        self.store.put(NEXT_ID_KEY, todo_id + 1)
        self.metadata.next_id = todo_id + 1
        return todo_id

    def list_todos(self) -> List[Todo]:
        try:
            collection = self.store.get(TODO_KEY, TodoCollection)
        except NoValueForKey:
            return []
        return filter_todos(iter_todos(collection))

    def add_todo(self, title: Optional[str]) -> str:
        if not title:
            raise CommandError("No todo title provided")
        todo = Todo.new(self.next_id(), title)
        self.store.post(_todo_key(todo.id), todo)
        return f"Todo: '{title}' added"

    def complete_todo(self, raw_id: Optional[str]) -> str:
        todo_id = _parse_id(raw_id)
        self.store.put(f"{_todo_key(todo_id)}/done", True)
        try:
            todo = self.store.get(_todo_key(todo_id), Todo)
        except JsonStoreError as e:
            logger.debug("Could not re-read todo %d: %s", todo_id, e)
            return f"Todo with id {todo_id} set to done"
        return f"'{todo.title}' set to done"

    def delete_todo(self, raw_id: Optional[str]) -> str:
        todo_id = _parse_id(raw_id)
        self.store.delete(_todo_key(todo_id))
        return "Todo deleted"


def _open_store() -> JsonStoreClient:
    return JsonStoreClient.from_env()


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="todos",
        description="Simple todo tool backed by a remote JSON store",
        epilog=help_text(),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("command", nargs="?", default=LIST_COMMAND, help="Sub command (default: ls)")
    parser.add_argument("arg", nargs="?", default=None, help="Todo title or id")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def run(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
    )

    if args.command == HELP_COMMAND:
        print(help_text())
        return 0

    try:
        store = _open_store()
    except (RuntimeError, ValueError) as e:
        print(f"No usable jsonstore configuration: {e}")
        return 1

    with store:
        try:
            app = TodoApp.load(store)
        except JsonStoreError as e:
            print(f"Could not get todos metadata. Error: {e}")
            return 1

        try:
            if args.command == LIST_COMMAND:
                for todo in app.list_todos():
                    print(todo)
            elif args.command == ADD_COMMAND:
                print(app.add_todo(args.arg))
            elif args.command == COMPLETE_COMMAND:
                print(app.complete_todo(args.arg))
            elif args.command == DELETE_COMMAND:
                print(app.delete_todo(args.arg))
            else:
                print(f"Unknown command: '{args.command}'")
                print(help_text())
                return 1
        except (CommandError, JsonStoreError) as e:
            print(e)
            return 1
    return 0


def main() -> None:
    sys.exit(run())


if __name__ == "__main__":
    main()
