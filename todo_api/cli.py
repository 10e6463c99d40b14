#!/usr/bin/env python3
"""
Command line interface for the Todo API.

Subcommands:

``serve``
    Run the API with uvicorn.
``delete-many``
    Delete every todo/user whose field equals a value.
``delete-one``
    Delete the oldest todo/user whose field equals a value.
``find-one-and-delete``
    Delete a todo/user by id and print the removed document.

Examples::

    todo-api serve --port 3000
    todo-api delete-many todos --field text --value "Eat lunch"
    todo-api delete-one todos --field completed --value false
    todo-api find-one-and-delete users --id 58b85044d7c3acc0555f3162

The delete commands work directly on the datastore configured by
``DATABASE_URL``/``APP_ENV`` (or ``--db``).  Deleting a user also
removes that user's tokens and todos.
"""

import argparse
import json
import logging
import sys
from typing import Any, List, Optional

from todo_api.app.core.config import load_settings
from todo_api.app.core.db import COLLECTIONS, Database
from todo_api.app.core.errors import ApiError
from todo_api.app.core.logging_config import setup_logging

logger = logging.getLogger(__name__)


def _parse_value(raw: str) -> Any:
    """Interpret JSON literals (``true``, ``42``) and fall back to the raw string."""
    try:
        value = json.loads(raw)
    except ValueError:
        return raw
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float, str)) or value is None:
        return value
    return raw


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="todo-api", description="Todo API server and maintenance tools.")
    parser.add_argument("--db", help="Path to the SQLite database file. Defaults to the configured one.")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP server.")
    serve.add_argument("--host", help="Interface to bind. Defaults to HOST.")
    serve.add_argument("--port", type=int, help="Port to listen on. Defaults to PORT.")

    for name, help_text in (
        ("delete-many", "Delete all documents matching a field value."),
        ("delete-one", "Delete the first document matching a field value."),
    ):
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument("collection", choices=sorted(COLLECTIONS))
        cmd.add_argument("--field", required=True, help="Document field, e.g. text, completed, email.")
        cmd.add_argument("--value", required=True, help="Value to match. JSON literals are decoded.")

    find = sub.add_parser("find-one-and-delete", help="Delete a document by id and print it.")
    find.add_argument("collection", choices=sorted(COLLECTIONS))
    find.add_argument("--id", required=True, dest="record_id", help="24 character hex id.")
    return parser


def serve(host: str, port: int) -> None:
    import uvicorn

    uvicorn.run("todo_api.app.main:app", host=host, port=port, log_level="info")


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = load_settings()
    setup_logging(settings.log_level, settings.log_file or None)

    if args.command == "serve":
        serve(args.host or settings.host, args.port or settings.port)
        return 0

    database = Database(args.db or settings.database_url)
    try:
        database.open()
        if args.command == "delete-many":
            count = database.delete_many(args.collection, args.field, _parse_value(args.value))
            print(json.dumps({"deletedCount": count}))
        elif args.command == "delete-one":
            count = database.delete_one(args.collection, args.field, _parse_value(args.value))
            print(json.dumps({"deletedCount": count}))
        else:
            document = database.find_one_and_delete(args.collection, args.record_id)
            print(json.dumps({"value": document}, indent=2))
    except ApiError as exc:
        logger.error("%s failed: %s", args.command, exc.detail)
        return 1
    finally:
        database.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
