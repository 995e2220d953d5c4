"""
VectorTable CLI Entrypoint

Commands:
    vectable create NAME --dimension D   Create a collection
    vectable drop NAME                   Drop a collection and its records
    vectable list                        List collections
    vectable count NAME                  Count records
    vectable insert NAME [--file F]      Batch insert JSON-lines vectors
    vectable search NAME --query JSON    Two-stage similarity search
    vectable get NAME ID [ID ...]        Fetch stored records
    vectable delete NAME ID              Delete one record
    vectable version                     Show version info

Output is JSON on stdout; failures print the error as JSON on stderr and
exit with status 1.
"""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any, NoReturn, Optional, Sequence, TextIO

from vectable.collection import CollectionManager
from vectable.core.config import VectorTableConfig
from vectable.core.errors import Err, InvalidArgument, Ok, Result, VectorTableError
from vectable.core.types import Collection, Encoding
from vectable.observability.logging import setup_logging
from vectable.storage.engine import SQLiteBackend


def main(argv: Optional[Sequence[str]] = None) -> NoReturn:
    """Main CLI entrypoint."""
    sys.exit(run(argv))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vectable",
        description="Binary-quantized two-stage vector similarity search",
    )
    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"%(prog)s {_get_version()}",
    )
    parser.add_argument(
        "--db",
        type=str,
        default=None,
        help="SQLite database path (default: $VECTABLE_DB_PATH or ./data/vectors.db)",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
        help="Minimum log level (default: $VECTABLE_LOG_LEVEL or INFO)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # create command
    create_parser = subparsers.add_parser("create", help="Create a collection")
    create_parser.add_argument("name", help="Collection name")
    create_parser.add_argument(
        "--dimension", "-d",
        type=int,
        required=True,
        help="Fixed vector dimension",
    )
    create_parser.add_argument(
        "--encoding",
        choices=[e.value for e in Encoding],
        default=Encoding.BINARY32_BLOB.value,
        help="Vector encoding used for the dimension ceiling",
    )

    drop_parser = subparsers.add_parser("drop", help="Drop a collection")
    drop_parser.add_argument("name", help="Collection name")

    subparsers.add_parser("list", help="List collections")

    count_parser = subparsers.add_parser("count", help="Count records in a collection")
    count_parser.add_argument("name", help="Collection name")

    # insert command
    insert_parser = subparsers.add_parser(
        "insert",
        help="Insert vectors, one JSON array per line, as a single transaction",
    )
    insert_parser.add_argument("name", help="Collection name")
    insert_parser.add_argument(
        "--file", "-f",
        type=str,
        default="-",
        help="JSON-lines input file (default: stdin)",
    )

    # search command
    search_parser = subparsers.add_parser("search", help="Search a collection")
    search_parser.add_argument("name", help="Collection name")
    search_parser.add_argument(
        "--query", "-q",
        type=str,
        required=True,
        help="Query vector as a JSON array",
    )
    search_parser.add_argument(
        "--top-n", "-n",
        type=int,
        default=None,
        help="Number of results (default: $VECTABLE_DEFAULT_TOP_N or 10)",
    )
    search_parser.add_argument(
        "--include-vectors",
        action="store_true",
        help="Include stored normalized vectors in the output",
    )

    get_parser = subparsers.add_parser("get", help="Fetch records by id")
    get_parser.add_argument("name", help="Collection name")
    get_parser.add_argument("ids", type=int, nargs="+", help="Record ids")

    delete_parser = subparsers.add_parser("delete", help="Delete a record by id")
    delete_parser.add_argument("name", help="Collection name")
    delete_parser.add_argument("id", type=int, help="Record id")

    subparsers.add_parser("version", help="Show version info")

    return parser


def run(argv: Optional[Sequence[str]] = None) -> int:
    """Parse arguments, execute one command, return the exit status."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0
    if args.command == "version":
        _emit({"version": _get_version()})
        return 0

    loaded = VectorTableConfig.from_env()
    if loaded.is_err():
        print(loaded.error, file=sys.stderr)
        return 2
    config = loaded.value
    if args.db is not None:
        config = replace(config, storage=replace(config.storage, db_path=Path(args.db)))
    valid = config.validate()
    if valid.is_err():
        print(valid.error, file=sys.stderr)
        return 2

    setup_logging(
        level=args.log_level or config.observability.log_level,
        json_output=config.observability.log_json,
    )

    backend = SQLiteBackend(config.storage)
    opened = backend.open()
    if opened.is_err():
        return _fail(opened.error)
    try:
        manager = CollectionManager(backend, config.search)
        return _dispatch(manager, args)
    finally:
        backend.close()


def _dispatch(manager: CollectionManager, args: argparse.Namespace) -> int:
    if args.command == "create":
        result = manager.create(args.name, args.dimension, Encoding(args.encoding))
        return _finish(result.map(_describe))

    if args.command == "drop":
        return _finish(manager.drop(args.name).map(lambda existed: {"dropped": existed}))

    if args.command == "list":
        return _finish(manager.list_collections().map(lambda cs: [_describe(c) for c in cs]))

    opened = manager.open(args.name)
    if opened.is_err():
        return _fail(opened.error)
    collection = opened.value

    if args.command == "count":
        return _finish(manager.count(collection).map(lambda n: {"count": n}))

    if args.command == "insert":
        loaded = _load_vectors(args.file)
        if loaded.is_err():
            return _fail(loaded.error)
        result = manager.batch_insert(collection, loaded.value)
        return _finish(result.map(lambda ids: {"ids": ids}))

    if args.command == "search":
        query = _parse_json("query", args.query)
        if query.is_err():
            return _fail(query.error)
        result = manager.search(
            collection,
            query.value,
            top_n=args.top_n,
            include_vectors=args.include_vectors,
        )
        return _finish(result.map(lambda matches: [m.to_dict() for m in matches]))

    if args.command == "get":
        result = manager.select(collection, args.ids)
        return _finish(result.map(lambda records: [r.to_dict() for r in records]))

    if args.command == "delete":
        return _finish(manager.delete(collection, args.id).map(lambda d: {"deleted": d}))

    raise ValueError(f"Unknown command: {args.command}")


def _describe(collection: Collection) -> dict[str, Any]:
    return {
        "name": collection.name,
        "dimension": collection.dimension,
        "engine": collection.engine,
        "encoding": collection.encoding.value,
    }


def _parse_json(param: str, text: str) -> Result[Any, VectorTableError]:
    try:
        return Ok(json.loads(text))
    except json.JSONDecodeError as e:
        return Err(InvalidArgument.invalid(param, text, f"malformed JSON: {e}"))


def _read_vectors(stream: TextIO) -> Result[list[Any], VectorTableError]:
    """One JSON array per non-blank line."""
    vectors = []
    for number, line in enumerate(stream, start=1):
        if not line.strip():
            continue
        parsed = _parse_json(f"line {number}", line)
        if parsed.is_err():
            return parsed
        vectors.append(parsed.value)
    return Ok(vectors)


def _load_vectors(path: str) -> Result[list[Any], VectorTableError]:
    """Read vectors from path, or stdin for '-'."""
    if path == "-":
        return _read_vectors(sys.stdin)
    try:
        with open(path, encoding="utf-8") as handle:
            return _read_vectors(handle)
    except (OSError, UnicodeDecodeError) as e:
        return Err(InvalidArgument.invalid("file", path, f"cannot read: {e}"))


def _finish(result: Result[Any, VectorTableError]) -> int:
    if result.is_err():
        return _fail(result.error)
    _emit(result.value)
    return 0


def _fail(error: VectorTableError) -> int:
    print(json.dumps(error.to_dict(), default=str), file=sys.stderr)
    return 1


def _emit(payload: Any) -> None:
    print(json.dumps(payload))


def _get_version() -> str:
    """Get package version."""
    from vectable import __version__
    return __version__


if __name__ == "__main__":
    main()
