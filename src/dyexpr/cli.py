"""Command line front end: print compiled request parameters as JSON.

Examples::

    dyexpr item --schema id:S,ts:N user-1 42 --item '{"name": "Ann", "tags": <<"a", "b">>}'
    dyexpr update --schema id:S user-1 --set 'pi = pi + 10'
    dyexpr update --schema id:S user-1 --atomic-counter visits
    dyexpr query --schema id:S,ts:N user-1 --sort-key 'between 10 and 20'
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from dyexpr.config import load_config, resolve_strict_mode
from dyexpr.errors import ExpressionError, SemanticError
from dyexpr.keys import KeySchema
from dyexpr.placeholders import PlaceholderTable
from dyexpr.requests import (
    atomic_counter,
    build_item,
    build_key,
    build_update_params,
    compile_key_condition,
    compile_projection,
)


def _schema(text: str) -> KeySchema:
    try:
        return KeySchema.parse(text)
    except SemanticError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def _add_key_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--schema",
        type=_schema,
        required=True,
        help="Primary key of the table, e.g. 'id:S' or 'id:S,ts:N' (type defaults to S)",
    )
    parser.add_argument("pval", help="Partition key value")


def _build_arg_parser() -> argparse.ArgumentParser:
    arg_parser = argparse.ArgumentParser(
        prog="dyexpr",
        description="Compile dynein-format items and expressions into DynamoDB request parameters",
    )
    arg_parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log parsing and compilation details to stderr",
    )
    arg_parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to config.yml (default: ~/.dynein/config.yml)",
    )
    subparsers = arg_parser.add_subparsers(dest="command", required=True)

    item = subparsers.add_parser("item", help="Build an item for PutItem")
    _add_key_arguments(item)
    item.add_argument("sval", nargs="?", default=None, help="Sort key value")
    item.add_argument("-i", "--item", help="Item body in dynein format, e.g. '{\"a\": 1}'")
    item.add_argument(
        "--infer-sets",
        action="store_true",
        help="Treat lists of numbers, strings or binaries as sets (legacy behaviour)",
    )

    update = subparsers.add_parser("update", help="Build UpdateItem parameters")
    _add_key_arguments(update)
    update.add_argument("sval", nargs="?", default=None, help="Sort key value")
    update.add_argument("--set", dest="set_text", help="SET actions, e.g. 'a = a + 1, b = \"x\"'")
    update.add_argument("--remove", dest="remove_text", help="REMOVE actions, e.g. 'a, b[0]'")
    update.add_argument(
        "--atomic-counter",
        metavar="ATTRIBUTE",
        help="Increment ATTRIBUTE by one; cannot be combined with --set or --remove",
    )

    query = subparsers.add_parser("query", help="Build Query parameters")
    _add_key_arguments(query)
    query.add_argument(
        "-s", "--sort-key",
        help="Sort key condition, e.g. '<= 10', 'between 1 and 5', 'begins_with \"a\"'",
    )
    query.add_argument("--strict", action="store_true", help="Require sort key literals of the key's type")
    query.add_argument("--non-strict", action="store_true", help="Coerce sort key literals to the key's type")
    query.add_argument("--attributes", help="Comma separated attributes to return")
    query.add_argument("--keys-only", action="store_true", help="Return primary key attributes only")
    return arg_parser


def _item_params(args: argparse.Namespace) -> dict[str, Any]:
    return {"Item": build_item(args.schema, args.pval, args.sval, args.item, args.infer_sets)}


def _update_params(args: argparse.Namespace) -> dict[str, Any]:
    set_text = args.set_text
    if args.atomic_counter is not None:
        if args.set_text is not None or args.remove_text is not None:
            raise SemanticError("--atomic-counter option cannot be used with --set or --remove.")
        set_text = atomic_counter(args.atomic_counter)
    params: dict[str, Any] = {"Key": build_key(args.schema, args.pval, args.sval)}
    params.update(build_update_params(set_text, args.remove_text, args.schema.key_attributes))
    return params


def _query_params(args: argparse.Namespace) -> dict[str, Any]:
    config = load_config(args.config)
    strict = resolve_strict_mode(args.strict, args.non_strict, config)
    table = PlaceholderTable()
    compiled = compile_key_condition(args.schema, args.pval, args.sort_key, strict, table)
    attributes = args.attributes.split(",") if args.attributes is not None else None
    projection = compile_projection(args.schema, attributes, args.keys_only, table)

    params = compiled.as_params("KeyConditionExpression")
    if projection is not None:
        params["ProjectionExpression"] = projection.expression
        params["ExpressionAttributeNames"] = projection.names
    return params


_COMMANDS = {
    "item": _item_params,
    "update": _update_params,
    "query": _query_params,
}


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = _build_arg_parser().parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    try:
        params = _COMMANDS[args.command](args)
    except (ExpressionError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(json.dumps(params, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
