"""
arrayorm CLI: Read-Only Queries over JSON Record Files.

Commands:
    arrayorm query FILE      Filter, deduplicate, sort and project records
    arrayorm join FILE REL   Attach related records from a second file

The CLI never writes files. Results go to stdout as JSON; errors go to
stderr with exit status 1.

Query stages run in a fixed order:
    1. every --where filter, in the order given
    2. --distinct
    3. --order-by
    4. --select
"""

from __future__ import annotations

import argparse
import sys
from typing import Optional

from loguru import logger

from ..errors import ArrayOrmError
from ..logging_config import VALID_LEVELS, LogConfig, configure_logging
from ..relations import DEFAULT_ALIAS
from .source import (
    dump_records,
    load_collection,
    load_records,
    parse_fields,
    parse_order,
    parse_where,
)


def report_error(message: str) -> int:
    print(f"ERROR: {message}", file=sys.stderr)
    return 1


# =============================================================================
# CLI COMMANDS
# =============================================================================

def cmd_query(args: argparse.Namespace) -> int:
    """Run a query pipeline over one record file."""
    try:
        clauses = [parse_where(expr) for expr in args.where or []]
        order = parse_order(args.order_by) if args.order_by else None
        fields = parse_fields(args.select) if args.select else None

        collection = load_collection(args.file)
        for clause in clauses:
            collection = clause.apply(collection)
        if args.distinct:
            collection = collection.distinct_by(args.distinct)
        if order:
            collection = collection.sort_by(*order)
        if fields:
            collection = collection.project(fields)

    except ArrayOrmError as e:
        return report_error(str(e))
    except TypeError as e:
        # mixed value types in a comparison or sort
        return report_error(f"cannot compare values: {e}")

    logger.info("query on {} returned {} record(s)", args.file, len(collection))
    print(dump_records(collection.read()))
    return 0


def cmd_join(args: argparse.Namespace) -> int:
    """Attach records from a related file (one-to-many)."""
    try:
        collection = load_collection(args.file)
        related = load_records(args.related)
    except ArrayOrmError as e:
        return report_error(str(e))

    joined = collection.join_many(
        related, args.local_key, args.foreign_key, args.alias,
    )

    logger.info(
        "joined {} related record(s) onto {} record(s) as '{}'",
        len(related), len(joined), args.alias,
    )
    print(dump_records(joined.read()))
    return 0


# =============================================================================
# MAIN ENTRY POINT
# =============================================================================

def create_parser() -> argparse.ArgumentParser:
    """Create the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="arrayorm",
        description="arrayorm: query JSON record files",
    )
    parser.add_argument(
        "--log-level",
        choices=VALID_LEVELS,
        type=str.upper,
        default=None,
        help="Write library log records to stderr at this level",
    )

    subparsers = parser.add_subparsers(
        title="commands",
        description="Available commands",
        dest="command",
    )

    # Query command
    query_parser = subparsers.add_parser(
        "query",
        help="Filter, deduplicate, sort and project records",
    )
    query_parser.add_argument(
        "file",
        help="JSON file holding an array of records",
    )
    query_parser.add_argument(
        "--where",
        action="append",
        metavar="EXPR",
        help="Filter as FIELD<op>VALUE, op in = != < <= > >= (repeatable)",
    )
    query_parser.add_argument(
        "--distinct",
        metavar="FIELD",
        help="Keep the first record per distinct FIELD value",
    )
    query_parser.add_argument(
        "--order-by",
        metavar="FIELD:DIR",
        help="Sort by FIELD, DIR is asc (default) or desc; stable",
    )
    query_parser.add_argument(
        "--select",
        metavar="F1,F2,...",
        help="Keep only these fields, in this order",
    )
    query_parser.set_defaults(func=cmd_query)

    # Join command
    join_parser = subparsers.add_parser(
        "join",
        help="Attach related records (one-to-many)",
    )
    join_parser.add_argument(
        "file",
        help="JSON file holding the primary records",
    )
    join_parser.add_argument(
        "related",
        help="JSON file holding the related records",
    )
    join_parser.add_argument(
        "--local-key",
        required=True,
        help="Field on the primary records",
    )
    join_parser.add_argument(
        "--foreign-key",
        required=True,
        help="Field on the related records that refers to --local-key",
    )
    join_parser.add_argument(
        "--alias",
        default=DEFAULT_ALIAS,
        help=f"Field name for the attached list (default: {DEFAULT_ALIAS})",
    )
    join_parser.set_defaults(func=cmd_join)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.log_level:
        configure_logging(LogConfig(level=args.log_level))

    if args.command is None:
        parser.print_help()
        return 0

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
