from __future__ import annotations

import argparse
import json
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from ldpsync.app import delete_resource, eradicate_resource, resource_exists, show_resource
from ldpsync.config import ConfigurationError, configure_logging

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Inspect and manage repository resources")
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log at DEBUG level",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    exists = subparsers.add_parser("exists", help="Report whether a resource is present or gone")
    exists.add_argument("resource_id", help="Resource id or absolute URI")

    eradicate = subparsers.add_parser(
        "eradicate",
        help="Remove the tombstone of a deleted resource so its URI can be reused",
    )
    eradicate.add_argument("resource_id", help="Resource id or absolute URI")

    delete = subparsers.add_parser("delete", help="Delete a resource")
    delete.add_argument("resource_id", help="Resource id or absolute URI")
    delete.add_argument(
        "--eradicate",
        action="store_true",
        help="Also remove the tombstone left behind by the delete",
    )

    show = subparsers.add_parser("show", help="Print a resource as its search index document")
    show.add_argument("resource_id", help="Resource id or absolute URI")

    return parser.parse_args(list(argv))


def _run(parsed_args: argparse.Namespace) -> None:
    if parsed_args.command == "exists":
        state = resource_exists(parsed_args.resource_id)
        print(state)  # noqa: T201
    elif parsed_args.command == "eradicate":
        removed = eradicate_resource(parsed_args.resource_id)
        if removed:
            log.info("Eradicated tombstone for %s", parsed_args.resource_id)
        else:
            log.info("No tombstone found for %s", parsed_args.resource_id)
    elif parsed_args.command == "delete":
        resource = delete_resource(parsed_args.resource_id, eradicate=parsed_args.eradicate)
        log.info("Deleted %s", resource.uri)
    elif parsed_args.command == "show":
        document = show_resource(parsed_args.resource_id)
        print(json.dumps(document, indent=2, default=str))  # noqa: T201
    else:
        raise ValueError(f"Unsupported command: {parsed_args.command}")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)

    try:
        _run(parsed_args)
    except ConfigurationError:
        log.exception("Invalid configuration")
        sys.exit(2)
    except Exception:
        log.exception("Fatal error")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
