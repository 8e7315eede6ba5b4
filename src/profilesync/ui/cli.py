from __future__ import annotations

import argparse
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING
from uuid import UUID

from dotenv import load_dotenv

from profilesync.app import save_classification, trace_visitor
from profilesync.config import ConfigurationError, configure_logging, parse_log_level
from profilesync.domain.model import CLASSIFICATION_FACET, Classification

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Synchronise visitor profiles")
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        help="Logging level name (default: %(default)s)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    save = subparsers.add_parser("save", help="Save a visitor's classification")
    save.add_argument(
        "--visitor-id",
        type=str,
        required=True,
        help="Local visitor id (UUID)",
    )
    save.add_argument(
        "--classification",
        type=int,
        default=0,
        help="Classification level to store (default: %(default)s)",
    )
    save.add_argument(
        "--override-classification",
        type=int,
        default=0,
        help="Override classification level to store (default: %(default)s)",
    )
    novelty = save.add_mutually_exclusive_group()
    novelty.add_argument(
        "--new",
        dest="is_new",
        action="store_const",
        const=True,
        help="Treat the visitor as new and create a remote entity",
    )
    novelty.add_argument(
        "--existing",
        dest="is_new",
        action="store_const",
        const=False,
        help="Treat the visitor as already known to the remote store",
    )

    resolve = subparsers.add_parser("resolve", help="Look up the remote entity of a visitor")
    resolve.add_argument(
        "--visitor-id",
        type=str,
        required=True,
        help="Local visitor id (UUID)",
    )

    return parser.parse_args(list(argv))


def _parse_uuid(value: str) -> UUID:
    try:
        return UUID(value)
    except ValueError as exc:
        raise ValueError(f"Invalid UUID: {value}") from exc


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    parsed_args: argparse.Namespace
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
        configure_logging(level=parse_log_level(parsed_args.log_level))
        visitor_id = _parse_uuid(parsed_args.visitor_id)
    except (ValueError, ConfigurationError):
        configure_logging()
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        if parsed_args.command == "save":
            written = save_classification(
                visitor_id,
                classification_level=parsed_args.classification,
                override_classification_level=parsed_args.override_classification,
                is_new=parsed_args.is_new,
            )
            log.info("Visitor %s saved (written=%s)", visitor_id, written)
        elif parsed_args.command == "resolve":
            resolution = trace_visitor(visitor_id)
            entity = resolution.entity
            if entity is None:
                log.info("Visitor %s has no remote entity", visitor_id)
            else:
                classification = entity.get_facet(CLASSIFICATION_FACET, Classification)
                log.info(
                    "Visitor %s resolves to entity %s (merged=%s, classification=%s, override=%s)",
                    visitor_id,
                    entity.id,
                    resolution.followed_successor,
                    classification.classification_level if classification else None,
                    classification.override_classification_level if classification else None,
                )
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except Exception:
        log.exception("Fatal error during profile sync")
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
