from __future__ import annotations

import argparse
import sys
from pathlib import Path

from dotenv import load_dotenv

from ..config.loader import ConfigError, resolve_config
from ..logging.error_log import ErrorLogBuffer
from ..logging.init import log_summary, set_debug, setup_logging
from ..models.errors import WorkbookError
from ..services.summary import SessionStats, render_summary_line
from .commands import (
    EXIT_FATAL,
    EXIT_REJECTED,
    Session,
    open_session,
    parse_month,
    parse_year,
    run_add_contact,
    run_change_contact,
    run_customers_by_product,
    run_list_contacts,
    run_remove_contact,
    run_top_customer,
)
from .shell import InteractiveShell

"""CLI entrypoint.

Flow:
- load .env, then config (config/salesbook.yml when present, or --config)
- resolve the workbook (--workbook > SALESBOOK_WORKBOOK > config 'workbook')
- run one sub-command, or the interactive shell when no command is given
- flush the error log and print the SUMMARY line

Exit codes: 0 success, 1 fatal (config / workbook / parse / save failure),
2 rejected (not found, duplicate, invalid period).
"""


def _load_env_file(path: Path, override: bool = False) -> None:
    """Load .env using python-dotenv; a missing file is not an error."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="salesbook", description="Query and maintain a Products / Customers / Orders workbook"
    )
    p.add_argument("--config", type=Path, default=None, help="YAML config file")
    p.add_argument("--workbook", type=Path, default=None, help="Path to the .xlsx workbook")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    sub = p.add_subparsers(dest="command")

    sub.add_parser("shell", help="Interactive menu (default)")

    q = sub.add_parser("customers-by-product", help="Customers who ordered a product")
    q.add_argument("name", help="Product name (case-insensitive)")

    t = sub.add_parser("top-customer", help="Customer with most orders in a month")
    t.add_argument("year")
    t.add_argument("month")

    sub.add_parser("contacts", help="List organizations and contact persons")

    a = sub.add_parser("add-contact", help="Add a new organization with its contact person")
    a.add_argument("contact_person")
    a.add_argument("organization")

    r = sub.add_parser("remove-contact", help="Remove the customer row of a contact person")
    r.add_argument("contact_person")

    c = sub.add_parser("change-contact", help="Replace a contact person")
    c.add_argument("current")
    c.add_argument("new")
    return p.parse_args(argv)


def _dispatch(session: Session, args: argparse.Namespace) -> int:
    if args.command == "customers-by-product":
        return run_customers_by_product(session, args.name.strip())
    if args.command == "top-customer":
        try:
            year = parse_year(args.year, session.config.min_year)
            month = parse_month(args.month)
        except ValueError as e:
            session.stats.rejected += 1
            session.out(f"Invalid input: {e}")
            return EXIT_REJECTED
        return run_top_customer(session, year, month)
    if args.command == "contacts":
        return run_list_contacts(session)
    if args.command == "add-contact":
        return run_add_contact(session, args.contact_person.strip(), args.organization.strip())
    if args.command == "remove-contact":
        return run_remove_contact(session, args.contact_person.strip())
    if args.command == "change-contact":
        return run_change_contact(session, args.current.strip(), args.new.strip())
    raise ValueError(f"unknown command: {args.command}")  # pragma: no cover


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # None のときのみ sys.argv を読む (テストで main([]) を渡すため)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    if args.debug:
        set_debug(True)
        logger.debug("debug mode enabled")

    _load_env_file(Path(".env"))
    try:
        cfg = resolve_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    workbook = args.workbook or (Path(cfg.workbook) if cfg.workbook else None)
    error_log = ErrorLogBuffer(Path(cfg.log_dir))
    stats = SessionStats()
    try:
        if args.command in (None, "shell"):
            return InteractiveShell(cfg, error_log, stats).run(workbook)
        if workbook is None:
            logger.error("no workbook given (use --workbook, SALESBOOK_WORKBOOK or 'workbook' in config)")
            return EXIT_FATAL
        try:
            session = open_session(workbook, cfg, error_log, stats)
        except WorkbookError as e:
            logger.error(f"workbook: {e}")
            return EXIT_FATAL
        return _dispatch(session, args)
    finally:
        log_path = error_log.flush()
        if log_path is not None:
            logger.info(f"error log written: {log_path}")
        log_summary(render_summary_line(stats))
