from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path

from ..config.loader import AppConfig
from ..excel.reader import open_workbook
from ..excel.writer import PersistenceGateway, WorkbookWriter
from ..logging.error_log import ErrorLogBuffer
from ..models.error_record import ErrorRecord
from ..models.errors import (
    DuplicateContactError,
    NotFoundError,
    OrganizationExistsError,
    SalesbookError,
)
from ..models.tables import WorkbookStore
from ..services.contacts import add_contact, change_contact, remove_contact
from ..services.queries import (
    find_customer_by_contact,
    find_customers_by_product_name,
    find_top_customer,
    list_contact_persons,
)
from ..services.summary import (
    SessionStats,
    render_contact,
    render_order_line,
    render_top_customer,
)

"""Operator commands shared by the sub-command CLI and the interactive shell.

Each ``run_*`` function calls one core operation, prints the result and returns
an exit code. Core errors are mapped here:
- not found / duplicate / organization exists -> WARN, EXIT_REJECTED
- parse / persistence failures -> ERROR, error log record, EXIT_FATAL
"""

EXIT_OK = 0
EXIT_FATAL = 1
EXIT_REJECTED = 2

REJECTIONS = (NotFoundError, DuplicateContactError, OrganizationExistsError)

logger = logging.getLogger(__name__)


@dataclass
class Session:
    """One open workbook plus the bookkeeping of the operator session."""
    store: WorkbookStore
    gateway: PersistenceGateway
    config: AppConfig
    error_log: ErrorLogBuffer
    stats: SessionStats = field(default_factory=SessionStats)
    out: Callable[[str], None] = print


def open_session(
    path: Path,
    config: AppConfig,
    error_log: ErrorLogBuffer,
    stats: SessionStats | None = None,
    out: Callable[[str], None] = print,
) -> Session:
    """Open the workbook at ``path``; raises ``WorkbookError`` when it cannot be read."""
    store = open_workbook(path, config.sheets)
    logger.info(f"workbook opened: {path}")
    return Session(
        store=store,
        gateway=WorkbookWriter(path),
        config=config,
        error_log=error_log,
        stats=stats if stats is not None else SessionStats(),
        out=out,
    )


def parse_year(text: str, min_year: int = 1900, today: date | None = None) -> int:
    """Parse a year between ``min_year`` and the current year; raises ValueError otherwise."""
    current = (today or date.today()).year
    try:
        year = int(text.strip())
    except ValueError:
        raise ValueError(f"year must be a number, got '{text}'") from None
    if not min_year <= year <= current:
        raise ValueError(f"year must be between {min_year} and {current}, got {year}")
    return year


def parse_month(text: str) -> int:
    """Parse a month number 1..12; raises ValueError otherwise."""
    try:
        month = int(text.strip())
    except ValueError:
        raise ValueError(f"month must be a number, got '{text}'") from None
    if not 1 <= month <= 12:
        raise ValueError(f"month must be between 1 and 12, got {month}")
    return month


def _handle_error(session: Session, e: SalesbookError) -> int:
    if isinstance(e, REJECTIONS):
        session.stats.rejected += 1
        logger.warning(str(e))
        return EXIT_REJECTED
    session.stats.failed += 1
    logger.error(str(e))
    session.error_log.append(
        ErrorRecord.create(
            file=session.store.path.name,
            sheet=getattr(e, "sheet", ""),
            row=getattr(e, "row", -1),
            error_type=e.error_type,
            message=str(e),
        )
    )
    return EXIT_FATAL


def run_customers_by_product(session: Session, product_name: str) -> int:
    try:
        lines = find_customers_by_product_name(session.store, product_name)
    except SalesbookError as e:
        return _handle_error(session, e)
    session.stats.queries += 1
    if not lines:
        session.out(f"No customer orders found for product '{product_name}'.")
        return EXIT_OK
    session.out(f"Customers who ordered '{product_name}':")
    for line in lines:
        session.out(render_order_line(line, session.config.date_format))
    return EXIT_OK


def run_top_customer(session: Session, year: int, month: int) -> int:
    try:
        top = find_top_customer(session.store, year, month)
    except SalesbookError as e:
        return _handle_error(session, e)
    session.stats.queries += 1
    session.out(render_top_customer(top))
    return EXIT_OK


def run_list_contacts(session: Session) -> int:
    try:
        entries = list_contact_persons(session.store)
    except SalesbookError as e:  # pragma: no cover (only string getters involved)
        return _handle_error(session, e)
    session.stats.queries += 1
    if not entries:
        session.out("No data.")
        return EXIT_OK
    for entry in entries:
        session.out(render_contact(entry))
    return EXIT_OK


def check_new_contact(session: Session, contact_person: str) -> int:
    """Reject a contact person that is already taken, before the organization is asked for."""
    if find_customer_by_contact(session.store.customers, contact_person) is not None:
        return _handle_error(session, DuplicateContactError(contact_person))
    return EXIT_OK


def run_add_contact(session: Session, contact_person: str, organization_name: str) -> int:
    try:
        entry = add_contact(session.store, session.gateway, contact_person, organization_name)
    except SalesbookError as e:
        return _handle_error(session, e)
    session.stats.mutations += 1
    session.out(f"Contact {entry.contact_person} added ({entry.organization_name}).")
    return EXIT_OK


def run_remove_contact(session: Session, contact_person: str) -> int:
    try:
        removed = remove_contact(session.store, session.gateway, contact_person)
    except SalesbookError as e:
        return _handle_error(session, e)
    session.stats.mutations += 1
    session.out(f"Contact {removed.contact_person} removed ({removed.organization_name}).")
    return EXIT_OK


def run_change_contact(session: Session, current_contact_person: str, new_contact_person: str) -> int:
    try:
        change_contact(session.store, session.gateway, current_contact_person, new_contact_person)
    except SalesbookError as e:
        return _handle_error(session, e)
    session.stats.mutations += 1
    session.out(f"Contact person {current_contact_person} changed to {new_contact_person}.")
    session.out("All contacts after the change:")
    for entry in list_contact_persons(session.store):
        session.out(render_contact(entry))
    return EXIT_OK
