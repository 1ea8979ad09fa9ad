from __future__ import annotations

import logging

from ..excel.writer import PersistenceGateway
from ..models.errors import ContactNotFoundError, DuplicateContactError, OrganizationExistsError
from ..models.results import ContactEntry
from ..models.tables import WorkbookStore
from .queries import find_customer_by_contact, first_match

"""Contact person maintenance on the Customers sheet.

Each operation validates, mutates the in-memory Customers table and then flushes
the sheet through the persistence gateway before returning. There is no
rollback: when the flush raises ``PersistenceError`` the mutation stays applied
in memory and the error propagates to the caller. Nothing is retried here.

Contact names are compared exactly (case-sensitive), as typed by the operator.
"""

__all__ = [
    "add_contact",
    "remove_contact",
    "change_contact",
]

logger = logging.getLogger(__name__)


def _flush(store: WorkbookStore, gateway: PersistenceGateway) -> None:
    sheet = store.customers.sheet
    try:
        gateway.flush(sheet)
    except Exception:
        logger.error(f"save failed for sheet '{sheet.name}'; in-memory changes were kept")
        raise


def add_contact(
    store: WorkbookStore,
    gateway: PersistenceGateway,
    contact_person: str,
    organization_name: str,
) -> ContactEntry:
    """Register a new organization together with its contact person.

    Only organization and contact are written; the customer code and address of
    the new row stay empty.

    Raises
    ------
    DuplicateContactError: some customer already has this contact person
    OrganizationExistsError: the organization is already on the sheet (no change made)
    PersistenceError: saving the workbook failed (row stays added in memory)
    """
    customers = store.customers
    if find_customer_by_contact(customers, contact_person) is not None:
        raise DuplicateContactError(contact_person)
    existing = first_match(customers.rows(), lambda c: c.organization_name == organization_name)
    if existing is not None:
        raise OrganizationExistsError(organization_name)

    row = customers.append(organization_name, contact_person)
    logger.info(f"contact added: '{contact_person}' ({organization_name}) at row {row.row_number}")
    _flush(store, gateway)
    return ContactEntry(organization_name=organization_name, contact_person=contact_person)


def remove_contact(
    store: WorkbookStore, gateway: PersistenceGateway, contact_person: str
) -> ContactEntry:
    """Remove the first customer whose contact person matches.

    The whole customer row is deleted, organization, code and address included.

    Raises
    ------
    ContactNotFoundError: no customer has this contact person
    PersistenceError: saving the workbook failed (row stays deleted in memory)
    """
    customers = store.customers
    row = find_customer_by_contact(customers, contact_person)
    if row is None:
        raise ContactNotFoundError(contact_person)

    removed = ContactEntry(organization_name=row.organization_name, contact_person=contact_person)
    # NOTE: 連絡先だけでなく顧客行ごと削除する (既存ブックとの互換動作)
    logger.info(
        f"contact removed: '{contact_person}' ({removed.organization_name}), "
        f"customer row {row.row_number} deleted"
    )
    customers.delete(row)
    _flush(store, gateway)
    return removed


def change_contact(
    store: WorkbookStore,
    gateway: PersistenceGateway,
    current_contact_person: str,
    new_contact_person: str,
) -> ContactEntry:
    """Replace the contact person of the first customer matching the current one.

    The new name is not checked against other customers and may be empty.

    Raises
    ------
    ContactNotFoundError: no customer has the current contact person
    PersistenceError: saving the workbook failed (change stays applied in memory)
    """
    customers = store.customers
    row = find_customer_by_contact(customers, current_contact_person)
    if row is None:
        raise ContactNotFoundError(current_contact_person)

    customers.set_contact_person(row, new_contact_person)
    logger.info(f"contact changed: '{current_contact_person}' -> '{new_contact_person}'")
    _flush(store, gateway)
    return ContactEntry(organization_name=row.organization_name, contact_person=new_contact_person)
