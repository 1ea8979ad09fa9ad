from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

from ..config.loader import AppConfig
from ..logging.error_log import ErrorLogBuffer
from ..models.errors import WorkbookError
from ..services.queries import list_contact_persons
from ..services.summary import SessionStats, render_contact
from .commands import (
    EXIT_FATAL,
    EXIT_OK,
    Session,
    check_new_contact,
    open_session,
    parse_month,
    parse_year,
    run_add_contact,
    run_change_contact,
    run_customers_by_product,
    run_remove_contact,
    run_top_customer,
)

"""Interactive menu shell.

Prompts for a workbook path when none is configured, then loops over the main
menu until the operator quits. Typing ``exit`` at the path, year or month prompt
cancels; end of input (Ctrl-D / closed stdin) ends the session.
"""

logger = logging.getLogger(__name__)

EXIT_WORD = "exit"

MAIN_MENU = (
    "Choose an action:\n"
    "1. Customers who ordered a product\n"
    "2. Add / remove / change a contact person\n"
    "3. Top customer for a month\n"
    "4. Quit"
)

CONTACT_MENU = (
    "Choose an action:\n"
    "1. Add a new contact\n"
    "2. Remove a contact\n"
    "3. Change a contact\n"
    "4. Back to main menu"
)


class _EndOfInput(Exception):
    pass


class InteractiveShell:
    def __init__(
        self,
        config: AppConfig,
        error_log: ErrorLogBuffer,
        stats: SessionStats | None = None,
        input_fn: Callable[[str], str] = input,
        out: Callable[[str], None] = print,
    ) -> None:
        self.config = config
        self.error_log = error_log
        self.stats = stats if stats is not None else SessionStats()
        self._input = input_fn
        self.out = out

    def run(self, workbook: Path | None = None) -> int:
        try:
            if workbook is not None:
                try:
                    session = self._open(workbook)
                except WorkbookError as e:
                    logger.error(f"workbook: {e}")
                    return EXIT_FATAL
            else:
                session = self._prompt_workbook()
                if session is None:
                    self.out("Bye.")
                    return EXIT_OK
            self._main_menu(session)
        except _EndOfInput:
            self.out("")
        return EXIT_OK

    def _ask(self, prompt: str) -> str:
        try:
            return self._input(prompt).strip()
        except EOFError:
            raise _EndOfInput() from None

    def _choose(self, menu: str) -> int | None:
        self.out(menu)
        raw = self._ask("> ")
        if raw.isdigit() and 1 <= int(raw) <= 4:
            return int(raw)
        self.out("Invalid choice. Enter a number from 1 to 4.")
        return None

    def _open(self, path: Path) -> Session:
        return open_session(path, self.config, self.error_log, self.stats, self.out)

    def _prompt_workbook(self) -> Session | None:
        while True:
            raw = self._ask(f"Path to the workbook (or '{EXIT_WORD}' to quit): ").strip('"')
            if raw.lower() == EXIT_WORD:
                return None
            path = Path(raw)
            if not raw or not path.is_file():
                self.out(f"File not found. Try again or type '{EXIT_WORD}'.")
                continue
            try:
                return self._open(path)
            except WorkbookError as e:
                self.out(f"Could not open the workbook: {e}")

    def _main_menu(self, session: Session) -> None:
        while True:
            choice = self._choose(MAIN_MENU)
            if choice == 1:
                name = self._ask("Product name: ")
                run_customers_by_product(session, name)
            elif choice == 2:
                self._contact_menu(session)
            elif choice == 3:
                self._top_customer(session)
            elif choice == 4:
                return

    def _contact_menu(self, session: Session) -> None:
        while True:
            choice = self._choose(CONTACT_MENU)
            if choice is None:
                continue
            if choice == 4:
                return
            self._show_contacts(session)
            if choice == 1:
                person = self._ask("New contact person: ")
                if check_new_contact(session, person) != EXIT_OK:
                    continue
                organization = self._ask("Organization name: ")
                run_add_contact(session, person, organization)
            elif choice == 2:
                person = self._ask("Contact person to remove: ")
                run_remove_contact(session, person)
            else:
                current = self._ask("Current contact person: ")
                new = self._ask("New contact person: ")
                run_change_contact(session, current, new)

    def _show_contacts(self, session: Session) -> None:
        # 操作前の一覧表示はクエリとして数えない
        self.out("All contact persons:")
        entries = list_contact_persons(session.store)
        if not entries:
            self.out("No data.")
        for entry in entries:
            self.out(render_contact(entry))

    def _top_customer(self, session: Session) -> None:
        year = self._ask_number(
            f"Year (e.g. 2023) or '{EXIT_WORD}' to cancel: ",
            lambda raw: parse_year(raw, self.config.min_year),
        )
        if year is None:
            return
        month = self._ask_number(
            f"Month (1-12) or '{EXIT_WORD}' to cancel: ", parse_month
        )
        if month is None:
            return
        run_top_customer(session, year, month)

    def _ask_number(self, prompt: str, parse: Callable[[str], int]) -> int | None:
        while True:
            raw = self._ask(prompt)
            if raw.lower() == EXIT_WORD:
                self.out("Cancelled.")
                return None
            try:
                return parse(raw)
            except ValueError as e:
                self.out(f"Invalid input: {e}")
