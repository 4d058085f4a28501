"""
View State Module

Finite-state switcher deciding which of the three page sections is shown.
Visibility only ever changes through the transitions below.
"""

from enum import Enum
from typing import Callable, List, Tuple

from .logging_config import get_logger


class ViewState(Enum):
    """Which sections of the page are visible"""
    LOGGED_OUT = "logged_out"
    BANKING = "banking"
    BANKING_WITH_TRANSACTIONS = "banking_with_transactions"


class Section(Enum):
    LOGIN = "login"
    BANKING = "banking"
    TRANSACTIONS = "transactions"


VISIBLE_SECTIONS = {
    ViewState.LOGGED_OUT: (Section.LOGIN,),
    ViewState.BANKING: (Section.BANKING,),
    ViewState.BANKING_WITH_TRANSACTIONS: (Section.BANKING, Section.TRANSACTIONS),
}

TransitionListener = Callable[[ViewState, ViewState], None]


class SectionController:
    """View state machine: LoggedOut / Banking / Banking+Transactions"""

    def __init__(self):
        self._state = ViewState.LOGGED_OUT
        self._listeners: List[TransitionListener] = []
        self.logger = get_logger("banking_client.views")

    @property
    def state(self) -> ViewState:
        return self._state

    def visible_sections(self) -> Tuple[Section, ...]:
        return VISIBLE_SECTIONS[self._state]

    def add_listener(self, listener: TransitionListener) -> None:
        self._listeners.append(listener)

    def on_login(self) -> None:
        """Successful login; a re-login from any state lands on the banking section"""
        self._transition(ViewState.BANKING)

    def on_logout(self) -> None:
        """Logout; the transactions view is not preserved"""
        self._transition(ViewState.LOGGED_OUT)

    def on_transactions_loaded(self) -> None:
        """A non-empty transaction history arrived"""
        if self._state == ViewState.LOGGED_OUT:
            raise ValueError(f"Cannot show transactions while {self._state.value}")
        self._transition(ViewState.BANKING_WITH_TRANSACTIONS)

    def hide_transactions(self) -> None:
        """Explicit user request to close the transactions section"""
        if self._state != ViewState.BANKING_WITH_TRANSACTIONS:
            raise ValueError(f"Can only hide transactions from "
                             f"{ViewState.BANKING_WITH_TRANSACTIONS.value}, view is {self._state.value}")
        self._transition(ViewState.BANKING)

    def _transition(self, new_state: ViewState) -> None:
        old_state = self._state
        if old_state == new_state:
            return
        self._state = new_state
        self.logger.debug(f"View {old_state.value} -> {new_state.value}")
        for listener in self._listeners:
            listener(old_state, new_state)
