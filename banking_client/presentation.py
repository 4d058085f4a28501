"""
Presentation Port Module

The client core never touches a concrete UI. It pushes immutable PageState
snapshots to a Presenter and receives user intent as ActionEvents.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .health import HealthStatus
from .logging_config import get_logger
from .messages import Message
from .rendering import DisplayRow
from .views import Section, ViewState


class Action(Enum):
    """User intents the page can raise"""
    REGISTER = "register"
    LOGIN = "login"
    LOGOUT = "logout"
    DEPOSIT = "deposit"
    WITHDRAW = "withdraw"
    BALANCE = "balance"
    TRANSACTIONS = "transactions"
    HIDE_TRANSACTIONS = "hide_transactions"


class Form(Enum):
    LOGIN = "login"
    DEPOSIT = "deposit"
    WITHDRAW = "withdraw"


@dataclass(frozen=True)
class ActionEvent:
    """A user action plus the raw input field values it was raised with"""
    action: Action
    fields: Dict[str, Any] = field(default_factory=dict)

    def get(self, name: str, default: Any = "") -> Any:
        return self.fields.get(name, default)


@dataclass(frozen=True)
class PageState:
    """Everything a front end needs to draw the page"""
    view: ViewState
    sections: Tuple[Section, ...]
    username: Optional[str]
    balance_text: Optional[str]
    transactions: Tuple[DisplayRow, ...]
    messages: Tuple[Message, ...]
    api_status: HealthStatus
    api_url: str


class Presenter(ABC):
    """Abstract base class for front ends"""

    @abstractmethod
    def render(self, state: PageState) -> None:
        """Draw the given page state"""
        pass

    def clear_form(self, form: Form) -> None:
        """Empty the input fields of a form after a successful submit"""
        pass


class LogPresenter(Presenter):
    """Development front end that logs each rendered state"""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or get_logger("banking_client.presenter")

    def render(self, state: PageState) -> None:
        sections = ", ".join(section.value for section in state.sections)
        self.logger.info(
            f"[{state.api_status.label}] view={state.view.value} sections=[{sections}] "
            f"user={state.username or '-'} balance={state.balance_text or '-'} "
            f"transactions={len(state.transactions)} messages={len(state.messages)}"
        )
        for message in state.messages:
            self.logger.info(f"  {message.severity.value.upper()}: {message.text}")

    def clear_form(self, form: Form) -> None:
        self.logger.debug(f"Cleared {form.value} form")


class RecordingPresenter(Presenter):
    """Keeps every rendered state and cleared form, newest last"""

    def __init__(self):
        self.states: List[PageState] = []
        self.cleared_forms: List[Form] = []

    @property
    def last(self) -> Optional[PageState]:
        return self.states[-1] if self.states else None

    def render(self, state: PageState) -> None:
        self.states.append(state)

    def clear_form(self, form: Form) -> None:
        self.cleared_forms.append(form)
