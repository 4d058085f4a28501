"""
Banking Client Application Module

BankingClient is the single dispatch point for user actions. It owns the
session store, view controller, message bus and health monitor, and is
the only place their state is mutated in response to the user.
"""

import math
from decimal import Decimal, InvalidOperation
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple

import httpx

from .config import ClientConfig, get_config
from .errors import BankingClientError, NotAuthenticatedError, ValidationError
from .gateway import ApiGateway
from .health import HealthMonitor
from .logging_config import get_logger
from .messages import MessageBus, Severity
from .presentation import Action, ActionEvent, Form, LogPresenter, PageState, Presenter
from .rendering import DisplayRow, format_amount, format_balance, render
from .session import SessionStore
from .views import SectionController, ViewState

logger = get_logger("banking_client.app")


def validate_credentials(username: Any, password: Any) -> Tuple[str, str]:
    """Trimmed username and raw password, both required"""
    username = (username or "").strip() if isinstance(username, str) else ""
    password = password if isinstance(password, str) else ""
    if not username or not password:
        raise ValidationError("Please enter both username and password")
    return username, password


def parse_amount(raw: Any) -> Decimal:
    """Strictly positive, finite amount from user input"""
    if isinstance(raw, bool) or raw is None:
        raise ValidationError("Please enter a valid amount")
    try:
        amount = Decimal(raw.strip()) if isinstance(raw, str) else Decimal(str(raw))
    except (InvalidOperation, ValueError, TypeError):
        raise ValidationError("Please enter a valid amount")
    if not amount.is_finite() or amount <= 0:
        raise ValidationError("Please enter a valid amount")
    # Sent as a JSON number, so it must survive the trip through float
    as_float = float(amount)
    if not math.isfinite(as_float) or as_float <= 0:
        raise ValidationError("Please enter a valid amount")
    return amount


class BankingClient:
    """Client-side banking page: session, view state, notifications, API status"""

    def __init__(
        self,
        gateway: ApiGateway,
        presenter: Optional[Presenter] = None,
        message_ttl_seconds: float = 5.0,
        health_poll_interval_seconds: float = 30.0,
    ):
        self.gateway = gateway
        self.presenter = presenter or LogPresenter()
        self.sessions = SessionStore(gateway)
        self.views = SectionController()
        self.messages = MessageBus(ttl_seconds=message_ttl_seconds)
        self.health = HealthMonitor(gateway, interval_seconds=health_poll_interval_seconds)
        self._transaction_rows: Tuple[DisplayRow, ...] = ()

        self.views.add_listener(self._on_view_change)
        self.messages.add_listener(lambda _messages: self.render())
        self.health.add_listener(lambda _status: self.render())

        self._handlers: Dict[Action, Callable[[ActionEvent], Awaitable[bool]]] = {
            Action.REGISTER: lambda e: self.register(e.get("username"), e.get("password")),
            Action.LOGIN: lambda e: self.login(e.get("username"), e.get("password")),
            Action.LOGOUT: lambda e: self.logout(),
            Action.DEPOSIT: lambda e: self.deposit(e.get("amount")),
            Action.WITHDRAW: lambda e: self.withdraw(e.get("amount")),
            Action.BALANCE: lambda e: self.refresh_balance(),
            Action.TRANSACTIONS: lambda e: self.load_transactions(),
            Action.HIDE_TRANSACTIONS: lambda e: self.hide_transactions(),
        }

    # Lifecycle

    async def start(self) -> None:
        """Begin health polling and draw the initial (logged out) page"""
        self.health.start()
        self.render()

    async def close(self) -> None:
        """Tear down: the session does not survive the page"""
        await self.health.stop()
        self.messages.clear()
        self.sessions.logout()
        await self.gateway.aclose()

    async def __aenter__(self) -> "BankingClient":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    # Dispatch

    async def dispatch(self, event: ActionEvent) -> bool:
        """Handle one user action. Errors become messages, never exceptions."""
        handler = self._handlers[event.action]
        logger.debug(f"Dispatching {event.action.value}")
        return await handler(event)

    on_action = dispatch

    # Actions

    async def register(self, username: Any, password: Any) -> bool:
        try:
            username, password = validate_credentials(username, password)
            await self.sessions.register(username, password)
        except BankingClientError as e:
            return self._fail("Registration failed", e)
        self.messages.post("Registration successful! You can now login.", Severity.SUCCESS)
        self.presenter.clear_form(Form.LOGIN)
        self.render()
        return True

    async def login(self, username: Any, password: Any) -> bool:
        try:
            username, password = validate_credentials(username, password)
            session = await self.sessions.login(username, password)
        except BankingClientError as e:
            return self._fail("Login failed", e)
        self.views.on_login()
        self.messages.post(f"Welcome back, {session.username}!", Severity.SUCCESS)
        self.presenter.clear_form(Form.LOGIN)
        self.render()
        return True

    async def logout(self) -> bool:
        if not self.sessions.logout():
            return False
        self.views.on_logout()
        self.messages.post("Logged out successfully", Severity.INFO)
        self.render()
        return True

    async def deposit(self, raw_amount: Any) -> bool:
        try:
            amount = parse_amount(raw_amount)
            await self.sessions.deposit(amount)
        except BankingClientError as e:
            return self._fail("Deposit failed", e)
        self.messages.post(f"Successfully deposited ${format_amount(amount)}", Severity.SUCCESS)
        self.presenter.clear_form(Form.DEPOSIT)
        self.render()
        return True

    async def withdraw(self, raw_amount: Any) -> bool:
        try:
            amount = parse_amount(raw_amount)
            await self.sessions.withdraw(amount)
        except BankingClientError as e:
            return self._fail("Withdrawal failed", e)
        self.messages.post(f"Successfully withdrew ${format_amount(amount)}", Severity.SUCCESS)
        self.presenter.clear_form(Form.WITHDRAW)
        self.render()
        return True

    async def refresh_balance(self) -> bool:
        try:
            await self.sessions.balance()
        except BankingClientError as e:
            return self._fail("Failed to get balance", e)
        self.messages.post("Balance updated", Severity.INFO)
        self.render()
        return True

    async def load_transactions(self) -> bool:
        try:
            credential = self.sessions.require_credential()
            transactions = await self.sessions.transactions()
        except BankingClientError as e:
            return self._fail("Failed to get transactions", e)

        if not self.sessions.holds(credential):
            # Logged out or logged in as someone else while the request was in flight
            logger.info("Discarding transaction history for a session that has ended")
            return False
        if not transactions:
            if self.views.state == ViewState.BANKING_WITH_TRANSACTIONS:
                self.views.hide_transactions()
            self.messages.post("No transactions found", Severity.INFO)
            self.render()
            return False

        self._transaction_rows = tuple(render(transactions))
        self.views.on_transactions_loaded()
        self.render()
        return True

    async def hide_transactions(self) -> bool:
        if self.views.state != ViewState.BANKING_WITH_TRANSACTIONS:
            return False
        self.views.hide_transactions()
        self.render()
        return True

    # Rendering

    def page_state(self) -> PageState:
        session = self.sessions.current()
        view = self.views.state
        return PageState(
            view=view,
            sections=self.views.visible_sections(),
            username=session.username if session else None,
            balance_text=format_balance(session.balance) if session else None,
            transactions=self._transaction_rows if view == ViewState.BANKING_WITH_TRANSACTIONS else (),
            messages=self.messages.visible(),
            api_status=self.health.status,
            api_url=self.gateway.api_root_url
        )

    def render(self) -> None:
        try:
            self.presenter.render(self.page_state())
        except Exception as e:
            logger.error(f"Presenter {type(self.presenter).__name__} failed to render: {e}")

    def _on_view_change(self, old_state: ViewState, new_state: ViewState) -> None:
        if new_state != ViewState.BANKING_WITH_TRANSACTIONS:
            self._transaction_rows = ()

    def _fail(self, failure_text: str, error: BankingClientError) -> bool:
        if isinstance(error, (ValidationError, NotAuthenticatedError)):
            text = str(error)
        else:
            text = f"{failure_text}: {error}"
        logger.warning(f"{failure_text}: {type(error).__name__}")
        self.messages.post(text, Severity.ERROR)
        self.render()
        return False


def create_client(
    config: Optional[ClientConfig] = None,
    presenter: Optional[Presenter] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> BankingClient:
    """Create a client wired from configuration"""
    config = config or get_config()
    gateway = ApiGateway(
        base_url=config.base_url,
        api_root_url=config.api_root_url,
        transport=transport
    )
    return BankingClient(
        gateway,
        presenter=presenter,
        message_ttl_seconds=config.message_ttl_seconds,
        health_poll_interval_seconds=config.health_poll_interval_seconds
    )
