"""
Session Management Module

The banking API issues no token, so the submitted username and password
are resent on every authenticated call. They live in a Credential owned
by the SessionStore for exactly as long as the user is logged in.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional

from .errors import NotAuthenticatedError
from .logging_config import get_logger, log_action
from .gateway import ApiGateway
from .schemas import TransactionRecord

logger = get_logger("banking_client.session")


@dataclass(frozen=True)
class Credential:
    """Username and password as submitted at login"""
    username: str
    password: str

    def __repr__(self) -> str:
        return f"Credential(username={self.username!r}, password='***')"


@dataclass(frozen=True)
class Session:
    """Authenticated session as seen by the client"""
    username: str  # display name returned by /login
    balance: Decimal  # last balance reported by the API
    credential: Credential
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class SessionStore:
    """Owns the single current session and the authenticated calls that need it"""

    def __init__(self, gateway: ApiGateway):
        self.gateway = gateway
        self._session: Optional[Session] = None

    def current(self) -> Optional[Session]:
        return self._session

    @property
    def is_authenticated(self) -> bool:
        return self._session is not None

    def require_credential(self) -> Credential:
        """Stored credential, or NotAuthenticatedError before any network call"""
        if self._session is None:
            raise NotAuthenticatedError()
        return self._session.credential

    async def register(self, username: str, password: str) -> None:
        """Create an account; never touches the current session"""
        await self.gateway.register(username, password)
        log_action(logger, "info", "User registered", username=username, action="register", endpoint="/register")

    async def login(self, username: str, password: str) -> Session:
        """Authenticate and replace whatever session was stored before

        Failures propagate unchanged and leave the store as it was.
        """
        candidate = Credential(username, password)
        response = await self.gateway.login(candidate.username, candidate.password)
        self._session = Session(
            username=response.username,
            balance=response.balance,
            credential=candidate
        )
        log_action(logger, "info", "Session started", username=response.username, action="login", endpoint="/login")
        return self._session

    def logout(self) -> bool:
        """Clear the session. Returns False when there was nothing to clear."""
        if self._session is None:
            return False
        username = self._session.username
        self._session = None
        log_action(logger, "info", "Session ended", username=username, action="logout")
        return True

    def update_balance(self, balance: Decimal) -> None:
        if self._session is not None:
            self._session = replace(self._session, balance=balance)

    async def deposit(self, amount: Decimal) -> Decimal:
        credential = self.require_credential()
        result = await self.gateway.deposit(credential.username, credential.password, amount)
        self._refresh(credential, result.new_balance)
        return result.new_balance

    async def withdraw(self, amount: Decimal) -> Decimal:
        credential = self.require_credential()
        result = await self.gateway.withdraw(credential.username, credential.password, amount)
        self._refresh(credential, result.new_balance)
        return result.new_balance

    async def balance(self) -> Decimal:
        credential = self.require_credential()
        result = await self.gateway.balance(credential.username, credential.password)
        self._refresh(credential, result.balance)
        return result.balance

    async def transactions(self) -> Optional[List[TransactionRecord]]:
        credential = self.require_credential()
        return await self.gateway.transactions(credential.username, credential.password)

    def holds(self, credential: Credential) -> bool:
        """True while the session that issued a call with this credential is still current"""
        return self._session is not None and self._session.credential == credential

    def _refresh(self, credential: Credential, balance: Decimal) -> None:
        # The session may have been replaced or cleared while the call was in flight
        if self.holds(credential):
            self.update_balance(balance)
