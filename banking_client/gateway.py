"""
API Gateway Module

Async REST client for the banking API. Stateless: every call carries
whatever credentials the caller hands it, and nothing about the request
outlives the call.
"""

import httpx
from decimal import Decimal
from typing import Any, List, Optional

from .config import DEFAULT_API_BASE_URL, API_PATH_SUFFIX
from .errors import HttpError, NetworkError, UnexpectedResponseError, ValidationError
from .logging_config import get_logger
from .schemas import (
    AmountRequest, BalanceResponse, CredentialsRequest, LoginResponse,
    TransactionRecord, TransactionResult, parse_model, parse_transactions
)

logger = get_logger("banking_client.gateway")

HEALTH_PATH = "/actuator/health"
MAX_DETAIL_LENGTH = 500


class ApiGateway:
    """HTTP gateway for the banking REST API"""

    def __init__(
        self,
        base_url: str = DEFAULT_API_BASE_URL,
        api_root_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        if api_root_url is None:
            api_root_url = self.base_url
            if api_root_url.endswith(API_PATH_SUFFIX):
                api_root_url = api_root_url[: -len(API_PATH_SUFFIX)]
        self.api_root_url = api_root_url.rstrip("/")
        # No client-side timeout: a hung request resolves whenever the transport does
        self._client = httpx.AsyncClient(timeout=None, transport=transport)

    async def call(self, endpoint: str, method: str = "GET", body: Optional[dict] = None) -> Any:
        """Perform one API call

        Args:
            endpoint: path relative to the API base URL, e.g. "/login"
            method: GET or POST
            body: JSON-serializable request body

        Returns:
            Parsed JSON when the response declares application/json, else None

        Raises:
            HttpError: non-success status
            NetworkError: the request never got a response
        """
        response = await self._send(method, f"{self.base_url}{endpoint}", endpoint, body)

        content_type = response.headers.get("content-type", "")
        if "application/json" not in content_type:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise UnexpectedResponseError(f"Invalid JSON from {endpoint}") from e

    async def check_health(self) -> None:
        """GET the liveness endpoint; any 2xx is healthy, failures raise like call()"""
        await self._send("GET", f"{self.api_root_url}{HEALTH_PATH}", HEALTH_PATH)

    async def _send(self, method: str, url: str, endpoint: str, body: Optional[dict] = None) -> httpx.Response:
        method = method.upper()
        headers = {}
        if body is not None:
            headers["Content-Type"] = "application/json"

        logger.debug(f"{method} {endpoint}")
        try:
            response = await self._client.request(method, url, json=body, headers=headers)
        except httpx.RequestError as e:
            logger.error(f"API call {method} {endpoint} failed: {type(e).__name__}: {e}")
            raise NetworkError(e) from e

        if not response.is_success:
            logger.warning(f"API call {method} {endpoint} returned {response.status_code}")
            detail = response.text[:MAX_DETAIL_LENGTH] or None
            raise HttpError(response.status_code, response.reason_phrase, detail)
        return response

    # Endpoint helpers

    async def register(self, username: str, password: str) -> None:
        body = CredentialsRequest(username=username, password=password).model_dump()
        await self.call("/register", "POST", body)

    async def login(self, username: str, password: str) -> LoginResponse:
        body = CredentialsRequest(username=username, password=password).model_dump()
        return parse_model(LoginResponse, await self.call("/login", "POST", body), "/login")

    async def deposit(self, username: str, password: str, amount: Decimal) -> TransactionResult:
        body = self._amount_body(username, password, amount)
        return parse_model(TransactionResult, await self.call("/deposit", "POST", body), "/deposit")

    async def withdraw(self, username: str, password: str, amount: Decimal) -> TransactionResult:
        body = self._amount_body(username, password, amount)
        return parse_model(TransactionResult, await self.call("/withdraw", "POST", body), "/withdraw")

    async def balance(self, username: str, password: str) -> BalanceResponse:
        body = CredentialsRequest(username=username, password=password).model_dump()
        return parse_model(BalanceResponse, await self.call("/balance", "POST", body), "/balance")

    async def transactions(self, username: str, password: str) -> Optional[List[TransactionRecord]]:
        """Transaction history, or None when the API answered with a non-array"""
        body = CredentialsRequest(username=username, password=password).model_dump()
        return parse_transactions(await self.call("/transactions", "POST", body))

    @staticmethod
    def _amount_body(username: str, password: str, amount: Decimal) -> dict:
        # The wire format is a JSON number; amounts a float cannot carry are rejected here
        try:
            return AmountRequest(username=username, password=password, amount=float(amount)).model_dump()
        except ValueError as e:
            raise ValidationError("Please enter a valid amount") from e

    async def aclose(self) -> None:
        """Close the HTTP client"""
        await self._client.aclose()

    async def __aenter__(self) -> "ApiGateway":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()
