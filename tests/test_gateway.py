"""
Tests for the API gateway
"""

import json
from decimal import Decimal

import httpx
import pytest

from banking_client.errors import HttpError, NetworkError, UnexpectedResponseError, ValidationError
from banking_client.gateway import ApiGateway
from conftest import API_BASE_URL


def recording_transport(response: httpx.Response, seen: list) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return response
    return httpx.MockTransport(handler)


class TestApiGatewayCall:
    """Test the generic call() contract"""

    @pytest.mark.asyncio
    async def test_post_serializes_body_as_json(self):
        """Test body is sent as JSON with a JSON content type"""
        seen = []
        gateway = ApiGateway(API_BASE_URL, transport=recording_transport(
            httpx.Response(200, json={"ok": True}), seen))

        result = await gateway.call("/login", "POST", {"username": "alice", "password": "pw"})

        assert result == {"ok": True}
        request = seen[0]
        assert request.method == "POST"
        assert str(request.url) == f"{API_BASE_URL}/login"
        assert request.headers["content-type"] == "application/json"
        assert json.loads(request.content) == {"username": "alice", "password": "pw"}
        await gateway.aclose()

    @pytest.mark.asyncio
    async def test_get_without_body(self):
        """Test no body and no content type are sent when body is absent"""
        seen = []
        gateway = ApiGateway(API_BASE_URL, transport=recording_transport(
            httpx.Response(200, json=[1, 2]), seen))

        assert await gateway.call("/anything") == [1, 2]
        assert seen[0].method == "GET"
        assert seen[0].content == b""
        assert "content-type" not in seen[0].headers
        await gateway.aclose()

    @pytest.mark.asyncio
    async def test_non_json_response_returns_none(self):
        """Test a success without a JSON content type yields None"""
        gateway = ApiGateway(API_BASE_URL, transport=recording_transport(
            httpx.Response(201, text="created"), []))

        assert await gateway.call("/register", "POST", {"username": "a", "password": "b"}) is None
        await gateway.aclose()

    @pytest.mark.asyncio
    async def test_http_error_carries_status(self):
        """Test non-2xx raises HttpError with status and status text"""
        gateway = ApiGateway(API_BASE_URL, transport=recording_transport(
            httpx.Response(404, text="no such endpoint"), []))

        with pytest.raises(HttpError) as exc_info:
            await gateway.call("/missing")

        assert exc_info.value.status == 404
        assert exc_info.value.status_text == "Not Found"
        assert exc_info.value.detail == "no such endpoint"
        assert str(exc_info.value) == "HTTP 404: Not Found"
        await gateway.aclose()

    @pytest.mark.asyncio
    async def test_transport_failure_raises_network_error(self):
        """Test connection failures surface as NetworkError"""
        def refuse(request):
            raise httpx.ConnectError("Connection refused", request=request)

        gateway = ApiGateway(API_BASE_URL, transport=httpx.MockTransport(refuse))

        with pytest.raises(NetworkError) as exc_info:
            await gateway.call("/login", "POST", {"username": "a", "password": "b"})

        assert isinstance(exc_info.value.cause, httpx.ConnectError)
        await gateway.aclose()

    @pytest.mark.asyncio
    async def test_invalid_json_body(self):
        """Test a JSON content type with an unparsable body"""
        gateway = ApiGateway(API_BASE_URL, transport=recording_transport(
            httpx.Response(200, content=b"{oops", headers={"content-type": "application/json"}), []))

        with pytest.raises(UnexpectedResponseError):
            await gateway.call("/balance", "POST", {})
        await gateway.aclose()

    def test_no_client_timeout(self):
        """Test the gateway enforces no request timeout of its own"""
        gateway = ApiGateway(API_BASE_URL)
        timeout = gateway._client.timeout
        assert timeout.connect is None
        assert timeout.read is None


class TestApiGatewayUrls:
    """Test base URL and API root handling"""

    def test_api_root_strips_versioned_path(self):
        gateway = ApiGateway("http://localhost:8080/api/v1/banking/")
        assert gateway.base_url == "http://localhost:8080/api/v1/banking"
        assert gateway.api_root_url == "http://localhost:8080"

    def test_explicit_api_root(self):
        gateway = ApiGateway("http://proxy/bank", api_root_url="http://proxy/")
        assert gateway.api_root_url == "http://proxy"

    @pytest.mark.asyncio
    async def test_health_check_uses_api_root(self):
        seen = []
        gateway = ApiGateway(API_BASE_URL, transport=recording_transport(
            httpx.Response(200, text="not json at all", headers={"content-type": "application/json"}), seen))

        await gateway.check_health()

        assert str(seen[0].url) == "http://bank.test/actuator/health"
        await gateway.aclose()


class TestEndpointHelpers:
    """Test typed helpers against the fake banking API"""

    @pytest.mark.asyncio
    async def test_login(self, gateway):
        response = await gateway.login("alice", "pw")
        assert response.username == "alice"
        assert response.balance == Decimal("100.0")

    @pytest.mark.asyncio
    async def test_login_rejected(self, gateway):
        with pytest.raises(HttpError) as exc_info:
            await gateway.login("alice", "wrong")
        assert exc_info.value.status == 401
        assert str(exc_info.value) == "HTTP 401: Unauthorized"

    @pytest.mark.asyncio
    async def test_register_has_no_body(self, gateway, bank):
        assert await gateway.register("bob", "secret") is None
        assert "bob" in bank.users

    @pytest.mark.asyncio
    async def test_deposit_and_withdraw(self, gateway):
        deposited = await gateway.deposit("alice", "pw", Decimal("50"))
        assert deposited.new_balance == Decimal("150.0")

        withdrawn = await gateway.withdraw("alice", "pw", Decimal("20.50"))
        assert withdrawn.new_balance == Decimal("129.5")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount", [Decimal("1e400"), Decimal("1e-400")])
    async def test_amount_without_json_number_is_rejected(self, gateway, bank, amount):
        with pytest.raises(ValidationError):
            await gateway.deposit("alice", "pw", amount)
        with pytest.raises(ValidationError):
            await gateway.withdraw("alice", "pw", amount)

        assert bank.requests == []

    @pytest.mark.asyncio
    async def test_balance(self, gateway):
        response = await gateway.balance("alice", "pw")
        assert response.balance == Decimal("100.0")

    @pytest.mark.asyncio
    async def test_transactions(self, gateway):
        assert await gateway.transactions("alice", "pw") == []

        await gateway.deposit("alice", "pw", Decimal("5"))
        history = await gateway.transactions("alice", "pw")

        assert len(history) == 1
        assert history[0].type == "DEPOSIT"
        assert history[0].amount == Decimal("5.0")
        assert history[0].timestamp == "2024-01-15T10:30:00"

    @pytest.mark.asyncio
    async def test_transactions_non_array(self):
        gateway = ApiGateway(API_BASE_URL, transport=recording_transport(
            httpx.Response(200, json={"transactions": []}), []))

        assert await gateway.transactions("alice", "pw") is None
        await gateway.aclose()

    @pytest.mark.asyncio
    async def test_malformed_login_response(self):
        gateway = ApiGateway(API_BASE_URL, transport=recording_transport(
            httpx.Response(200, json={"user": "alice"}), []))

        with pytest.raises(UnexpectedResponseError):
            await gateway.login("alice", "pw")
        await gateway.aclose()
