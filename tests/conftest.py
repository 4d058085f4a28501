"""
Shared test fixtures

Provides an in-process fake of the banking REST API (FastAPI) that the
client talks to through httpx.ASGITransport.
"""

from typing import Dict, List, Tuple

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI, HTTPException, Request, Response
from pydantic import BaseModel

from banking_client.app import BankingClient
from banking_client.gateway import ApiGateway
from banking_client.presentation import RecordingPresenter

API_BASE_URL = "http://bank.test/api/v1/banking"
API_ROOT_URL = "http://bank.test"


class FakeBank:
    """In-memory state behind the fake API"""

    def __init__(self):
        self.users: Dict[str, dict] = {}
        self.requests: List[Tuple[str, str]] = []
        self.healthy = True

    def add_user(self, username: str, password: str, balance: float = 0.0, transactions=None):
        self.users[username] = {
            "password": password,
            "balance": balance,
            "transactions": list(transactions or [])
        }

    def paths(self) -> List[str]:
        return [path for _method, path in self.requests]


class Credentials(BaseModel):
    username: str
    password: str


class AmountBody(Credentials):
    amount: float


def create_fake_bank_app(bank: FakeBank) -> FastAPI:
    app = FastAPI()
    prefix = "/api/v1/banking"

    @app.middleware("http")
    async def record_requests(request: Request, call_next):
        bank.requests.append((request.method, request.url.path))
        return await call_next(request)

    def authenticate(body: Credentials) -> dict:
        user = bank.users.get(body.username)
        if user is None or user["password"] != body.password:
            raise HTTPException(status_code=401, detail="Invalid credentials")
        return user

    @app.post(f"{prefix}/register")
    def register(body: Credentials):
        if body.username in bank.users:
            raise HTTPException(status_code=409, detail="User already exists")
        bank.add_user(body.username, body.password)
        return Response(status_code=201)

    @app.post(f"{prefix}/login")
    def login(body: Credentials):
        user = authenticate(body)
        return {"username": body.username, "balance": user["balance"]}

    @app.post(f"{prefix}/deposit")
    def deposit(body: AmountBody):
        user = authenticate(body)
        if body.amount <= 0:
            raise HTTPException(status_code=400, detail="Invalid amount")
        user["balance"] += body.amount
        user["transactions"].append({"type": "DEPOSIT", "amount": body.amount, "timestamp": "2024-01-15T10:30:00"})
        return {"type": "DEPOSIT", "amount": body.amount, "newBalance": user["balance"]}

    @app.post(f"{prefix}/withdraw")
    def withdraw(body: AmountBody):
        user = authenticate(body)
        if body.amount <= 0 or body.amount > user["balance"]:
            raise HTTPException(status_code=400, detail="Insufficient funds")
        user["balance"] -= body.amount
        user["transactions"].append({"type": "WITHDRAWAL", "amount": body.amount, "timestamp": "2024-01-16T09:00:00"})
        return {"type": "WITHDRAWAL", "amount": body.amount, "newBalance": user["balance"]}

    @app.post(f"{prefix}/balance")
    def balance(body: Credentials):
        user = authenticate(body)
        return {"username": body.username, "balance": user["balance"]}

    @app.post(f"{prefix}/transactions")
    def transactions(body: Credentials):
        user = authenticate(body)
        return user["transactions"]

    @app.get("/actuator/health")
    def health():
        if not bank.healthy:
            raise HTTPException(status_code=503, detail="DOWN")
        return {"status": "UP"}

    return app


@pytest.fixture
def bank():
    """Fake bank with one funded user, alice/pw"""
    fake = FakeBank()
    fake.add_user("alice", "pw", balance=100.0)
    return fake


@pytest.fixture
def transport(bank):
    return httpx.ASGITransport(app=create_fake_bank_app(bank))


@pytest_asyncio.fixture
async def gateway(transport):
    gateway = ApiGateway(API_BASE_URL, transport=transport)
    yield gateway
    await gateway.aclose()


@pytest.fixture
def presenter():
    return RecordingPresenter()


@pytest_asyncio.fixture
async def client(transport, presenter):
    client = BankingClient(ApiGateway(API_BASE_URL, transport=transport), presenter=presenter)
    yield client
    await client.close()
