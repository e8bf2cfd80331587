import json
import os

os.environ.setdefault("MONDAY_API_TOKEN", "test-token")
os.environ.setdefault("MONDAY_BOARD_ID", "123456")
os.environ.setdefault("ENVIRONMENT", "development")

import httpx
import pytest
import pytest_asyncio

from crew_certs.main import app
from crew_certs.services.expiry_table import DEFAULT_SUBJECT_EXPIRY_DATES, get_expiry_table
from crew_certs.services.monday import MondayClient, get_board_client
from factories import grouped_board


class FakeBoardApi:
    """Records requests and answers with a canned board payload."""

    def __init__(self) -> None:
        self.payload: dict = grouped_board()
        self.status_code = 200
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, json=self.payload)

    def client(self, **kwargs) -> MondayClient:
        options = {
            "api_url": "https://api.monday.test/v2",
            "token": "test-token",
            "board_id": "123456",
        }
        options.update(kwargs)
        return MondayClient(transport=httpx.MockTransport(self.handler), **options)

    def last_body(self) -> dict:
        return json.loads(self.requests[-1].content)


@pytest.fixture
def board_api():
    return FakeBoardApi()


@pytest_asyncio.fixture
async def api_client(board_api):
    app.dependency_overrides[get_board_client] = lambda: board_api.client()
    app.dependency_overrides[get_expiry_table] = lambda: dict(DEFAULT_SUBJECT_EXPIRY_DATES)
    transport = httpx.ASGITransport(app=app)
    try:
        async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
            yield client
    finally:
        app.dependency_overrides.clear()
