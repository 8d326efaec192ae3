import json
from datetime import datetime, timezone
from decimal import Decimal

import httpx
import pytest

from models.account import BankAccount
from models.category import Direction
from network.api import FinanceAPI
from network.client import NetworkClient
from network.errors import (
    DecodeError,
    ErrorKind,
    NoConnectivityError,
    ServerError,
    UnauthorizedError,
    UnknownNetworkError,
    classify,
)
from network.schemas import AccountResponse
from utils.constants import FALLBACK_EMOJI

from conftest import make_tx

BASE_URL = "https://finance.example.com/api/v1/"

TX_DETAIL = {
    "id": 7,
    "account": {"id": 1, "name": "Main", "balance": "1000.00", "currency": "RUB"},
    "category": {"id": 2, "name": "Groceries", "emoji": "🛒", "isIncome": False},
    "amount": "150.50",
    "transactionDate": "2025-07-14T10:00:00.000Z",
    "comment": "weekly",
    "createdAt": "2025-07-14T10:00:01.123Z",
    "updatedAt": "2025-07-14T10:00:01.123Z",
}


def _client(handler) -> NetworkClient:
    return NetworkClient(BASE_URL, "secret", transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_sends_bearer_token_and_decodes():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["auth"] = request.headers["Authorization"]
        seen["url"] = str(request.url)
        return httpx.Response(200, json=[{"id": 1, "name": "Main", "balance": "12.30", "currency": "RUB"}])

    async with _client(handler) as client:
        accounts = await FinanceAPI(client).fetch_accounts()

    assert seen == {"auth": "Bearer secret", "url": BASE_URL + "accounts"}
    assert accounts == [BankAccount(id=1, name="Main", balance=Decimal("12.30"), currency="RUB")]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "status, error",
    [(401, UnauthorizedError), (404, ServerError), (500, ServerError), (302, UnknownNetworkError)],
)
async def test_status_mapping(status, error):
    async with _client(lambda request: httpx.Response(status)) as client:
        with pytest.raises(error):
            await client.request("GET", "accounts", response_type=list[AccountResponse])


@pytest.mark.asyncio
async def test_server_error_keeps_code():
    async with _client(lambda request: httpx.Response(503)) as client:
        with pytest.raises(ServerError) as info:
            await client.request("GET", "accounts")
    assert info.value.code == 503
    assert classify(info.value) is ErrorKind.SERVER_ERROR


@pytest.mark.asyncio
async def test_no_content_is_fine_only_when_nothing_expected():
    async with _client(lambda request: httpx.Response(204)) as client:
        assert await FinanceAPI(client).delete_transaction(7) is None
        with pytest.raises(DecodeError):
            await client.request("GET", "accounts", response_type=list[AccountResponse])


@pytest.mark.asyncio
async def test_malformed_body_is_decode_error():
    async with _client(lambda request: httpx.Response(200, json={"unexpected": True})) as client:
        with pytest.raises(DecodeError):
            await FinanceAPI(client).fetch_accounts()


@pytest.mark.asyncio
async def test_transport_failure_is_no_connectivity():
    def handler(request):
        raise httpx.ConnectError("unreachable", request=request)

    async with _client(handler) as client:
        with pytest.raises(NoConnectivityError) as info:
            await client.request("GET", "accounts")
    assert classify(info.value) is ErrorKind.NO_CONNECTIVITY


@pytest.mark.asyncio
async def test_timeout_is_no_connectivity():
    def handler(request):
        raise httpx.ReadTimeout("slow", request=request)

    async with _client(handler) as client:
        with pytest.raises(NoConnectivityError):
            await client.request("GET", "accounts")


@pytest.mark.asyncio
async def test_create_sends_decimal_string_without_id():
    body = {}

    def handler(request):
        body.update(json.loads(request.content))
        return httpx.Response(201, json={
            "id": 55, "accountId": 1, "categoryId": 2, "amount": "0.10",
            "transactionDate": "2025-07-14T10:00:00.000Z", "comment": None,
            "createdAt": "2025-07-14T10:00:00.000Z", "updatedAt": "2025-07-14T10:00:00.000Z",
        })

    async with _client(handler) as client:
        created = await FinanceAPI(client).create_transaction(make_tx(-3, "0.10"))

    assert body == {
        "accountId": 1,
        "categoryId": 2,
        "amount": "0.10",
        "transactionDate": "2025-07-14T10:00:00.000Z",
        "comment": "",
    }
    assert created.id == 55
    assert created.amount == Decimal("0.10")


@pytest.mark.asyncio
async def test_period_query_parameters_and_nested_response():
    seen = {}

    def handler(request):
        seen["path"] = request.url.path
        seen["params"] = dict(request.url.params)
        return httpx.Response(200, json=[TX_DETAIL])

    start = datetime(2025, 7, 1, tzinfo=timezone.utc)
    async with _client(handler) as client:
        [tx] = await FinanceAPI(client).fetch_transactions(1, start=start)

    assert seen["path"] == "/api/v1/transactions/account/1/period"
    assert seen["params"] == {"startDate": "2025-07-01"}
    assert (tx.account_id, tx.category_id, tx.amount) == (1, 2, Decimal("150.50"))
    assert tx.transaction_date == datetime(2025, 7, 14, 10, tzinfo=timezone.utc)
    assert tx.created_at.microsecond == 123000


@pytest.mark.asyncio
async def test_category_direction_path_and_emoji_fallback():
    seen = {}

    def handler(request):
        seen["path"] = request.url.path
        return httpx.Response(200, json=[{"id": 1, "name": "Salary", "emoji": "", "isIncome": True}])

    async with _client(handler) as client:
        [category] = await FinanceAPI(client).fetch_categories_by_direction(Direction.INCOME)

    assert seen["path"] == "/api/v1/categories/type/true"
    assert category.emoji == FALLBACK_EMOJI
    assert category.direction is Direction.INCOME


@pytest.mark.asyncio
async def test_account_update_body():
    body = {}

    def handler(request):
        body.update(json.loads(request.content))
        return httpx.Response(200, json={"id": 1, "name": "Main", "balance": "99.90", "currency": "USD"})

    account = BankAccount(id=1, name="Main", balance=Decimal("99.90"), currency="USD")
    async with _client(handler) as client:
        updated = await FinanceAPI(client).update_account(account)

    assert body == {"name": "Main", "balance": "99.90", "currency": "USD"}
    assert updated == account
