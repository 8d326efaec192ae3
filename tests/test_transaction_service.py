from datetime import datetime, timezone
from decimal import Decimal

import pytest

from models.category import Direction
from models.outbox import ChangeTransactionImpact, OutboxAction
from network.errors import NoConnectivityError, ServerError, UnauthorizedError

from conftest import make_tx

DAY_START = datetime(2025, 7, 14, tzinfo=timezone.utc)
DAY_END = datetime(2025, 7, 14, 23, 59, 59, tzinfo=timezone.utc)


def _impacts(services) -> list[Decimal]:
    return [
        e.change.delta for e in services.engine._account_outbox.all_entries()
        if isinstance(e.change, ChangeTransactionImpact)
    ]


@pytest.mark.asyncio
async def test_online_add_writes_through(services, api):
    created = await services.transactions.add_transaction(make_tx(0, "42"), Direction.OUTCOME)

    assert created.id == 101
    assert services.engine._tx_mirror.get_all() == [created]
    assert services.engine.pending_count() == 0


@pytest.mark.asyncio
async def test_offline_add_is_visible_in_offline_listing(services, api):
    api.offline = True

    local = await services.transactions.add_transaction(make_tx(0, "42"), Direction.OUTCOME)
    listed = await services.transactions.get_transactions(DAY_START, DAY_END)

    assert local.id < 0
    assert local in listed
    assert _impacts(services) == [Decimal("-42")]


@pytest.mark.asyncio
async def test_offline_income_add_raises_balance(services, api):
    api.offline = True
    await services.transactions.add_transaction(make_tx(0, "500", category_id=1), Direction.INCOME)
    assert _impacts(services) == [Decimal("500")]


@pytest.mark.asyncio
@pytest.mark.parametrize("error", [UnauthorizedError(), ServerError(500)])
async def test_non_connectivity_errors_propagate_without_queueing(services, api, error):
    api.errors["create_transaction"] = error

    with pytest.raises(type(error)):
        await services.transactions.add_transaction(make_tx(0), Direction.OUTCOME)

    assert services.engine.pending_count() == 0
    assert services.engine._tx_mirror.get_all() == []


@pytest.mark.asyncio
async def test_offline_edit_queues_difference(services, api):
    api.offline = True

    await services.transactions.edit_transaction(make_tx(5, "80"), Decimal("100"), Direction.OUTCOME)

    [entry] = services.engine._tx_outbox.all_entries()
    assert entry.action is OutboxAction.UPDATE
    assert entry.transaction.amount == Decimal("80")
    assert _impacts(services) == [Decimal("20")]


@pytest.mark.asyncio
async def test_offline_delete_reverses_prior_contribution(services, api):
    api.offline = True

    await services.transactions.delete_transaction(5, Decimal("30"), Direction.OUTCOME)
    await services.transactions.delete_transaction(6, Decimal("70"), Direction.INCOME)

    entries = services.engine._tx_outbox.all_entries()
    assert [(e.action, e.transaction.id) for e in entries] == [
        (OutboxAction.DELETE, 5), (OutboxAction.DELETE, 6),
    ]
    assert _impacts(services) == [Decimal("30"), Decimal("-70")]


@pytest.mark.asyncio
async def test_online_listing_refreshes_mirror_and_flushes_outbox(services, api):
    mirror = services.engine._tx_mirror
    mirror.upsert(make_tx(9, "1"))
    api.transactions = {1: make_tx(1, "10")}
    services.engine._tx_outbox.append(OutboxAction.CREATE, make_tx(-1, "5"))

    listed = await services.transactions.get_transactions(DAY_START, DAY_END)

    assert [tx.id for tx in listed] == [1]
    assert {tx.id for tx in mirror.get_all()} == {1, 101}
    assert services.engine.pending_count() == 0


@pytest.mark.asyncio
async def test_offline_listing_without_account_uses_mirror(services, api):
    api.offline = True
    services.engine._tx_mirror.upsert(make_tx(3, "15"))

    listed = await services.transactions.get_transactions()

    assert [tx.id for tx in listed] == [3]


@pytest.mark.asyncio
async def test_online_delete_removes_from_mirror(services, api):
    created = await services.transactions.add_transaction(make_tx(0), Direction.OUTCOME)

    await services.transactions.delete_transaction(created.id, created.amount, Direction.OUTCOME)

    assert services.engine._tx_mirror.get_all() == []
    assert api.transactions == {}


@pytest.mark.asyncio
async def test_offline_listing_survives_missing_account(services, api):
    api.offline = True
    with pytest.raises(NoConnectivityError):
        await services.accounts.get_account()
    assert await services.transactions.get_transactions() == []
