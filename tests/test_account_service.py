from decimal import Decimal

import pytest

from models.outbox import ChangeBalance, ChangeCurrency
from network.errors import NoConnectivityError, UnauthorizedError
from services.account_service import AccountNotFoundError

from conftest import make_account


@pytest.mark.asyncio
async def test_get_account_writes_through(services, api):
    api.accounts = [make_account("250", "USD")]

    account = await services.accounts.get_account()

    assert account.balance == Decimal("250")
    assert services.engine._account_mirror.get_current() == account


@pytest.mark.asyncio
async def test_empty_server_list_is_not_found(services, api):
    api.accounts = []
    with pytest.raises(AccountNotFoundError):
        await services.accounts.get_account()


@pytest.mark.asyncio
async def test_offline_account_is_folded(services, api):
    services.engine._account_mirror.upsert(make_account("100", "RUB"))
    services.engine._account_outbox.add_transaction_impact(Decimal("-40"))
    api.offline = True

    account = await services.accounts.get_account()

    assert account.balance == Decimal("60")


@pytest.mark.asyncio
async def test_offline_without_mirror_propagates(services, api):
    api.offline = True
    with pytest.raises(NoConnectivityError):
        await services.accounts.get_account()


@pytest.mark.asyncio
async def test_offline_update_queues_difference_from_folded_balance(services, api):
    services.engine._account_mirror.upsert(make_account("100", "RUB"))
    services.engine._account_outbox.add_transaction_impact(Decimal("-20"))
    api.offline = True

    projected = await services.accounts.update_account(Decimal("500"), "USD")

    assert (projected.balance, projected.currency) == (Decimal("500"), "USD")
    changes = [e.change for e in services.engine._account_outbox.all_entries()]
    assert changes[1:] == [ChangeBalance(Decimal("420")), ChangeCurrency("USD")]
    assert (await services.accounts.get_account()).balance == Decimal("500")


@pytest.mark.asyncio
async def test_online_update_pushes_and_mirrors(services, api):
    updated = await services.accounts.update_account(Decimal("75.5"), "EUR")

    [(_, pushed)] = api.called("update_account")
    assert (pushed.balance, pushed.currency, pushed.name) == (Decimal("75.5"), "EUR", "Main")
    assert services.engine._account_mirror.get_current() == updated
    assert services.engine.pending_count() == 0


@pytest.mark.asyncio
async def test_unauthorized_update_is_not_queued(services, api):
    services.engine._account_mirror.upsert(make_account())
    api.errors["update_account"] = UnauthorizedError()

    with pytest.raises(UnauthorizedError):
        await services.accounts.update_account(Decimal("1"), "RUB")

    assert services.engine.pending_count() == 0


@pytest.mark.asyncio
async def test_online_update_supersedes_offline_changes(services, api):
    await services.accounts.get_account()
    api.offline = True
    await services.accounts.update_account(Decimal("500"), "USD")
    api.offline = False

    await services.accounts.update_account(Decimal("600"), "EUR")
    await services.engine.sync_backups()

    assert (api.accounts[0].balance, api.accounts[0].currency) == (Decimal("600"), "EUR")
    assert services.engine._account_outbox.count() == 0
    assert services.engine._account_mirror.get_current().currency == "EUR"


@pytest.mark.asyncio
async def test_current_account_id_does_not_touch_the_mirror(services, api):
    assert await services.accounts.get_current_account_id() == 1
    assert services.engine._account_mirror.get_current() is None


@pytest.mark.asyncio
async def test_current_account_id_offline_uses_the_mirror(services, api):
    services.engine._account_mirror.upsert(make_account())
    api.offline = True

    assert await services.accounts.get_current_account_id() == 1
