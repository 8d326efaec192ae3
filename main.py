import argparse
import asyncio
import logging
import sys
from dataclasses import dataclass
from datetime import datetime, tzinfo

from database.db_manager import DatabaseManager
from database.account_dao import AccountDAO
from database.transaction_dao import TransactionDAO
from database.category_dao import CategoryDAO
from database.outbox_dao import AccountOutboxDAO, TransactionOutboxDAO

from models.category import Direction
from network.api import FinanceAPI
from network.client import NetworkClient
from network.errors import NetworkError

from presenters.account import AccountPresenter
from presenters.base import Presenter
from presenters.categories import CategoriesPresenter
from presenters.history import HistoryPresenter
from presenters.transaction_edit import TransactionEditPresenter
from presenters.transactions_list import TransactionsListPresenter

from services.account_service import AccountService
from services.category_service import CategoryService
from services.reconciliation import SyncEngine
from services.report_service import HistoryItem
from services.temp_id_generator import TemporaryIdGenerator
from services.transaction_service import TransactionService

from utils.app_config import Settings, load_settings, set_value
from utils.constants import APP_NAME, QUERY_DATE_FORMAT, SORT_MODES
from utils.currency import Currency, format_currency
from utils.date_helpers import get_timezone, parse_iso8601
from utils.logging_config import setup_logging

logger = logging.getLogger(__name__)


@dataclass
class Services:
    engine: SyncEngine
    accounts: AccountService
    transactions: TransactionService
    categories: CategoryService
    tz: tzinfo


def build_services(db: DatabaseManager, api: FinanceAPI, tz: tzinfo) -> Services:
    # ── DAOs ─────────────────────────────────────────────────────────────────
    account_dao = AccountDAO(db)
    tx_dao = TransactionDAO(db)
    category_dao = CategoryDAO(db)
    tx_outbox = TransactionOutboxDAO(db)
    account_outbox = AccountOutboxDAO(db)

    # ── Services ─────────────────────────────────────────────────────────────
    engine = SyncEngine(api, tx_dao, tx_outbox, account_dao, account_outbox)
    account_svc = AccountService(api, account_dao, account_outbox, engine)
    tx_svc = TransactionService(
        api, tx_dao, tx_outbox, account_outbox, TemporaryIdGenerator(db), account_svc, engine
    )
    category_svc = CategoryService(api, category_dao)
    return Services(engine, account_svc, tx_svc, category_svc, tz)


# ── Commands ─────────────────────────────────────────────────────────────────

def _direction(args) -> Direction:
    return Direction.INCOME if args.income else Direction.OUTCOME


def _report_error(presenter: Presenter) -> int:
    if presenter.error:
        print(f"Error: {presenter.error}", file=sys.stderr)
        return 1
    return 0


def _parse_day(value: str, tz: tzinfo) -> datetime:
    return datetime.strptime(value, QUERY_DATE_FORMAT).replace(tzinfo=tz)


def _print_items(items: list[HistoryItem], symbol: str, tz: tzinfo, share=None):
    for tx, category in items:
        line = (
            f"{tx.transaction_date.astimezone(tz).strftime('%Y-%m-%d %H:%M')}  "
            f"{category.emoji} {category.name:<20} "
            f"{format_currency(tx.amount, symbol):>16}"
        )
        if share is not None:
            line += f"  {share((tx, category)):>6}"
        if tx.comment:
            line += f"  {tx.comment}"
        if tx.is_provisional:
            line += "  (not synced)"
        print(line)


async def cmd_sync(svc: Services, args) -> int:
    report = await svc.engine.sync_backups()
    print(
        f"Replayed {report.replayed}, failed {report.failed}, "
        f"account {'pushed' if report.account_pushed else 'unchanged'}; "
        f"{svc.engine.pending_count()} pending."
    )
    return 0 if report.clean else 1


async def cmd_account(svc: Services, args) -> int:
    presenter = AccountPresenter(svc.accounts)
    await presenter.load()
    if presenter.error:
        return _report_error(presenter)
    if args.balance is not None or args.currency is not None:
        if args.balance is not None:
            presenter.set_balance_text(args.balance)
        if args.currency is not None:
            presenter.currency = Currency(args.currency)
        await presenter.update_account()
        if presenter.error:
            return _report_error(presenter)
    account = presenter.account
    print(f"{account.name}: {format_currency(account.balance, presenter.symbol)} ({presenter.currency_name or account.currency})")
    return 0


async def cmd_today(svc: Services, args) -> int:
    presenter = TransactionsListPresenter(
        _direction(args), svc.transactions, svc.categories, svc.accounts, svc.tz
    )
    await presenter.load()
    if presenter.error:
        return _report_error(presenter)
    _print_items(presenter.items, presenter.symbol, svc.tz)
    print(f"Total: {format_currency(presenter.total, presenter.symbol)}")
    return 0


async def cmd_history(svc: Services, args) -> int:
    presenter = HistoryPresenter(
        _direction(args), svc.transactions, svc.categories, svc.accounts, svc.tz
    )
    presenter.sort_mode = args.sort
    if args.start:
        await presenter.set_start(_parse_day(args.start, svc.tz))
    if args.end:
        await presenter.set_end(_parse_day(args.end, svc.tz))
    if not (args.start or args.end):
        await presenter.load()
    if presenter.error:
        return _report_error(presenter)
    print(f"{presenter.start:%Y-%m-%d} .. {presenter.end:%Y-%m-%d}")
    _print_items(presenter.items, presenter.symbol, svc.tz, share=presenter.share_of)
    print(f"Total: {format_currency(presenter.total, presenter.symbol)}")
    return 0


async def cmd_categories(svc: Services, args) -> int:
    presenter = CategoriesPresenter(svc.categories)
    await presenter.load()
    if presenter.error:
        return _report_error(presenter)
    presenter.apply_search(args.search or "")
    for category in presenter.items:
        print(f"{category.id:>4}  {category.emoji} {category.name} ({category.direction.value})")
    return 0


async def cmd_add(svc: Services, args) -> int:
    direction = _direction(args)
    presenter = TransactionEditPresenter(direction, svc.transactions, svc.categories, svc.accounts)
    await presenter.load()
    if presenter.error:
        return _report_error(presenter)
    presenter.selected_category = next(
        (c for c in presenter.categories if c.id == args.category), None
    )
    presenter.set_amount_text(args.amount)
    presenter.comment = args.comment or ""
    if args.date:
        presenter.transaction_date = parse_iso8601(args.date)
    if not await presenter.save():
        if presenter.missing_fields:
            print("Error: a valid amount and a category of this direction are required.", file=sys.stderr)
            return 2
        return _report_error(presenter)
    print("Saved.")
    return 0


COMMANDS = {
    "sync": cmd_sync,
    "account": cmd_account,
    "today": cmd_today,
    "history": cmd_history,
    "categories": cmd_categories,
    "add": cmd_add,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="finance", description=f"{APP_NAME}: offline-first ledger client")
    parser.add_argument("--log-file", help="also write a debug log to this file")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("sync", help="push queued offline changes to the server")

    account = sub.add_parser("account", help="show or update the bank account")
    account.add_argument("--balance", help="new balance")
    account.add_argument("--currency", choices=[c.value for c in Currency])

    for name, help_text in (("today", "today's transactions"), ("history", "transactions over a period")):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("--income", action="store_true", help="income instead of expenses")
        if name == "history":
            p.add_argument("--from", dest="start", help="start date, YYYY-MM-DD")
            p.add_argument("--to", dest="end", help="end date, YYYY-MM-DD")
            p.add_argument("--sort", choices=SORT_MODES, default="date")

    categories = sub.add_parser("categories", help="list categories")
    categories.add_argument("--search", help="fuzzy name filter")

    add = sub.add_parser("add", help="record a transaction")
    add.add_argument("amount")
    add.add_argument("--category", type=int, required=True)
    add.add_argument("--income", action="store_true")
    add.add_argument("--comment")
    add.add_argument("--date", help="ISO-8601 timestamp, default now")

    config = sub.add_parser("config", help="store a setting in the config file")
    config.add_argument("key", choices=["base_url", "token", "data_folder", "timezone", "log_level"])
    config.add_argument("value", nargs="?", help="omit to remove the key")
    return parser


async def run(settings: Settings, args) -> int:
    db = DatabaseManager.open(settings.data_folder)
    try:
        async with NetworkClient(settings.base_url, settings.token) as client:
            svc = build_services(db, FinanceAPI(client), get_timezone(settings.timezone))
            return await COMMANDS[args.command](svc, args)
    finally:
        db.close()


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    if args.command == "config":
        set_value(args.key, args.value)
        return 0

    settings = load_settings()
    setup_logging(settings.log_level, args.log_file)
    if not settings.token:
        logger.warning("No API token configured; requests will be unauthorized")
    try:
        return asyncio.run(run(settings, args))
    except NetworkError as exc:
        print(f"Error: {exc.message}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())
