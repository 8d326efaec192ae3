from datetime import datetime, tzinfo
from decimal import Decimal
from typing import Callable

from models.category import Direction
from presenters.base import Presenter
from services.account_service import AccountService
from services.category_service import CategoryService
from services.report_service import HistoryItem, ReportService
from services.transaction_service import TransactionService
from utils.currency import symbol_for
from utils.date_helpers import day_range, now_utc


class TransactionsListPresenter(Presenter):
    """Today's transactions of one direction."""

    def __init__(
        self,
        direction: Direction,
        transactions: TransactionService,
        categories: CategoryService,
        accounts: AccountService,
        tz: tzinfo,
        clock: Callable[[], datetime] = now_utc,
    ):
        super().__init__()
        self.direction = direction
        self._transactions = transactions
        self._categories = categories
        self._accounts = accounts
        self._tz = tz
        self._clock = clock
        self.items: list[HistoryItem] = []
        self.total = Decimal("0")
        self.symbol = ""

    async def load(self):
        self.items = []
        self.total = Decimal("0")
        async with self._busy():
            start, end = day_range(self._clock(), self._tz)
            transactions = await self._transactions.get_transactions(start, end)
            categories = await self._categories.get_by_direction(self.direction)
            account = await self._accounts.get_account()

            self.items = ReportService.sort_items(
                ReportService.pair_with_categories(transactions, categories), "date"
            )
            self.total = ReportService.total(self.items)
            self.symbol = symbol_for(account.currency)
