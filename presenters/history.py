from datetime import datetime, tzinfo
from decimal import Decimal
from typing import Callable

from models.category import Direction
from presenters.base import Presenter
from services.account_service import AccountService
from services.category_service import CategoryService
from services.report_service import HistoryItem, ReportService
from services.transaction_service import TransactionService
from utils.constants import HISTORY_DEFAULT_MONTHS
from utils.currency import symbol_for
from utils.date_helpers import default_history_period, now_utc


class HistoryPresenter(Presenter):
    """Transactions of one direction over a user-chosen period, with the
    per-item shares the analysis view shows."""

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
        self._report = ReportService(tz)
        today = clock().astimezone(tz).date()
        self.start, self.end = default_history_period(today, tz, HISTORY_DEFAULT_MONTHS)
        self.sort_mode = "date"
        self.items: list[HistoryItem] = []
        self.total = Decimal("0")
        self.symbol = ""

    async def load(self):
        self.items = []
        self.total = Decimal("0")
        async with self._busy():
            transactions = await self._transactions.get_transactions(self.start, self.end)
            categories = await self._categories.get_by_direction(self.direction)
            account = await self._accounts.get_account()

            paired = ReportService.pair_with_categories(transactions, categories)
            self.items = ReportService.sort_items(paired, self.sort_mode)
            self.total = ReportService.total(self.items)
            self.symbol = symbol_for(account.currency)

    async def set_start(self, start: datetime):
        self.start, self.end = self._report.clamp_period(start, self.end, moved="start")
        await self.load()

    async def set_end(self, end: datetime):
        self.start, self.end = self._report.clamp_period(self.start, end, moved="end")
        await self.load()

    def set_sort_mode(self, mode: str):
        self.items = ReportService.sort_items(self.items, mode)
        self.sort_mode = mode

    def share_of(self, item: HistoryItem) -> str:
        return ReportService.percentage(item[0].amount, self.total)
