from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Callable

from models.category import Category, Direction
from models.transaction import Transaction
from presenters.base import Presenter
from services.account_service import AccountService
from services.category_service import CategoryService
from services.report_service import HistoryItem
from services.transaction_service import TransactionService
from utils.date_helpers import now_utc


def _amount_chars(text: str) -> str:
    return "".join(ch for ch in text if ch.isdigit() or ch == ".")


def parse_amount(text: str) -> Decimal | None:
    """Digits with at most one decimal point; a leading point reads as
    '0.'. Returns None for anything else."""
    filtered = _amount_chars(text)
    if filtered.count(".") > 1 or filtered in ("", "."):
        return None
    if filtered.startswith("."):
        filtered = "0" + filtered
    try:
        return Decimal(filtered)
    except InvalidOperation:
        return None


class TransactionEditPresenter(Presenter):
    """Create form, or edit/delete form when given an existing item."""

    def __init__(
        self,
        direction: Direction,
        transactions: TransactionService,
        categories: CategoryService,
        accounts: AccountService,
        selected: HistoryItem | None = None,
        clock: Callable[[], datetime] = now_utc,
    ):
        super().__init__()
        self.direction = direction
        self._transactions = transactions
        self._categories = categories
        self._accounts = accounts
        self._clock = clock
        self.categories: list[Category] = []
        self.missing_fields = False

        if selected is not None:
            tx, category = selected
            self._transaction_id: int | None = tx.id
            self.amount: Decimal | None = tx.amount
            self.prev_amount: Decimal | None = tx.amount
            self.amount_text = str(tx.amount)
            self.transaction_date = tx.transaction_date
            self.comment = tx.comment or ""
            self.selected_category: Category | None = category
        else:
            self._transaction_id = None
            self.amount = None
            self.prev_amount = None
            self.amount_text = ""
            self.transaction_date = clock()
            self.comment = ""
            self.selected_category = None

    @property
    def is_editing(self) -> bool:
        return self._transaction_id is not None

    async def load(self):
        async with self._busy():
            self.categories = await self._categories.get_by_direction(self.direction)

    def set_amount_text(self, text: str):
        """Accept the edit only if it still reads as an amount."""
        filtered = _amount_chars(text)
        if filtered.count(".") > 1:
            return
        self.amount = parse_amount(filtered)
        if self.amount is None:
            self.amount_text = ""
        elif filtered.startswith("."):
            self.amount_text = "0" + filtered
        else:
            self.amount_text = filtered

    async def save(self) -> bool:
        """Create or update. Returns True once the service accepted it,
        online or queued offline."""
        if self.is_loading:
            return False
        if self.amount is None or self.selected_category is None:
            self.missing_fields = True
            return False
        self.missing_fields = False

        saved = False
        async with self._busy():
            account_id = await self._accounts.get_current_account_id()
            now = self._clock()
            tx = Transaction(
                id=self._transaction_id or 0,
                account_id=account_id,
                category_id=self.selected_category.id,
                amount=self.amount,
                transaction_date=self.transaction_date,
                comment=self.comment,
                created_at=now,
                updated_at=now,
            )
            if self.is_editing:
                await self._transactions.edit_transaction(
                    tx, self.prev_amount or Decimal("0"), self.direction
                )
            else:
                await self._transactions.add_transaction(tx, self.direction)
            saved = True
        return saved

    async def delete(self) -> bool:
        if self.is_loading or not self.is_editing:
            return False
        deleted = False
        async with self._busy():
            await self._transactions.delete_transaction(
                self._transaction_id, self.prev_amount or Decimal("0"), self.direction
            )
            deleted = True
        return deleted
