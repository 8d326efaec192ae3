from decimal import Decimal, InvalidOperation

from models.account import BankAccount
from presenters.base import Presenter
from services.account_service import AccountService
from utils.currency import Currency, symbol_for


def sanitize_balance_text(text: str) -> str:
    """Keep digits and the first decimal separator; a comma counts as one."""
    filtered = "".join(ch for ch in text if ch in "0123456789,.").replace(",", ".")
    head, sep, tail = filtered.partition(".")
    return head + sep + tail.replace(".", "")


class AccountPresenter(Presenter):
    def __init__(self, accounts: AccountService):
        super().__init__()
        self._accounts = accounts
        self.account: BankAccount | None = None
        self.balance_text = ""
        self.currency = Currency.RUB

    @property
    def symbol(self) -> str:
        return symbol_for(self.account.currency) if self.account else ""

    @property
    def currency_name(self) -> str:
        if self.account is None:
            return ""
        try:
            return Currency(self.account.currency).full_name
        except ValueError:
            return ""

    async def load(self):
        async with self._busy():
            self.account = await self._accounts.get_account()
            self.balance_text = str(self.account.balance)
            try:
                self.currency = Currency(self.account.currency)
            except ValueError:
                pass

    async def refresh(self):
        await self.load()

    def set_balance_text(self, text: str):
        self.balance_text = sanitize_balance_text(text)

    async def update_account(self):
        """Push the edited balance and currency. Does nothing when the text
        is not a number or nothing changed."""
        try:
            amount = Decimal(self.balance_text)
        except InvalidOperation:
            return
        if (
            self.account is not None
            and amount == self.account.balance
            and self.currency.value == self.account.currency
        ):
            return

        async with self._busy():
            await self._accounts.update_account(amount, self.currency.value)
            self.account = await self._accounts.get_account()
