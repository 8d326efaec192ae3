from datetime import datetime, tzinfo
from decimal import Decimal
from typing import Iterable

from models.category import Category
from models.transaction import Transaction
from utils.constants import SORT_MODES
from utils.date_helpers import end_of_day, start_of_day

HistoryItem = tuple[Transaction, Category]


class ReportService:
    """Totals, shares and orderings for the history and analysis views."""

    def __init__(self, tz: tzinfo):
        self._tz = tz

    @staticmethod
    def pair_with_categories(
        transactions: Iterable[Transaction], categories: Iterable[Category]
    ) -> list[HistoryItem]:
        """Drop transactions whose category is not in the given set."""
        by_id = {c.id: c for c in categories}
        return [(tx, by_id[tx.category_id]) for tx in transactions if tx.category_id in by_id]

    @staticmethod
    def total(items: Iterable[HistoryItem]) -> Decimal:
        return sum((tx.amount for tx, _ in items), Decimal("0"))

    @staticmethod
    def percentage(amount: Decimal, total: Decimal) -> str:
        if not total:
            return "0%"
        return f"{amount / total * 100:.1f}%"

    @staticmethod
    def sort_items(items: Iterable[HistoryItem], by: str = "date") -> list[HistoryItem]:
        if by not in SORT_MODES:
            raise ValueError(f"Invalid sort mode '{by}'. Must be one of: {', '.join(SORT_MODES)}.")
        if by == "amount":
            return sorted(items, key=lambda item: item[0].amount, reverse=True)
        return sorted(items, key=lambda item: item[0].transaction_date, reverse=True)

    def clamp_period(
        self, start: datetime, end: datetime, moved: str = "start"
    ) -> tuple[datetime, datetime]:
        """Snap the bounds to whole days and keep start <= end.

        The bound the user just moved wins: the other one follows it.
        """
        if moved not in ("start", "end"):
            raise ValueError(f"Invalid bound '{moved}'.")
        start = start_of_day(start, self._tz)
        end = end_of_day(end, self._tz, second=0)
        if start > end:
            if moved == "start":
                end = end_of_day(start, self._tz, second=0)
            else:
                start = start_of_day(end, self._tz)
        return start, end
