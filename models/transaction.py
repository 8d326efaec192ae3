from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional


@dataclass
class Transaction:
    id: int                 # negative while only known locally
    account_id: int
    category_id: int
    amount: Decimal
    transaction_date: datetime
    comment: Optional[str]
    created_at: datetime
    updated_at: datetime

    @property
    def is_provisional(self) -> bool:
        return self.id < 0
