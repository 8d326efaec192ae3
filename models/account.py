from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional


@dataclass
class BankAccount:
    id: int
    name: str
    balance: Decimal
    currency: str           # ISO-4217 code, e.g. 'RUB'
    user_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
