from pydantic import BaseModel, computed_field
from decimal import Decimal
from typing import Optional


class ProviderSummary(BaseModel):
    address: str
    totalDeposited: Decimal = Decimal(0)
    totalWithdrawn: Decimal = Decimal(0)
    transactionCount: int = 0
    lastActiveAt: int = 0

    @computed_field
    @property
    def netPosition(self) -> Decimal:
        return self.totalDeposited - self.totalWithdrawn


class TopProviderEntry(ProviderSummary):
    rank: int
    lastActivityDate: str  # ISO-8601, UTC
    percentOfPool: Optional[float] = None  # None when TVL is unknown or zero
