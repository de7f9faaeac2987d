from pydantic import BaseModel, ConfigDict, Field
from decimal import Decimal
from typing import List, Optional

from poolview.core.entities.provider import TopProviderEntry


class InputToken(BaseModel):
    id: str
    symbol: Optional[str] = None
    decimals: int = 18
    lastPriceUSD: Optional[Decimal] = None


class PoolFee(BaseModel):
    feePercentage: Optional[Decimal] = None
    feeType: str


class DailySnapshot(BaseModel):
    dailyVolumeUSD: Decimal
    totalValueLockedUSD: Decimal
    timestamp: int


class PoolSnapshot(BaseModel):
    """
    Pool identity, token composition and cumulative metrics as the
    indexer reports them. Read-only.
    """
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: Optional[str] = None
    symbol: Optional[str] = None
    totalValueLockedUSD: Decimal
    cumulativeVolumeUSD: Decimal
    cumulativeSupplySideRevenueUSD: Decimal
    cumulativeProtocolSideRevenueUSD: Decimal
    inputTokens: List[InputToken] = []
    inputTokenBalances: List[str] = []  # raw integer amounts, token decimals not applied
    inputTokenWeights: List[Decimal] = []
    fees: List[PoolFee] = []
    isMetapool: Optional[bool] = Field(None, alias="_isMetapool")
    dailySnapshots: List[DailySnapshot] = []


class PoolMetrics(BaseModel):
    """
    Derived day-over-day metrics from the two most recent daily snapshots.
    """
    tvlChangePercent: Optional[float] = None
    volumeChangePercent: Optional[float] = None
    formattedInputTokenBalances: List[str] = []


class PoolInfoResponse(PoolSnapshot):
    topProviders: List[TopProviderEntry] = []
    metrics: PoolMetrics = PoolMetrics()
