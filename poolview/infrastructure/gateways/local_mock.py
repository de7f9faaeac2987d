from typing import Dict, List, Optional

from poolview.core.interfaces.datasource import IPoolDataSource, PoolQueryResult

MOCK_POOL_ID = "0xbebc44782c7db0a1a60cb6fe97d0b483032ff1c7"


def sample_pool(pool_id: str = MOCK_POOL_ID) -> PoolQueryResult:
    return PoolQueryResult(
        pool={
            "id": pool_id,
            "name": "Curve.fi DAI/USDC/USDT",
            "symbol": "3Crv",
            "totalValueLockedUSD": "1000",
            "cumulativeVolumeUSD": "25000000.5",
            "cumulativeSupplySideRevenueUSD": "12000.25",
            "cumulativeProtocolSideRevenueUSD": "6000.125",
            "inputTokens": [
                {"id": "0x6b175474e89094c44da98b954eedeac495271d0f", "symbol": "DAI", "decimals": 18, "lastPriceUSD": "1.0001"},
                {"id": "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48", "symbol": "USDC", "decimals": 6, "lastPriceUSD": "1"},
            ],
            "inputTokenBalances": ["250000000000000000000", "750000000"],
            "inputTokenWeights": ["25", "75"],
            "fees": [
                {"feePercentage": "0.015", "feeType": "FIXED_LP_FEE"},
                {"feePercentage": "0.015", "feeType": "FIXED_PROTOCOL_FEE"},
            ],
            "_isMetapool": False,
            "dailySnapshots": [
                {"dailyVolumeUSD": "1500", "totalValueLockedUSD": "1000", "timestamp": "1705017600"},
                {"dailyVolumeUSD": "1000", "totalValueLockedUSD": "800", "timestamp": "1704931200"},
            ],
        },
        deposits=[
            {"providerAddress": "0xaaa", "amountUSD": "100", "occurredAt": "1"},
            {"providerAddress": "0xbbb", "amountUSD": "50", "occurredAt": "2"},
        ],
        withdrawals=[
            {"providerAddress": "0xaaa", "amountUSD": "30", "occurredAt": "3"},
        ],
    )


class LocalMockDataSource(IPoolDataSource):
    """In-memory pool source for local runs and tests. Records every lookup."""

    def __init__(self, pools: Optional[Dict[str, PoolQueryResult]] = None, error: Optional[Exception] = None):
        self.pools = pools if pools is not None else {MOCK_POOL_ID: sample_pool()}
        self.error = error
        self.calls: List[str] = []

    async def get_pool(self, pool_id: str) -> Optional[PoolQueryResult]:
        self.calls.append(pool_id)
        if self.error is not None:
            raise self.error
        return self.pools.get(pool_id)
