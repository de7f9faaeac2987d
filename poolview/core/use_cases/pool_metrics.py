import logging
from decimal import Decimal
from typing import List, Optional

from poolview.core.entities.pool import PoolMetrics, PoolSnapshot

logger = logging.getLogger(__name__)


def calculate_percent_change(current: Decimal, previous: Optional[Decimal]) -> float:
    if previous is None or previous == 0:
        return 0.0
    return round(float((current - previous) / previous * 100), 2)


def format_token_balance(balance: str, decimals: int) -> str:
    """Scales a raw integer token balance down by the token's decimals (integer division)."""
    try:
        decimals = int(decimals)
        if decimals < 0:
            raise ValueError("decimals must not be negative")
        return str(int(balance) // (10 ** decimals))
    except (TypeError, ValueError) as e:
        logger.warning(f"Could not format balance {balance!r} with {decimals} decimals: {e}")
        return "0"


def derive_pool_metrics(pool: PoolSnapshot) -> PoolMetrics:
    tvl_change = None
    volume_change = None

    # Upstream orders daily snapshots newest first
    snapshots = sorted(pool.dailySnapshots, key=lambda s: s.timestamp, reverse=True)
    if len(snapshots) >= 2:
        latest, previous = snapshots[0], snapshots[1]
        tvl_change = calculate_percent_change(latest.totalValueLockedUSD, previous.totalValueLockedUSD)
        volume_change = calculate_percent_change(latest.dailyVolumeUSD, previous.dailyVolumeUSD)

    formatted: List[str] = []
    for i, balance in enumerate(pool.inputTokenBalances):
        decimals = pool.inputTokens[i].decimals if i < len(pool.inputTokens) else 0
        formatted.append(format_token_balance(balance, decimals))

    return PoolMetrics(
        tvlChangePercent=tvl_change,
        volumeChangePercent=volume_change,
        formattedInputTokenBalances=formatted,
    )
