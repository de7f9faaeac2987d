from decimal import Decimal

from poolview.core.entities.pool import PoolSnapshot
from poolview.core.use_cases.pool_metrics import (
    calculate_percent_change,
    derive_pool_metrics,
    format_token_balance,
)


def make_pool(**overrides):
    data = {
        "id": "0xpool",
        "totalValueLockedUSD": "100",
        "cumulativeVolumeUSD": "0",
        "cumulativeSupplySideRevenueUSD": "0",
        "cumulativeProtocolSideRevenueUSD": "0",
    }
    data.update(overrides)
    return PoolSnapshot.model_validate(data)


def test_percent_change():
    assert calculate_percent_change(Decimal(110), Decimal(100)) == 10.0
    assert calculate_percent_change(Decimal(90), Decimal(120)) == -25.0
    assert calculate_percent_change(Decimal(1), Decimal(3)) == -66.67


def test_percent_change_without_previous():
    assert calculate_percent_change(Decimal(5), Decimal(0)) == 0.0
    assert calculate_percent_change(Decimal(5), None) == 0.0


def test_format_token_balance():
    assert format_token_balance("1234567890000000000000", 18) == "1234"
    assert format_token_balance("999999", 6) == "0"
    assert format_token_balance("42", 0) == "42"


def test_format_token_balance_malformed():
    assert format_token_balance("not-a-number", 18) == "0"


def test_metrics_use_latest_two_snapshots_in_any_order():
    pool = make_pool(dailySnapshots=[
        {"dailyVolumeUSD": "100", "totalValueLockedUSD": "200", "timestamp": 1},
        {"dailyVolumeUSD": "300", "totalValueLockedUSD": "100", "timestamp": 3},
        {"dailyVolumeUSD": "200", "totalValueLockedUSD": "80", "timestamp": 2},
    ])

    metrics = derive_pool_metrics(pool)

    assert metrics.volumeChangePercent == 50.0
    assert metrics.tvlChangePercent == 25.0


def test_metrics_need_two_snapshots():
    pool = make_pool(dailySnapshots=[{"dailyVolumeUSD": "1", "totalValueLockedUSD": "1", "timestamp": 1}])

    metrics = derive_pool_metrics(pool)

    assert metrics.tvlChangePercent is None
    assert metrics.volumeChangePercent is None


def test_balances_without_token_metadata_are_unscaled():
    pool = make_pool(
        inputTokens=[{"id": "0xt0", "symbol": "T0", "decimals": 2}],
        inputTokenBalances=["12345", "678"],
    )

    assert derive_pool_metrics(pool).formattedInputTokenBalances == ["123", "678"]


def test_format_token_balance_negative_decimals():
    assert format_token_balance("12345", -2) == "0"
