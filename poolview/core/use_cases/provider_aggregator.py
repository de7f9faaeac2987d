from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, Iterable, List, Mapping, Optional, Union

from pydantic import ValidationError

from poolview.core.entities.event import LiquidityEvent
from poolview.core.entities.provider import ProviderSummary, TopProviderEntry
from poolview.core.errors import InvalidEvent

DEFAULT_TOP_PROVIDERS = 20

EventInput = Union[LiquidityEvent, Mapping]


def _validate_event(raw: EventInput, index: int, kind: str) -> LiquidityEvent:
    if isinstance(raw, LiquidityEvent):
        return raw
    try:
        return LiquidityEvent.model_validate(raw)
    except ValidationError as e:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) or "<event>" for err in e.errors())
        raise InvalidEvent(f"Malformed {kind} event at index {index}: {fields}", index=index, kind=kind) from e


class ProviderAggregator:
    @staticmethod
    def aggregate(
        deposits: Iterable[EventInput],
        withdrawals: Iterable[EventInput],
        limit: int = DEFAULT_TOP_PROVIDERS,
        include_non_positive: bool = False,
    ) -> List[ProviderSummary]:
        if limit < 1:
            raise ValueError(f"limit must be a positive integer, got {limit}")

        # dict keeps first-seen order, which the stable sort below preserves on ties
        providers: Dict[str, ProviderSummary] = {}

        for kind, events in (("deposit", deposits), ("withdrawal", withdrawals)):
            for i, raw in enumerate(events):
                event = _validate_event(raw, i, kind)
                acc = providers.get(event.providerAddress)
                if acc is None:
                    acc = ProviderSummary(address=event.providerAddress, lastActiveAt=event.occurredAt)
                    providers[event.providerAddress] = acc

                if kind == "deposit":
                    acc.totalDeposited += event.amountUSD
                else:
                    acc.totalWithdrawn += event.amountUSD
                acc.transactionCount += 1
                acc.lastActiveAt = max(acc.lastActiveAt, event.occurredAt)

        ranked = list(providers.values())
        if not include_non_positive:
            ranked = [p for p in ranked if p.netPosition > 0]

        ranked.sort(key=lambda p: p.netPosition, reverse=True)
        return ranked[:limit]


def aggregate_top_providers(
    deposits: Iterable[EventInput],
    withdrawals: Iterable[EventInput],
    limit: int = DEFAULT_TOP_PROVIDERS,
    include_non_positive: bool = False,
) -> List[ProviderSummary]:
    """
    Folds deposit and withdrawal events into one summary per provider address,
    ranks them by net position (descending) and keeps the first ``limit``.

    Raises InvalidEvent if any event is missing a field or is malformed; nothing
    is coerced to zero.
    """
    return ProviderAggregator.aggregate(deposits, withdrawals, limit, include_non_positive)


def percent_of_pool(net_position: Decimal, tvl: Optional[Decimal]) -> Optional[float]:
    """Share of TVL held by a provider, in percent. None when TVL is absent or not positive."""
    if tvl is None or tvl <= 0:
        return None
    return float(net_position / tvl * 100)


def rank_providers(summaries: List[ProviderSummary], tvl: Optional[Decimal] = None) -> List[TopProviderEntry]:
    entries = []
    for i, summary in enumerate(summaries):
        entries.append(TopProviderEntry(
            rank=i + 1,
            address=summary.address,
            totalDeposited=summary.totalDeposited,
            totalWithdrawn=summary.totalWithdrawn,
            transactionCount=summary.transactionCount,
            lastActiveAt=summary.lastActiveAt,
            lastActivityDate=datetime.fromtimestamp(summary.lastActiveAt, tz=timezone.utc).isoformat(),
            percentOfPool=percent_of_pool(summary.netPosition, tvl),
        ))
    return entries
