import logging
from typing import Optional

from pydantic import ValidationError

from poolview.core.entities.pool import PoolInfoResponse, PoolSnapshot
from poolview.core.errors import InvalidEvent, InvalidRequest, NotFound, UpstreamError
from poolview.core.interfaces.datasource import IPoolDataSource
from poolview.core.use_cases.pool_metrics import derive_pool_metrics
from poolview.core.use_cases.provider_aggregator import (
    DEFAULT_TOP_PROVIDERS,
    aggregate_top_providers,
    rank_providers,
)

logger = logging.getLogger(__name__)

# --- Business Logic Services ---

class PoolInfoService:
    def __init__(
        self,
        datasource: IPoolDataSource,
        top_providers_limit: int = DEFAULT_TOP_PROVIDERS,
        include_non_positive: bool = False,
    ):
        self.db = datasource
        self.top_providers_limit = top_providers_limit
        self.include_non_positive = include_non_positive

    async def get_pool_info(
        self,
        address: Optional[str],
        limit: Optional[int] = None,
        include_non_positive: Optional[bool] = None,
    ) -> PoolInfoResponse:
        """
        Looks up one pool on the indexer and attaches its top liquidity providers.
        """
        pool_id = (address or "").strip().lower()
        if not pool_id:
            raise InvalidRequest("Missing address parameter")

        limit = limit if limit is not None else self.top_providers_limit
        if include_non_positive is None:
            include_non_positive = self.include_non_positive

        # 1. One bounded upstream query
        result = await self.db.get_pool(pool_id)
        if result is None:
            raise NotFound("Pool not found")

        # 2. Validate the pool record
        try:
            snapshot = PoolSnapshot.model_validate(result.pool)
        except ValidationError as e:
            logger.error(f"Malformed pool record for {pool_id}: {e}")
            raise UpstreamError("Malformed pool data from The Graph", str(e)) from e

        # 3. Aggregate providers; bad events fail the whole request
        try:
            providers = aggregate_top_providers(
                result.deposits,
                result.withdrawals,
                limit=limit,
                include_non_positive=include_non_positive,
            )
        except InvalidEvent as e:
            logger.error(f"Malformed event data for {pool_id}: {e}")
            raise UpstreamError("Malformed event data from The Graph", str(e)) from e

        return PoolInfoResponse(
            **snapshot.model_dump(),
            topProviders=rank_providers(providers, snapshot.totalValueLockedUSD),
            metrics=derive_pool_metrics(snapshot),
        )
