import asyncio
import logging
from typing import List, Optional

import httpx
from gql import Client, gql
from gql.transport.exceptions import TransportError, TransportQueryError, TransportServerError
from gql.transport.httpx import HTTPXAsyncTransport
from pydantic import ValidationError

from poolview.config import Settings
from poolview.core.errors import UpstreamError
from poolview.core.interfaces.datasource import IPoolDataSource, PoolQueryResult

logger = logging.getLogger(__name__)

# TIMESTAMP_FIELD is substituted with the configured event time field
POOL_QUERY = """
query getPoolInfo($poolId: ID!, $first: Int!) {
    liquidityPool(id: $poolId) {
        id
        name
        symbol
        totalValueLockedUSD
        cumulativeVolumeUSD
        cumulativeSupplySideRevenueUSD
        cumulativeProtocolSideRevenueUSD
        inputTokens {
            id
            symbol
            decimals
            lastPriceUSD
        }
        inputTokenBalances
        inputTokenWeights
        fees {
            feePercentage
            feeType
        }
        _isMetapool
        dailySnapshots(first: 2, orderBy: timestamp, orderDirection: desc) {
            dailyVolumeUSD
            totalValueLockedUSD
            timestamp
        }
        deposits(first: $first, orderBy: TIMESTAMP_FIELD, orderDirection: desc) {
            from
            amountUSD
            TIMESTAMP_FIELD
        }
        withdraws(first: $first, orderBy: TIMESTAMP_FIELD, orderDirection: desc) {
            from
            amountUSD
            TIMESTAMP_FIELD
        }
    }
}
"""

UPSTREAM_ERROR_MESSAGE = "Error fetching data from The Graph"


class SubgraphGateway(IPoolDataSource):
    """
    Implementation of IPoolDataSource for a Messari-style DEX subgraph served
    through The Graph gateway. One bounded GraphQL query per pool lookup.
    """

    def __init__(
        self,
        endpoint_url: str,
        api_key: str = "",
        timestamp_field: str = "timestamp",
        page_size: int = 1000,
        timeout: float = 30.0,
        max_retries: int = 0,
        retry_backoff_seconds: float = 0.5,
        http_transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._endpoint_url = endpoint_url
        self._api_key = api_key
        self.timestamp_field = timestamp_field
        self.page_size = page_size
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_backoff_seconds = retry_backoff_seconds
        # Swappable for httpx.MockTransport; None means a real network connection
        self._http_transport = http_transport
        self._query = gql(POOL_QUERY.replace("TIMESTAMP_FIELD", timestamp_field))

        logger.info(f"SubgraphGateway initialized. URL: {self._redact(endpoint_url)}")

    @classmethod
    def from_settings(cls, settings: Settings) -> "SubgraphGateway":
        return cls(
            endpoint_url=settings.endpoint_url,
            api_key=settings.graph_api_key.get_secret_value(),
            timestamp_field=settings.event_timestamp_field,
            page_size=settings.event_page_size,
            timeout=settings.request_timeout_seconds,
            max_retries=settings.max_retries,
            retry_backoff_seconds=settings.retry_backoff_seconds,
        )

    async def get_pool(self, pool_id: str) -> Optional[PoolQueryResult]:
        variables = {"poolId": pool_id, "first": self.page_size}
        data = await self._execute_with_retry(variables)

        if not isinstance(data, dict) or "liquidityPool" not in data:
            raise UpstreamError(UPSTREAM_ERROR_MESSAGE, "Response is missing the liquidityPool field")

        pool = data["liquidityPool"]
        if pool is None:
            return None
        if not isinstance(pool, dict):
            raise UpstreamError(UPSTREAM_ERROR_MESSAGE, "liquidityPool is not an object")

        pool = dict(pool)
        raw_deposits = pool.pop("deposits", None) or []
        raw_withdrawals = pool.pop("withdraws", None) or []

        try:
            return PoolQueryResult(
                pool=pool,
                deposits=self._map_events(raw_deposits),
                withdrawals=self._map_events(raw_withdrawals),
            )
        except (TypeError, ValidationError) as e:
            raise UpstreamError(UPSTREAM_ERROR_MESSAGE, f"Malformed event list: {e}") from e

    def _map_events(self, raw_events: List[dict]) -> List[dict]:
        """
        Renames subgraph event fields to the LiquidityEvent shape. Values are
        passed through untouched; validation happens in the aggregator.
        """
        if not isinstance(raw_events, list):
            raise TypeError(f"expected a list of events, got {type(raw_events).__name__}")
        events = []
        for raw in raw_events:
            if not isinstance(raw, dict):
                raise TypeError(f"expected an event object, got {type(raw).__name__}")
            events.append({
                "providerAddress": raw.get("from"),
                "amountUSD": raw.get("amountUSD"),
                "occurredAt": raw.get(self.timestamp_field),
            })
        return events

    async def _execute_with_retry(self, variables: dict) -> dict:
        attempt = 0
        while True:
            try:
                return await self._execute(variables)
            except TransportQueryError as e:
                # GraphQL-level errors are not transient
                details = self._describe(e)
                logger.error(f"Subgraph query failed for {variables['poolId']}: {details}")
                raise UpstreamError(UPSTREAM_ERROR_MESSAGE, details) from e
            except (TransportError, httpx.HTTPError, asyncio.TimeoutError) as e:
                details = self._describe(e)
                if attempt < self.max_retries and self._is_transient(e):
                    delay = self.retry_backoff_seconds * (2 ** attempt)
                    attempt += 1
                    logger.warning(f"Transient subgraph failure ({details}); retry {attempt}/{self.max_retries} in {delay:.2f}s")
                    await asyncio.sleep(delay)
                    continue
                logger.error(f"Failed to fetch pool {variables['poolId']}: {details}")
                raise UpstreamError(UPSTREAM_ERROR_MESSAGE, details) from e

    async def _execute(self, variables: dict) -> dict:
        client_options = {"timeout": self.timeout}
        if self._api_key:
            client_options["headers"] = {"Authorization": f"Bearer {self._api_key}"}
        if self._http_transport is not None:
            client_options["transport"] = self._http_transport
        transport = HTTPXAsyncTransport(url=self._endpoint_url, **client_options)
        client = Client(transport=transport, fetch_schema_from_transport=False, execute_timeout=self.timeout)
        async with client as session:
            return await session.execute(self._query, variable_values=variables)

    @staticmethod
    def _is_transient(error: Exception) -> bool:
        if isinstance(error, TransportServerError):
            return error.code is None or error.code == 429 or error.code >= 500
        if isinstance(error, httpx.HTTPStatusError):
            status = error.response.status_code
            return status == 429 or status >= 500
        return isinstance(error, (httpx.TransportError, asyncio.TimeoutError))

    def _describe(self, error: Exception) -> str:
        message = str(error) or type(error).__name__
        return self._redact(message)

    def _redact(self, text: str) -> str:
        if self._api_key:
            return text.replace(self._api_key, "***")
        return text
