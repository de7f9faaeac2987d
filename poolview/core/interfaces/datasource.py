from abc import ABC, abstractmethod
from typing import List, Optional

from pydantic import BaseModel


class PoolQueryResult(BaseModel):
    """
    Raw pool record plus its deposit/withdrawal events, already renamed to
    providerAddress/amountUSD/occurredAt but not yet validated.
    """
    pool: dict
    deposits: List[dict] = []
    withdrawals: List[dict] = []


class IPoolDataSource(ABC):
    @abstractmethod
    async def get_pool(self, pool_id: str) -> Optional[PoolQueryResult]:
        """
        Returns None when the indexer has no pool with this id.
        Raises UpstreamError when the indexer cannot be queried.
        """
        pass
