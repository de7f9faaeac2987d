"""
Liquidity Event Entity for PoolView

A single deposit into or withdrawal out of a pool, as reported by the indexer.
"""
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

# 9999-12-31T23:59:59Z, the last second datetime can represent
MAX_TIMESTAMP = 253402300799


class LiquidityEvent(BaseModel):
    """
    Represents a single deposit/withdrawal event.
    The direction is given by which collection the event arrives in.
    """
    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "providerAddress": "0x31ca8395cf837de08b24da3f660e77761dfb974b",
                "amountUSD": "1520.75",
                "occurredAt": 1705000000,
            }
        },
    )

    providerAddress: str = Field(min_length=1)
    amountUSD: Decimal
    occurredAt: int = Field(ge=0, le=MAX_TIMESTAMP)  # unix seconds

    @field_validator("amountUSD")
    @classmethod
    def _finite_amount(cls, value: Decimal) -> Decimal:
        if not value.is_finite():
            raise ValueError("amountUSD must be a finite number")
        return value
