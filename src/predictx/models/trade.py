"""Trade - immutable audit record of an executed buy."""

from pydantic import BaseModel, ConfigDict, Field

from predictx.models.market import PRICE_MAX, PRICE_MIN, Side
from predictx.money import Money


class Trade(BaseModel):
    """Executed buy. Never mutated after creation."""

    model_config = ConfigDict(frozen=True)

    id: str
    user_id: str
    market_id: int
    side: Side
    shares: int = Field(..., ge=0)
    price: int = Field(..., ge=PRICE_MIN, le=PRICE_MAX)
    amount: Money = Field(..., gt=0)
    timestamp: int  # ms epoch
