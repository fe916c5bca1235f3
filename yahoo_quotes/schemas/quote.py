import datetime as dt
from typing import Literal, Union

from pydantic import BaseModel, ConfigDict

ErrorCode = Literal[
    "AUTHENTICATION_FAILED",
    "CONNECTION_FAILED",
    "NOT_FOUND",
    "INVALID_RESPONSE",
]


class Quote(BaseModel):
    model_config = ConfigDict(frozen=True)

    symbol: str
    name: str | None = None
    price: float | None = None
    change: float | None = None
    percent_change: float | None = None
    volume: int | None = None
    pe_ratio: float | None = None
    eps: float | None = None
    dividend: float | None = None
    dividend_yield: float | None = None
    payout_ratio: float | None = None
    ma50: float | None = None
    ma200: float | None = None
    fifty_two_week_high: float | None = None
    fifty_two_week_low: float | None = None
    ex_dividend_date: dt.date | None = None
    dividend_date: dt.date | None = None


class QuoteError(BaseModel):
    model_config = ConfigDict(frozen=True)

    error: str
    code: ErrorCode


QuoteResult = Union[Quote, QuoteError]


class DividendEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    date: dt.date
    amount: float


class DividendHistoryResult(BaseModel):
    events: list[DividendEvent]
    error: str | None = None
