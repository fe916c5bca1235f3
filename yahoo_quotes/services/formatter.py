from __future__ import annotations

import datetime as dt
from typing import Any, Mapping, Optional

from yahoo_quotes.schemas.quote import DividendEvent, Quote


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _to_float(value: Any) -> Optional[float]:
    if not _is_number(value):
        return None
    return float(value)


def _to_int(value: Any) -> Optional[int]:
    if not _is_number(value):
        return None
    return int(value)


def _to_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value else None


def epoch_to_date(value: Any) -> Optional[dt.date]:
    """UTC calendar date for a Unix timestamp; non-positive or non-numeric is None."""
    if not _is_number(value) or value <= 0:
        return None
    try:
        return dt.datetime.fromtimestamp(value, tz=dt.timezone.utc).date()
    except (OverflowError, OSError, ValueError):
        return None


def dividend_yield(dividend: Optional[float], price: Optional[float]) -> Optional[float]:
    if dividend is None or price is None or price <= 0:
        return None
    return round(dividend / price * 100, 2)


def payout_ratio(dividend: Optional[float], eps: Optional[float]) -> Optional[float]:
    if dividend is None or eps is None or eps <= 0:
        return None
    return round(dividend / eps * 100, 2)


def format_quote(raw: Mapping[str, Any]) -> Quote:
    price = _to_float(raw.get("regularMarketPrice"))
    eps = _to_float(raw.get("epsTrailingTwelveMonths"))
    dividend = _to_float(raw.get("dividendRate"))

    return Quote(
        symbol=str(raw.get("symbol") or ""),
        name=_to_str(raw.get("shortName")) or _to_str(raw.get("longName")),
        price=price,
        change=_to_float(raw.get("regularMarketChange")),
        percent_change=_to_float(raw.get("regularMarketChangePercent")),
        volume=_to_int(raw.get("regularMarketVolume")),
        pe_ratio=_to_float(raw.get("trailingPE")),
        eps=eps,
        dividend=dividend,
        dividend_yield=dividend_yield(dividend, price),
        payout_ratio=payout_ratio(dividend, eps),
        ma50=_to_float(raw.get("fiftyDayAverage")),
        ma200=_to_float(raw.get("twoHundredDayAverage")),
        fifty_two_week_high=_to_float(raw.get("fiftyTwoWeekHigh")),
        fifty_two_week_low=_to_float(raw.get("fiftyTwoWeekLow")),
        ex_dividend_date=epoch_to_date(raw.get("exDividendDate")),
        dividend_date=epoch_to_date(raw.get("dividendDate")),
    )


def format_dividend_events(dividends: Mapping[str, Any]) -> list[DividendEvent]:
    """Chart ``events.dividends`` mapping -> events sorted by date, oldest first."""
    events: list[DividendEvent] = []
    for item in dividends.values():
        if not isinstance(item, Mapping):
            continue
        date = epoch_to_date(item.get("date"))
        amount = _to_float(item.get("amount"))
        if amount is not None:
            amount = round(amount, 4)
        if date is None or amount is None or amount <= 0:
            continue
        events.append(DividendEvent(date=date, amount=amount))
    events.sort(key=lambda event: event.date)
    return events
