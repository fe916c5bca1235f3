from __future__ import annotations

from typing import Any

from yahoo_quotes.integrations.yahoo_rest import YahooRestClient
from yahoo_quotes.schemas.quote import DividendEvent, DividendHistoryResult
from yahoo_quotes.services.formatter import format_dividend_events
from yahoo_quotes.services.ttl_cache import TtlCache


def history_cache_key(symbol: str, range_: str) -> str:
    return f"div_history_{symbol}_{range_}"


def _dividends_from_chart(payload: Any) -> dict:
    try:
        dividends = payload["chart"]["result"][0]["events"]["dividends"]
    except (KeyError, IndexError, TypeError):
        return {}
    return dividends if isinstance(dividends, dict) else {}


class DividendHistoryFetcher:
    """Monthly chart events -> dividend payments, oldest first."""

    def __init__(self, *, rest_client: YahooRestClient, cache: TtlCache) -> None:
        self.rest_client = rest_client
        self.cache = cache
        self.failures = 0

    def get_dividend_history_result(self, symbol: str, range_: str = "2y") -> DividendHistoryResult:
        key = history_cache_key(symbol, range_)
        cached = self.cache.get(key)
        if cached is not None:
            return DividendHistoryResult(events=cached)

        outcome = self.rest_client.get_json(
            f"/v8/finance/chart/{symbol}",
            {"range": range_, "interval": "1mo", "events": "div"},
        )
        if not outcome.ok:
            self.failures += 1
            print(
                f"[HISTORY][fetch_failed] symbol={symbol} range={range_} status={outcome.status.value}",
                flush=True,
            )
            return DividendHistoryResult(events=[], error=outcome.status.value)

        events = format_dividend_events(_dividends_from_chart(outcome.payload))
        if events:
            self.cache.put(key, events)
        return DividendHistoryResult(events=events)

    def get_dividend_history(self, symbol: str, range_: str = "2y") -> list[DividendEvent]:
        return self.get_dividend_history_result(symbol, range_).events
