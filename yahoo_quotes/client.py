from __future__ import annotations

from typing import Any, Iterable, Optional

from yahoo_quotes.config.settings import Settings, get_settings
from yahoo_quotes.integrations.yahoo_rest import YahooRestClient
from yahoo_quotes.integrations.yahoo_session import YahooSessionManager
from yahoo_quotes.schemas.quote import DividendEvent, DividendHistoryResult, QuoteResult
from yahoo_quotes.services.dividend_history import DividendHistoryFetcher
from yahoo_quotes.services.quote_fetcher import QuoteFetcher
from yahoo_quotes.services.ttl_cache import TtlCache


class YahooFinanceClient:
    """Owns one session manager and one cache shared by both fetchers."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        *,
        session: Optional[Any] = None,
        session_manager: Optional[YahooSessionManager] = None,
        cache: Optional[TtlCache] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.session_manager = session_manager or YahooSessionManager(
            session,
            ttl_sec=self.settings.YF_SESSION_TTL_SEC,
            timeout_sec=self.settings.YF_HTTP_TIMEOUT_SEC,
            user_agent=self.settings.YF_USER_AGENT,
        )
        self.cache = cache or TtlCache(
            ttl_sec=self.settings.YF_CACHE_TTL_SEC,
            max_entries=self.settings.YF_CACHE_MAX_ENTRIES,
        )
        self.rest_client = YahooRestClient(
            self.session_manager,
            session,
            max_retries=self.settings.YF_MAX_RETRIES,
            timeout_sec=self.settings.YF_HTTP_TIMEOUT_SEC,
        )
        self.quotes = QuoteFetcher(
            rest_client=self.rest_client,
            cache=self.cache,
            batch_size=self.settings.YF_BATCH_SIZE,
            max_workers=self.settings.YF_BATCH_WORKERS,
        )
        self.dividends = DividendHistoryFetcher(rest_client=self.rest_client, cache=self.cache)

    def get_quote(self, symbol: str) -> QuoteResult:
        return self.quotes.get_quote(symbol)

    def get_quotes(self, symbols: Iterable[str] | None) -> dict[str, QuoteResult]:
        return self.quotes.get_quotes(symbols)

    def get_dividend_history(self, symbol: str, range_: str = "2y") -> list[DividendEvent]:
        return self.dividends.get_dividend_history(symbol, range_)

    def get_dividend_history_result(self, symbol: str, range_: str = "2y") -> DividendHistoryResult:
        return self.dividends.get_dividend_history_result(symbol, range_)

    def metrics(self) -> dict[str, int]:
        return {
            **self.quotes.metrics(),
            "dividend_history_failures": self.dividends.failures,
            "cache_entries": len(self.cache),
        }
