from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Iterable

from yahoo_quotes.integrations.yahoo_rest import FetchOutcome, FetchStatus, YahooRestClient
from yahoo_quotes.schemas.quote import Quote, QuoteError, QuoteResult
from yahoo_quotes.services.formatter import format_quote
from yahoo_quotes.services.ttl_cache import TtlCache

QUOTE_PATH = "/v7/finance/quote"
CONNECTION_FAILED_MESSAGE = "Yahoo Finance connection failed"
INVALID_RESPONSE_MESSAGE = "Invalid response from Yahoo Finance"


def quote_cache_key(symbol: str) -> str:
    return f"quote_{symbol}"


def not_found_error(symbol: str) -> QuoteError:
    return QuoteError(error=f"No data was found for {symbol}", code="NOT_FOUND")


class QuoteFetcher:
    """Cache-first quote lookup with single-symbol and batched modes."""

    def __init__(
        self,
        *,
        rest_client: YahooRestClient,
        cache: TtlCache,
        batch_size: int = 50,
        max_workers: int = 1,
    ) -> None:
        self.rest_client = rest_client
        self.cache = cache
        self.batch_size = batch_size
        self.max_workers = max_workers
        self._counter_lock = threading.Lock()

        self.cache_hits = 0
        self.cache_misses = 0
        self.batches_sent = 0
        self.last_batch_target = 0
        self.last_batch_cached = 0
        self.last_batch_failed = 0

    def _outcome_error(self, outcome: FetchOutcome) -> QuoteError:
        if outcome.status is FetchStatus.AUTH_FAILED:
            return QuoteError(
                error=f"Authentication failed after {self.rest_client.max_retries} retries",
                code="AUTHENTICATION_FAILED",
            )
        if outcome.status is FetchStatus.INVALID_RESPONSE:
            return QuoteError(error=INVALID_RESPONSE_MESSAGE, code="INVALID_RESPONSE")
        return QuoteError(error=CONNECTION_FAILED_MESSAGE, code="CONNECTION_FAILED")

    @staticmethod
    def _result_entries(payload: Any) -> list[dict]:
        if not isinstance(payload, dict):
            return []
        quote_response = payload.get("quoteResponse")
        if not isinstance(quote_response, dict):
            return []
        result = quote_response.get("result")
        if not isinstance(result, list):
            return []
        return [entry for entry in result if isinstance(entry, dict)]

    def fetch_quote(self, symbol: str) -> QuoteResult:
        """Fetch one symbol from the provider, bypassing the cache."""
        outcome = self.rest_client.get_json(QUOTE_PATH, {"symbols": symbol})
        if not outcome.ok:
            return self._outcome_error(outcome)

        entries = self._result_entries(outcome.payload)
        if not entries:
            return not_found_error(symbol)
        quote = format_quote(entries[0])
        if not quote.symbol:
            quote = quote.model_copy(update={"symbol": symbol})
        return quote

    def get_quote(self, symbol: str) -> QuoteResult:
        key = quote_cache_key(symbol)
        cached = self.cache.get(key)
        if cached is not None:
            with self._counter_lock:
                self.cache_hits += 1
            return cached

        with self._counter_lock:
            self.cache_misses += 1
        result = self.fetch_quote(symbol)
        if isinstance(result, Quote):
            self.cache.put(key, result)
        return result

    def _fetch_batch(self, batch: list[str]) -> dict[str, QuoteResult]:
        with self._counter_lock:
            self.batches_sent += 1
        outcome = self.rest_client.get_json(QUOTE_PATH, {"symbols": ",".join(batch)})
        if not outcome.ok:
            error = self._outcome_error(outcome)
            return {symbol: error for symbol in batch}

        results: dict[str, QuoteResult] = {}
        for entry in self._result_entries(outcome.payload):
            quote = format_quote(entry)
            if quote.symbol:
                results[quote.symbol] = quote
        for symbol in batch:
            if symbol not in results:
                results[symbol] = not_found_error(symbol)
        return results

    def _batches(self, symbols: list[str]) -> list[list[str]]:
        return [symbols[i : i + self.batch_size] for i in range(0, len(symbols), self.batch_size)]

    def get_quotes(self, symbols: Iterable[str] | None) -> dict[str, QuoteResult]:
        if not symbols:
            return {}

        unique_symbols: list[str] = []
        seen: set[str] = set()
        for symbol in symbols:
            value = str(symbol).strip()
            if not value or value in seen:
                continue
            seen.add(value)
            unique_symbols.append(value)

        out: dict[str, QuoteResult] = {}
        uncached: list[str] = []
        for symbol in unique_symbols:
            cached = self.cache.get(quote_cache_key(symbol))
            if cached is not None:
                out[symbol] = cached
            else:
                uncached.append(symbol)
        cached_count = len(out)
        with self._counter_lock:
            self.cache_hits += cached_count
            self.cache_misses += len(uncached)

        batches = self._batches(uncached)
        if self.max_workers > 1 and len(batches) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                batch_results = list(pool.map(self._fetch_batch, batches))
        else:
            batch_results = [self._fetch_batch(batch) for batch in batches]

        for results in batch_results:
            for symbol, result in results.items():
                if isinstance(result, Quote):
                    self.cache.put(quote_cache_key(symbol), result)
                out[symbol] = result

        failed = sum(1 for result in out.values() if isinstance(result, QuoteError))
        self.last_batch_target = len(unique_symbols)
        self.last_batch_cached = cached_count
        self.last_batch_failed = failed

        print(
            "[QUOTE][batch_resolve] "
            f"target_count={len(unique_symbols)} cached_count={cached_count} "
            f"batches={len(batches)} final_count={len(out)} failed_count={failed}",
            flush=True,
        )
        return out

    def metrics(self) -> dict[str, int]:
        return {
            "cache_hits": self.cache_hits,
            "cache_misses": self.cache_misses,
            "batches_sent": self.batches_sent,
            "requests_sent": self.rest_client.requests_sent,
            "auth_retries": self.rest_client.auth_retries,
            "batch_target_count": self.last_batch_target,
            "batch_cached_count": self.last_batch_cached,
            "batch_failed_count": self.last_batch_failed,
        }
