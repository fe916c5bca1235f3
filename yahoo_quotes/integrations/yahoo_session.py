from __future__ import annotations

import threading
import time
from typing import Any, Callable, Optional

import requests

from yahoo_quotes.config.settings import DEFAULT_USER_AGENT
from yahoo_quotes.errors import AuthenticationError
from yahoo_quotes.integrations.crumb import extract_crumb, is_valid_crumb
from yahoo_quotes.schemas.session import SessionCredentials, SessionState, SessionStatus

QUERY1_BASE_URL = "https://query1.finance.yahoo.com"
QUERY2_BASE_URL = "https://query2.finance.yahoo.com"
COOKIE_URL = "https://fc.yahoo.com"
HOMEPAGE_URL = "https://finance.yahoo.com"
CRUMB_PATH = "/v1/test/getcrumb"


def _is_success(response: Any) -> bool:
    return 200 <= int(response.status_code) < 300


def _extract_cookie(response: Any) -> Optional[str]:
    cookie = response.headers.get("set-cookie")
    return str(cookie) if cookie else None


class YahooSessionManager:
    """Cookie/crumb holder that re-authenticates through fallback strategies.

    All reads and writes of the session state happen under one lock, including
    the network round-trips of ``authenticate``, so concurrent callers queue
    behind a single re-authentication instead of racing it.
    """

    def __init__(
        self,
        session: Optional[Any] = None,
        *,
        ttl_sec: float = 60,
        timeout_sec: float = 5,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        self.session = session or requests
        self.ttl_sec = ttl_sec
        self.timeout_sec = timeout_sec
        self.user_agent = user_agent
        self._lock = threading.RLock()
        self._state = SessionState()
        self._strategies: list[tuple[str, Callable[[], Optional[SessionState]]]] = [
            ("fc_cookie_query1", self._strategy_fc_cookie_query1),
            ("homepage_scrape", self._strategy_homepage_scrape),
            ("fc_cookie_query2", self._strategy_fc_cookie_query2),
        ]

    @property
    def cookie(self) -> Optional[str]:
        return self._state.cookie

    @property
    def crumb(self) -> Optional[str]:
        return self._state.crumb

    @property
    def base_url(self) -> str:
        return self._state.base_url

    def request_headers(self) -> dict[str, str]:
        return {
            "User-Agent": self.user_agent,
            "Accept": "text/html,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.5",
        }

    def is_valid(self, now: float | None = None) -> bool:
        ref = time.time() if now is None else now
        with self._lock:
            state = self._state
            if not (state.cookie and state.crumb and state.authenticated_at is not None):
                return False
            return ref - state.authenticated_at < self.ttl_sec

    def ensure_authenticated(self) -> None:
        with self._lock:
            if self.is_valid():
                return
            self.authenticate()

    def credentials(self) -> SessionCredentials:
        """Ensure a valid session and snapshot it in one critical section."""
        with self._lock:
            self.ensure_authenticated()
            return SessionCredentials(
                cookie=self._state.cookie,
                crumb=self._state.crumb,
                base_url=self._state.base_url,
            )

    def invalidate(self, crumb: Optional[str] = None) -> bool:
        """Clear the session. With ``crumb``, only if it is still the current one."""
        with self._lock:
            if crumb is not None and crumb != self._state.crumb:
                return False
            self._state = SessionState()
            return True

    def authenticate(self) -> None:
        with self._lock:
            for name, strategy in self._strategies:
                try:
                    state = strategy()
                except requests.RequestException as exc:
                    print(f"[AUTH][strategy_error] strategy={name} error={exc}", flush=True)
                    continue
                if state is None:
                    print(f"[AUTH][strategy_failed] strategy={name}", flush=True)
                    continue

                state.authenticated_at = time.time()
                state.strategy = name
                self._state = state
                print(f"[AUTH][strategy_ok] strategy={name} base_url={state.base_url}", flush=True)
                return

            raise AuthenticationError("All authentication strategies failed")

    def status(self) -> SessionStatus:
        with self._lock:
            return SessionStatus(
                authenticated=self.is_valid(),
                base_url=self._state.base_url,
                authenticated_at=self._state.authenticated_at,
                strategy=self._state.strategy,
            )

    def _strategy_fc_cookie_query1(self) -> Optional[SessionState]:
        return self._apply_crumb_strategy(QUERY1_BASE_URL)

    def _strategy_fc_cookie_query2(self) -> Optional[SessionState]:
        return self._apply_crumb_strategy(QUERY2_BASE_URL)

    def _apply_crumb_strategy(self, base_url: str) -> Optional[SessionState]:
        cookie = self._fetch_cookie_from_fc()
        if not cookie:
            return None

        crumb = self._fetch_crumb(cookie, f"{base_url}{CRUMB_PATH}")
        if not is_valid_crumb(crumb):
            return None
        return SessionState(cookie=cookie, crumb=crumb, base_url=base_url)

    def _strategy_homepage_scrape(self) -> Optional[SessionState]:
        response = self.session.get(
            HOMEPAGE_URL,
            headers=self.request_headers(),
            allow_redirects=True,
            timeout=self.timeout_sec,
        )
        if not _is_success(response):
            return None

        cookie = _extract_cookie(response)
        crumb = extract_crumb(response.text or "")
        if not (cookie and crumb):
            return None
        return SessionState(cookie=cookie, crumb=crumb, base_url=QUERY1_BASE_URL)

    def _fetch_cookie_from_fc(self) -> Optional[str]:
        # fc.yahoo.com answers 404 but still issues the cookie
        response = self.session.get(
            COOKIE_URL,
            headers=self.request_headers(),
            timeout=self.timeout_sec,
        )
        return _extract_cookie(response)

    def _fetch_crumb(self, cookie: str, crumb_url: str) -> Optional[str]:
        response = self.session.get(
            crumb_url,
            headers={**self.request_headers(), "Cookie": cookie},
            timeout=self.timeout_sec,
        )
        if not _is_success(response):
            return None
        return (response.text or "").strip()
