from __future__ import annotations

import re
import threading
from enum import Enum
from typing import Any, Dict, Optional

import requests
from pydantic import BaseModel

from yahoo_quotes.errors import AuthenticationError
from yahoo_quotes.integrations.yahoo_session import YahooSessionManager

_AUTH_FAILURE_BODY = re.compile(r"invalid cookie|invalid crumb|unauthorized", re.IGNORECASE)


class FetchStatus(str, Enum):
    OK = "ok"
    AUTH_FAILED = "auth_failed"
    CONNECTION_FAILED = "connection_failed"
    INVALID_RESPONSE = "invalid_response"


class FetchOutcome(BaseModel):
    status: FetchStatus
    payload: Any = None
    attempts: int = 0
    detail: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is FetchStatus.OK


class YahooRestClient:
    """Authenticated GET against the Yahoo data hosts with a bounded auth retry loop."""

    def __init__(
        self,
        session_manager: YahooSessionManager,
        session: Optional[Any] = None,
        *,
        max_retries: int = 2,
        timeout_sec: float = 5,
    ) -> None:
        self.session_manager = session_manager
        self.session = session or session_manager.session
        self.max_retries = max_retries
        self.timeout_sec = timeout_sec
        self.requests_sent = 0
        self.auth_retries = 0
        self._counter_lock = threading.Lock()

    @staticmethod
    def is_auth_failure(response: Any) -> bool:
        if response.status_code == 401:
            return True
        return bool(_AUTH_FAILURE_BODY.search(response.text or ""))

    def get_json(self, path: str, params: Dict[str, Any]) -> FetchOutcome:
        """GET ``{base_url}{path}`` with cookie and crumb attached.

        Authentication failures invalidate the session and are retried up to
        ``max_retries`` times. Any other failure ends the loop immediately.
        """
        attempts = 0
        for _ in range(self.max_retries + 1):
            attempts += 1
            try:
                credentials = self.session_manager.credentials()
            except AuthenticationError as exc:
                with self._counter_lock:
                    self.auth_retries += 1
                print(f"[FETCH][auth_unavailable] path={path} attempt={attempts} error={exc}", flush=True)
                continue

            with self._counter_lock:
                self.requests_sent += 1
            try:
                response = self.session.get(
                    f"{credentials.base_url}{path}",
                    headers={
                        "User-Agent": self.session_manager.user_agent,
                        "Cookie": credentials.cookie,
                    },
                    params={**params, "crumb": credentials.crumb},
                    timeout=self.timeout_sec,
                )
            except requests.RequestException as exc:
                print(f"[FETCH][transport_error] path={path} error={exc}", flush=True)
                return FetchOutcome(
                    status=FetchStatus.CONNECTION_FAILED, attempts=attempts, detail=str(exc)
                )

            if self.is_auth_failure(response):
                with self._counter_lock:
                    self.auth_retries += 1
                print(
                    f"[FETCH][auth_retry] path={path} attempt={attempts} status={response.status_code}",
                    flush=True,
                )
                self.session_manager.invalidate(crumb=credentials.crumb)
                continue

            if not 200 <= int(response.status_code) < 300:
                print(f"[FETCH][http_error] path={path} status={response.status_code}", flush=True)
                return FetchOutcome(
                    status=FetchStatus.CONNECTION_FAILED,
                    attempts=attempts,
                    detail=f"status={response.status_code}",
                )

            try:
                payload = response.json()
            except ValueError as exc:
                return FetchOutcome(
                    status=FetchStatus.INVALID_RESPONSE, attempts=attempts, detail=str(exc)
                )
            return FetchOutcome(status=FetchStatus.OK, payload=payload, attempts=attempts)

        print(f"[FETCH][auth_exhausted] path={path} attempts={attempts}", flush=True)
        return FetchOutcome(status=FetchStatus.AUTH_FAILED, attempts=attempts)
