from __future__ import annotations

import threading

from fastapi import FastAPI

from yahoo_quotes.api.routes import router
from yahoo_quotes.client import YahooFinanceClient
from yahoo_quotes.config.settings import get_settings


def create_app(client: YahooFinanceClient | None = None) -> FastAPI:
    app = FastAPI(title="Yahoo Quotes", version="0.1.0")
    app.include_router(router, prefix="/v1")

    # NOTE: client is built on first request so app import does not read env.
    app.state.get_settings = get_settings
    app.state.finance_client = client
    app.state.client_lock = threading.Lock()
    return app


app = create_app()
