from fastapi import APIRouter, HTTPException, Query, Request

from yahoo_quotes.client import YahooFinanceClient
from yahoo_quotes.schemas.quote import QuoteError

router = APIRouter()

_ERROR_STATUS = {
    "NOT_FOUND": 404,
    "AUTHENTICATION_FAILED": 502,
    "CONNECTION_FAILED": 502,
    "INVALID_RESPONSE": 502,
}


def _client(request: Request) -> YahooFinanceClient:
    state = request.app.state
    client = state.finance_client
    if client is None:
        with state.client_lock:
            client = state.finance_client
            if client is None:
                client = YahooFinanceClient(state.get_settings())
                state.finance_client = client
    return client


@router.get('/quotes/{symbol}')
def get_quote(symbol: str, request: Request):
    result = _client(request).get_quote(symbol)
    if isinstance(result, QuoteError):
        raise HTTPException(status_code=_ERROR_STATUS.get(result.code, 502), detail=result.error)
    return result.model_dump(mode='json')


@router.get('/quotes')
def get_quotes(request: Request, symbols: str = Query(default='')):
    requested = [s.strip() for s in symbols.split(',') if s.strip()]
    results = _client(request).get_quotes(requested)
    return {symbol: result.model_dump(mode='json') for symbol, result in results.items()}


@router.get('/dividends/{symbol}')
def get_dividend_history(
    symbol: str,
    request: Request,
    range_: str = Query(default='2y', alias='range'),
):
    result = _client(request).get_dividend_history_result(symbol, range_)
    return {
        'symbol': symbol,
        'range': range_,
        'dividends': [event.model_dump(mode='json') for event in result.events],
        'error': result.error,
    }


@router.get('/session/status')
def get_session_status(request: Request):
    return _client(request).session_manager.status().model_dump()


@router.get('/metrics')
def get_metrics(request: Request):
    return _client(request).metrics()
