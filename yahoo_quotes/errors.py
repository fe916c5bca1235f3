class YahooFinanceError(Exception):
    """Base error for the Yahoo Finance client."""


class AuthenticationError(YahooFinanceError):
    """No fallback strategy could produce a usable cookie/crumb pair."""
