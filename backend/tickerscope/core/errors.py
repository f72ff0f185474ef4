from __future__ import annotations


class TickerscopeError(Exception):
    """Base class for recoverable engine errors."""


class NotFoundError(TickerscopeError, LookupError):
    """The requested symbol is not in the catalog."""

    def __init__(self, symbol: str):
        self.symbol = symbol
        super().__init__(f"symbol not found: {symbol}")


class CatalogUnavailableError(TickerscopeError):
    """The catalog has not been loaded yet; retry after load completes."""

    def __init__(self, msg: str = "catalog not loaded"):
        super().__init__(msg)


class SearchCancelledError(TickerscopeError):
    pass
