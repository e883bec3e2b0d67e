"""Exception hierarchy for the listings watcher."""
from __future__ import annotations


class ListingWatcherError(Exception):
    pass


class ExchangeError(ListingWatcherError):
    """A single exchange could not deliver its symbol list."""


class ExchangeRequestError(ExchangeError):
    pass


class ExchangeResponseError(ExchangeError):
    pass


class StateDocumentError(ListingWatcherError):
    """A persisted state document is missing, unreadable or mis-shaped."""
