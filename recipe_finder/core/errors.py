from enum import Enum
from typing import Optional


class SearchErrorKind(str, Enum):
    EMPTY_QUERY = "EmptyQuery"
    TIMEOUT = "Timeout"
    NETWORK_ERROR = "NetworkError"
    DETAILS_UNAVAILABLE = "DetailsUnavailable"


class SearchSignal(str, Enum):
    """Outcome of a search that did not fail"""

    FOUND = "Found"
    NO_MATCHES = "NoMatches"


class SearchError(Exception):
    """Base for every failure surfaced by the catalog client.

    ``message`` is the text shown to the user; ``str(exc)`` carries the
    technical detail for logs.
    """

    kind: SearchErrorKind = SearchErrorKind.NETWORK_ERROR
    message: str = "Failed to fetch recipes. Please check your internet connection."

    def __init__(self, detail: str = "", message: Optional[str] = None):
        super().__init__(detail or self.message)
        if message is not None:
            self.message = message


class EmptyQueryError(SearchError):
    kind = SearchErrorKind.EMPTY_QUERY
    message = "Please enter at least one ingredient"


class CatalogTimeoutError(SearchError):
    kind = SearchErrorKind.TIMEOUT
    message = "Request timed out. Please check your connection and try again."


class NetworkError(SearchError):
    kind = SearchErrorKind.NETWORK_ERROR

    def __init__(self, detail: str = "", status_code: Optional[int] = None):
        message = "Server error. Please try again later." if status_code else None
        super().__init__(detail, message)
        self.status_code = status_code


class DetailsUnavailableError(SearchError):
    kind = SearchErrorKind.DETAILS_UNAVAILABLE
    message = "Found recipes but failed to load details. Please try again."


class PersistenceError(Exception):
    """Key-value storage could not be read or written"""
