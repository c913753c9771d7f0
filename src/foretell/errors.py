"""Exception hierarchy for foretell.

Provides structured error handling with specific exception types
for the different failure modes of the sync pass and the foreground flow.
"""

from typing import Optional


class ForetellError(Exception):
    """Base exception for all foretell errors.

    All custom exceptions inherit from this base class for easy catching.
    """

    pass


class NetworkError(ForetellError):
    """Network-related errors (downloads, API calls, timeouts)."""

    pass


class ScryfallError(NetworkError):
    """An error object returned by the Scryfall API."""

    def __init__(
        self,
        status: int,
        code: str = "",
        details: str = "",
        url: Optional[str] = None,
    ):
        self.status = status
        self.code = code
        self.details = details
        self.url = url
        message = f"scryfall returned {status}"
        if code:
            message += f" ({code})"
        if details:
            message += f": {details}"
        super().__init__(message)


class ResponseFormatError(NetworkError):
    """Scryfall answered with a payload that does not have the expected shape."""

    pass


class CardsNotFound(ScryfallError):
    """A card search matched nothing.

    For a set query this means the set is listed but its cards have not
    been published yet.
    """

    pass


class CatalogError(ForetellError):
    """The list of sets could not be retrieved; the sync pass cannot continue."""

    pass


class CacheError(ForetellError):
    """Cache directory or cache file errors (create, read, rewrite)."""

    pass


class LockError(CacheError):
    """The update lock could not be created or taken for a reason other than contention."""

    pass


class PickerError(ForetellError):
    """The picker process failed (crashed, killed, non-zero exit)."""

    pass


class ViewerError(ForetellError):
    """The image viewer failed."""

    pass