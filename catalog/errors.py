"""
Exception hierarchy for the catalog pipeline.

Store adapters translate transport and collaborator failures into these
types so callers never handle raw httpx exceptions.
"""


class CatalogError(Exception):
    """Base class for every catalog pipeline failure."""

    #: Short message suitable for a user-facing error banner
    user_message: str = "Something went wrong while loading the catalog."


class StoreError(CatalogError):
    """Raised when the backing store cannot satisfy a request."""


class StoreTransportError(StoreError):
    """Network failure or timeout talking to the store."""

    user_message = "The catalog service could not be reached."


class StoreResponseError(StoreError):
    """The store answered with an error payload (bad query, 5xx, ...)."""

    user_message = "The catalog service reported an error."

    def __init__(self, message: str, status_code: int | None = None, code: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.code = code


class StoreAuthError(StoreResponseError):
    """The store rejected our credentials (401/403)."""

    user_message = "You are not allowed to view this catalog."


class ShapeMismatchError(StoreError):
    """The store returned something that is not the expected list/object."""

    user_message = "The catalog service returned unexpected data."


class FetchError(CatalogError):
    """The Fetcher could not retrieve specimens; chains the store error."""

    def __init__(self, message: str, kind: str | None = None):
        super().__init__(message)
        self.kind = kind

    @property
    def user_message(self) -> str:  # type: ignore[override]
        cause = self.__cause__
        if isinstance(cause, CatalogError):
            return cause.user_message
        return CatalogError.user_message


class QuerySuperseded(CatalogError):
    """A newer query started while this one was still running."""

    user_message = "This search was replaced by a newer one."

    def __init__(self, generation: int, current: int):
        super().__init__(f"Query generation {generation} superseded by {current}")
        self.generation = generation
        self.current = current
