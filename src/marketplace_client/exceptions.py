"""Exception hierarchy for the marketplace client.

Every failure surfaced to a caller derives from MarketplaceClientError so the
presentation layer can catch one type and still branch on the specific kind.
"""


class MarketplaceClientError(Exception):
    """Base class for all marketplace client failures."""


class ValidationError(MarketplaceClientError):
    """Input rejected locally before any network call was attempted."""


class NetworkError(MarketplaceClientError):
    """The request never produced a response (unreachable host, timeout, etc.)."""


class ServerError(MarketplaceClientError):
    """The server answered with a failure status other than 401."""

    def __init__(self, status: int, message: str | None = None) -> None:
        """Initialize the error.

        Args:
            status: HTTP status code returned by the server
            message: Server-provided message, if the response carried one
        """
        self.status = status
        self.message = message or f"Request failed with status {status}"
        super().__init__(self.message)


class DecodeError(MarketplaceClientError):
    """A success response carried a body that could not be decoded."""


class AuthExpiredError(MarketplaceClientError):
    """The server rejected the session credentials (HTTP 401)."""


class NotFoundError(MarketplaceClientError):
    """No local entry matches the requested id."""

    def __init__(self, entity: str, entity_id: str) -> None:
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} not found")
