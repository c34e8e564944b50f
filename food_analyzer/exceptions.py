"""Error taxonomy shared by the services and the CLI."""


class FoodAnalyzerError(Exception):
    """Base class for all food analyzer errors."""

    pass


class TransportError(FoodAnalyzerError):
    """A backend was unreachable or answered with a non-success status."""

    pass


class ServiceUnavailableError(TransportError):
    """AI service is temporarily unavailable."""

    pass


class RateLimitError(TransportError):
    """Rate limit exceeded."""

    pass


class RequestError(TransportError, ValueError):
    """The AI service rejected the request (4xx other than rate limiting)."""

    pass


class SearchBackendError(TransportError):
    """The web search backend failed or returned an error payload."""

    pass


class PageFetchError(TransportError):
    """A single result page could not be fetched."""

    pass


class InputValidationError(FoodAnalyzerError, ValueError):
    """A required field is missing or malformed; raised before any external call."""

    pass


class ProfileExistsError(FoodAnalyzerError):
    """A profile with this user id already exists and we are not editing it."""

    pass


class StorageError(FoodAnalyzerError):
    """A read or write against the key-value store failed."""

    pass


class PartialEnrichmentError(FoodAnalyzerError):
    """The web search for a single health term failed."""

    def __init__(self, term: str, category: str, cause: Exception | None = None):
        super().__init__(f"Search failed for {category} '{term}': {cause}")
        self.term = term
        self.category = category
        self.cause = cause
