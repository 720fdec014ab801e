"""Error taxonomy shared by every stage of the share pipeline."""

_SNIPPET_LIMIT = 200


def snippet(text: str | bytes, limit: int = _SNIPPET_LIMIT) -> str:
    """Return at most ``limit`` characters of ``text`` for diagnostics."""
    if isinstance(text, bytes):
        text = text.decode("utf-8", errors="replace")
    if len(text) <= limit:
        return text
    return text[:limit] + "..."


class ClipperError(Exception):
    """Base class for all page-clipper errors."""


class NetworkError(ClipperError):
    """Transport-level failure (connection refused, reset, timeout)."""


class HTTPError(ClipperError):
    """Non-2xx response from a remote service."""

    def __init__(self, status: int, body: str | bytes = b""):
        self.status = status
        self.body = body.decode("utf-8", errors="replace") if isinstance(body, bytes) else body
        super().__init__(f"HTTP {status}: {snippet(self.body)}")


class RateLimited(HTTPError):
    """The generative model refused the request with HTTP 429."""

    def __init__(self, body: str | bytes = b""):
        super().__init__(429, body)

    def __str__(self) -> str:
        return "Rate limited by the AI model (HTTP 429). Try again in a minute."


class ServerError(HTTPError):
    """The generative model failed with a 5xx status."""

    def __str__(self) -> str:
        return f"AI model server error (HTTP {self.status})"


class ModelError(ClipperError):
    """Structured error object returned by the generative model."""

    def __init__(self, message: str, status: str | None = None, code: int | None = None):
        self.message = message
        self.status = status
        self.code = code
        label = " ".join(str(p) for p in (code, status) if p)
        super().__init__(f"AI model error ({label}): {message}" if label else f"AI model error: {message}")


class DecodingError(ClipperError):
    """A response body did not have the expected shape."""

    def __init__(self, message: str, raw: str | bytes = "", limit: int = _SNIPPET_LIMIT):
        self.snippet = snippet(raw, limit)
        super().__init__(f"{message}. Received: {self.snippet}")


class EmptyResponseError(ClipperError):
    """The store accepted a create request but returned no usable item id."""


class InvalidURL(ClipperError):
    """The URL cannot be fetched (missing or unsupported scheme/host)."""


class MissingCredentials(ClipperError):
    """One or more required credentials are not configured."""


class InvalidTransition(ClipperError):
    """A pipeline event was not valid for the current state."""


def describe_error(exc: BaseException) -> str:
    """Render an exception as the single message shown to the user."""
    if isinstance(exc, NetworkError):
        return f"Network error: {exc}" if str(exc) else "Network error"
    if isinstance(exc, (RateLimited, ServerError)):
        return str(exc)
    if isinstance(exc, HTTPError):
        if exc.status == 413:
            return exc.body or "Page too large"
        return f"Request failed ({exc.status}): {snippet(exc.body)}"
    if isinstance(exc, ClipperError):
        return str(exc) or exc.__class__.__name__
    return f"Unexpected error: {exc}" if str(exc) else f"Unexpected error: {exc.__class__.__name__}"
