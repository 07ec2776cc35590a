"""Error types for the Productboard MCP server."""


class ProductboardError(Exception):
    """Base exception for Productboard MCP errors."""

    pass


# API errors
class APIError(ProductboardError):
    """Raised when a Productboard API request fails.

    Attributes:
        status_code: HTTP status code of the failed response, or None when the
            request never produced a response (connection failure, timeout).
    """

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class APIValidationError(APIError):
    """Raised when the API rejects a request body or parameters (400/422)."""

    def __init__(self, message: str = "Validation failed", status_code: int = 400):
        super().__init__(message, status_code)


class APIAuthenticationError(APIError):
    """Raised when the API token is missing, invalid or expired (401)."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message, 401)


class APIAuthorizationError(APIError):
    """Raised when the credentials lack permission for an operation (403)."""

    def __init__(self, message: str = "Access forbidden"):
        super().__init__(message, 403)


class APINotFoundError(APIError):
    """Raised when the requested endpoint or resource does not exist (404)."""

    def __init__(self, message: str = "Resource not found"):
        super().__init__(message, 404)


class APIRateLimitError(APIError):
    """Raised when the API throttles the client (429)."""

    def __init__(self, message: str = "Rate limit exceeded", retry_after: float | None = None):
        super().__init__(message, 429)
        self.retry_after = retry_after


class NotConnectedError(ProductboardError):
    """Raised when operation requires an open API client."""

    def __init__(self, hint: str = "Use 'async with client' first"):
        super().__init__(f"Not connected. {hint}")


# Configuration errors
class ConfigurationError(ProductboardError):
    """Raised when configuration is missing or invalid."""

    pass


class MissingAPIKeyError(ConfigurationError):
    """Raised when required API key is not found."""

    def __init__(self, key_name: str):
        super().__init__(f"{key_name} not found in environment")
        self.key_name = key_name


# Permission errors
class ToolPermissionError(ProductboardError):
    """Raised when discovered permissions do not allow a tool to run."""

    def __init__(self, tool_name: str, missing: list[str]):
        super().__init__(
            f"Insufficient permissions for {tool_name}: missing {', '.join(missing)}"
        )
        self.tool_name = tool_name
        self.missing = missing
