"""Decorators for standardizing tool error handling."""

import functools
import logging
from collections.abc import Callable
from typing import Any, TypeVar

from .errors import (
    APIAuthenticationError,
    APIAuthorizationError,
    APIError,
    APINotFoundError,
    APIRateLimitError,
    APIValidationError,
    ConfigurationError,
    ToolPermissionError,
)

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def _error(message: str, error_type: str, **extra: Any) -> dict[str, Any]:
    return {"status": "error", "message": message, "error_type": error_type, **extra}


def handle_tool_errors(func: F) -> F:
    """Standardize error handling for async tool functions.

    Catches API and configuration errors and returns consistent error format:
    {"status": "error", "message": "...", "error_type": "..."}

    On success, adds "status": "success" to the result if not already present.

    Example:
        @handle_tool_errors
        async def my_tool(param: str) -> dict[str, Any]:
            # If this raises, caller gets {"status": "error", "message": "...", ...}
            result = await client.get(f"/features/{param}")
            return {"data": result}
    """

    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> dict[str, Any]:
        tool_name = func.__name__
        try:
            result = await func(*args, **kwargs)
            if isinstance(result, dict) and "status" not in result:
                result["status"] = "success"
            return result
        except APIAuthenticationError as e:
            logger.error(f"Tool {tool_name} authentication failed: {e}")
            return _error("Authentication required", "AuthenticationError")
        except (APIAuthorizationError, ToolPermissionError) as e:
            logger.error(f"Tool {tool_name} forbidden: {e}")
            return _error(str(e) or "Access forbidden", "ForbiddenError")
        except APINotFoundError as e:
            logger.error(f"Tool {tool_name} not found: {e}")
            return _error("Resource not found", "NotFoundError")
        except APIRateLimitError as e:
            logger.warning(f"Tool {tool_name} rate limited: {e}")
            return _error("Rate limit exceeded", "RateLimitError", retry_after=e.retry_after)
        except APIValidationError as e:
            logger.error(f"Tool {tool_name} rejected by API: {e}")
            return _error(str(e), "ValidationError")
        except APIError as e:
            logger.error(f"Tool {tool_name} API error {e.status_code}: {e}")
            return _error(f"API error: {e}", "APIError", status_code=e.status_code)
        except ConfigurationError as e:
            logger.error(f"Tool {tool_name} misconfigured: {e}")
            return _error(str(e), "ConfigurationError")
        except ValueError as e:
            logger.error(f"Tool {tool_name} validation error: {e}")
            return _error(str(e), "ValidationError")
        except Exception as e:
            logger.exception(f"Tool {tool_name} unexpected error: {e}")
            return _error(f"Unexpected error: {e}", type(e).__name__)

    return wrapper  # type: ignore[return-value]
