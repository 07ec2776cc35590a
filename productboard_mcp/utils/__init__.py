"""Utility functions and classes."""

from .errors import (
    APIAuthenticationError,
    APIAuthorizationError,
    APIError,
    APINotFoundError,
    APIRateLimitError,
    APIValidationError,
    ProductboardError,
    ToolPermissionError,
)
from .logging_config import setup_logging
from .tool_decorators import handle_tool_errors

__all__ = [
    "APIAuthenticationError",
    "APIAuthorizationError",
    "APIError",
    "APINotFoundError",
    "APIRateLimitError",
    "APIValidationError",
    "ProductboardError",
    "ToolPermissionError",
    "handle_tool_errors",
    "setup_logging",
]
