"""Productboard tools exposed over MCP."""

from .features import list_features, search_features
from .notes import create_note
from .permissions import get_permissions

# Each tool module exposes a ``TOOL_SCHEMAS`` list of dicts with ``name``,
# ``description``, ``input_schema`` and ``handler`` keys.
from .features import TOOL_SCHEMAS as _features_schemas
from .notes import TOOL_SCHEMAS as _notes_schemas
from .permissions import TOOL_SCHEMAS as _permissions_schemas

ALL_TOOL_SCHEMAS: list[dict] = [
    *_permissions_schemas,
    *_features_schemas,
    *_notes_schemas,
]

__all__ = [
    "ALL_TOOL_SCHEMAS",
    "create_note",
    "get_permissions",
    "list_features",
    "search_features",
]
