"""Feature tools.

Productboard has no dedicated full-text search for features, so search is
implemented as a filtered listing of ``/features`` followed by client-side
matching on name, description and tag names.
"""

import logging
from typing import Any

from ..utils.tool_decorators import handle_tool_errors
from .session import get_api_client

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 20
MAX_LIMIT = 100

# Sort keys the /features endpoint understands; others fall back to API order
SERVER_SORT_KEYS = {"created_at", "updated_at"}

LIST_FILTERS = ("status", "product_ids", "owner_emails", "tags")
DATE_FILTERS = ("created_after", "created_before", "updated_after", "updated_before")


def _validate_paging(limit: int, offset: int) -> None:
    if not 1 <= limit <= MAX_LIMIT:
        raise ValueError(f"limit must be between 1 and {MAX_LIMIT}")
    if offset < 0:
        raise ValueError("offset must not be negative")


def build_feature_query(
    filters: dict[str, Any] | None = None,
    sort: str = "relevance",
    order: str = "desc",
    limit: int = DEFAULT_LIMIT,
    offset: int = 0,
) -> dict[str, Any]:
    """Translate search arguments into /features query parameters.

    List filters are joined with commas; date filters pass through unchanged.
    """
    params: dict[str, Any] = {"limit": limit, "offset": offset}

    if sort in SERVER_SORT_KEYS:
        params["sort"] = sort
        params["order"] = order

    for key in LIST_FILTERS:
        values = (filters or {}).get(key)
        if values:
            params[key] = ",".join(values)
    for key in DATE_FILTERS:
        value = (filters or {}).get(key)
        if value:
            params[key] = value

    return params


def feature_matches(feature: dict[str, Any], query: str) -> bool:
    """Check if a feature's name, description or tag names contain ``query``."""
    needle = query.lower()
    if needle in (feature.get("name") or "").lower():
        return True
    if needle in (feature.get("description") or "").lower():
        return True
    return any(
        needle in (tag.get("name") or "").lower()
        for tag in feature.get("tags") or []
        if isinstance(tag, dict)
    )


@handle_tool_errors
async def list_features(limit: int = DEFAULT_LIMIT, offset: int = 0) -> dict[str, Any]:
    """
    List features in the workspace.

    Args:
        limit: Maximum number of features to return (1-100)
        offset: Number of features to skip

    Returns:
        Dictionary containing:
            - features: List of feature objects
            - count: Number of features returned
            - links: Pagination links from the API, if any
    """
    _validate_paging(limit, offset)
    logger.info(f"Listing features (limit={limit}, offset={offset})")

    response = await get_api_client().get("/features", params={"limit": limit, "offset": offset})
    features = response.get("data") or []

    return {
        "features": features,
        "count": len(features),
        "links": response.get("links", {}),
    }


@handle_tool_errors
async def search_features(
    query: str,
    filters: dict[str, Any] | None = None,
    sort: str = "relevance",
    order: str = "desc",
    limit: int = DEFAULT_LIMIT,
    offset: int = 0,
) -> dict[str, Any]:
    """
    Search features by text and filters.

    Args:
        query: Search text; "*" matches every feature
        filters: Optional status, product_ids, owner_emails, tags and date bounds
        sort: relevance, created_at, updated_at, votes or comments
        order: asc or desc
        limit: Maximum number of results (1-100)
        offset: Number of results to skip

    Returns:
        Dictionary containing:
            - query: The search text
            - features: Matching feature objects
            - count: Number of matches in this page
    """
    if not query:
        raise ValueError("query is required")
    _validate_paging(limit, offset)
    logger.info(f"Searching features: {query!r}")

    params = build_feature_query(filters, sort=sort, order=order, limit=limit, offset=offset)
    response = await get_api_client().get("/features", params=params)

    features = response.get("data") or []
    if query != "*":
        features = [f for f in features if isinstance(f, dict) and feature_matches(f, query)]

    return {
        "query": query,
        "features": features,
        "count": len(features),
    }


_DATE_FILTER_SCHEMA = {"type": "string", "format": "date"}

TOOL_SCHEMAS = [
    {
        "name": "pb_list_features",
        "description": "List features in the Productboard workspace, with pagination.",
        "input_schema": {
            "type": "object",
            "properties": {
                "limit": {
                    "type": "integer",
                    "minimum": 1,
                    "maximum": MAX_LIMIT,
                    "default": DEFAULT_LIMIT,
                    "description": "Maximum number of features to return",
                },
                "offset": {
                    "type": "integer",
                    "minimum": 0,
                    "default": 0,
                    "description": "Number of features to skip",
                },
            },
            "required": [],
        },
        "handler": list_features,
    },
    {
        "name": "pb_search_features",
        "description": (
            "Advanced search for features. Matches the query against feature names, "
            "descriptions and tag names, with optional filters by status, product, "
            "owner, tags and creation/update dates."
        ),
        "input_schema": {
            "type": "object",
            "properties": {
                "query": {"type": "string", "description": "Search query text"},
                "filters": {
                    "type": "object",
                    "properties": {
                        "status": {
                            "type": "array",
                            "items": {"type": "string"},
                            "description": "Filter by status",
                        },
                        "product_ids": {
                            "type": "array",
                            "items": {"type": "string"},
                            "description": "Filter by product IDs",
                        },
                        "owner_emails": {
                            "type": "array",
                            "items": {"type": "string"},
                            "description": "Filter by owner emails",
                        },
                        "tags": {
                            "type": "array",
                            "items": {"type": "string"},
                            "description": "Filter by tags",
                        },
                        "created_after": _DATE_FILTER_SCHEMA,
                        "created_before": _DATE_FILTER_SCHEMA,
                        "updated_after": _DATE_FILTER_SCHEMA,
                        "updated_before": _DATE_FILTER_SCHEMA,
                    },
                },
                "sort": {
                    "type": "string",
                    "enum": ["relevance", "created_at", "updated_at", "votes", "comments"],
                    "default": "relevance",
                    "description": "Sort results by",
                },
                "order": {
                    "type": "string",
                    "enum": ["asc", "desc"],
                    "default": "desc",
                    "description": "Sort order",
                },
                "limit": {
                    "type": "integer",
                    "minimum": 1,
                    "maximum": MAX_LIMIT,
                    "default": DEFAULT_LIMIT,
                    "description": "Maximum number of results",
                },
                "offset": {
                    "type": "integer",
                    "minimum": 0,
                    "default": 0,
                    "description": "Number of results to skip",
                },
            },
            "required": ["query"],
        },
        "handler": search_features,
    },
]
