"""Note tools for capturing customer feedback in Productboard."""

import logging
from typing import Any

from ..utils.tool_decorators import handle_tool_errors
from .session import get_api_client

logger = logging.getLogger(__name__)

MAX_TITLE_LENGTH = 255


@handle_tool_errors
async def create_note(
    content: str,
    title: str | None = None,
    customer_email: str | None = None,
    tags: list[str] | None = None,
) -> dict[str, Any]:
    """
    Create a note (customer feedback) in Productboard.

    Args:
        content: Note body
        title: Optional title (defaults to the first line of the content)
        customer_email: Optional email of the customer the feedback came from
        tags: Optional tag names

    Returns:
        Dictionary containing:
            - note_id: Id of the created note
            - links: Links returned by the API (e.g. the note's HTML URL)
    """
    if not content or not content.strip():
        raise ValueError("content cannot be empty")

    title = (title or content.strip().splitlines()[0])[:MAX_TITLE_LENGTH]
    body: dict[str, Any] = {"title": title, "content": content}
    if customer_email:
        body["customer_email"] = customer_email
    if tags:
        body["tags"] = tags

    logger.info(f"Creating note: {title!r}")
    response = await get_api_client().post("/notes", body)
    data = response.get("data") or {}

    return {
        "note_id": data.get("id"),
        "links": response.get("links", {}),
    }


TOOL_SCHEMAS = [
    {
        "name": "pb_create_note",
        "description": (
            "Create a note in Productboard to capture customer feedback or insights. "
            "Requires write access to notes."
        ),
        "input_schema": {
            "type": "object",
            "properties": {
                "content": {"type": "string", "description": "Note content"},
                "title": {
                    "type": "string",
                    "maxLength": MAX_TITLE_LENGTH,
                    "description": "Optional title (defaults to the first line of content)",
                },
                "customer_email": {
                    "type": "string",
                    "format": "email",
                    "description": "Email of the customer the feedback came from",
                },
                "tags": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "Tags to attach to the note",
                },
            },
            "required": ["content"],
        },
        "handler": create_note,
    },
]
