"""HTTP API routes for message search."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Path, Query

from ..middleware import AuthContext, get_auth_context
from ...models.search import SearchPage
from ...services.search import SearchService, get_search_service

router = APIRouter(prefix="/api", tags=["search"])


@router.get("/servers/{server_id}/search", response_model=SearchPage)
def search_messages(
    server_id: str = Path(..., description="Server to search"),
    q: str = Query("", description="Text the message content must contain"),
    channel_id: Optional[str] = Query(None, alias="channelId", description="Restrict to one channel"),
    author_id: Optional[str] = Query(None, alias="authorId", description="Restrict to one author"),
    limit: Optional[str] = Query(None, description="Page size, clamped to 1-50 (default 25)"),
    cursor: Optional[str] = Query(None, description="nextCursor from the previous page"),
    auth: AuthContext = Depends(get_auth_context),
    service: SearchService = Depends(get_search_service),
):
    """
    Search a server's text channels for messages containing ``q``.

    **Query Parameters:**
    - `q`: Search text; blank returns an empty page
    - `channelId`: Only search this channel (must be a text channel of the server)
    - `authorId`: Only return messages by this user
    - `limit`: Page size; malformed values fall back to 25, others clamp to 1-50
    - `cursor`: Opaque `nextCursor` from a previous page

    **Response:**
    - `data`: Matching messages, newest first
    - `nextCursor`: Cursor for the next page, or null when there are no more

    Returns 403 when the caller is not a member of the server.
    """
    return service.search(
        auth.user_id,
        server_id,
        q=q,
        channel_id=channel_id,
        author_id=author_id,
        limit=limit,
        cursor=cursor,
    )


__all__ = ["router"]
