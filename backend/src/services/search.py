"""Message search pipeline.

A request flows through five stages:

1. membership guard - the requester must belong to the server;
2. query normalization - trim text, clamp the page size, drop blank ids;
3. channel scope - the server's text channels, or the one requested channel
   if it is among them;
4. execution - substring match ordered by ``(created_at, id)`` descending,
   fetching one row past the page to detect more results;
5. page encoding - trim the lookahead row and emit the next cursor.

The requesting user is passed explicitly to every call; nothing here reads
ambient request state.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Set

from ..models.message import MessageRecord
from ..models.search import SearchPage, SearchRequest
from .channels import ChannelStore
from .config import AppConfig, get_config
from .database import DatabaseService
from .membership import MembershipStore
from .messages import MessageFilter, MessageStore
from .serializers import MessageSerializer

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 25
MAX_LIMIT = 50


def parse_limit(raw: object, *, default: int = DEFAULT_LIMIT, maximum: int = MAX_LIMIT) -> int:
    """
    Parse a caller-supplied page size.

    Missing or non-integer values fall back to ``default``; everything else is
    clamped into ``[1, maximum]``, and never above ``MAX_LIMIT``.
    """
    if raw is None:
        return default
    try:
        value = int(str(raw).strip())
    except ValueError:
        return default
    return max(1, min(value, maximum, MAX_LIMIT))


def _optional_id(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    cleaned = value.strip()
    return cleaned or None


def normalize_query(
    server_id: str,
    *,
    q: Optional[str] = None,
    channel_id: Optional[str] = None,
    author_id: Optional[str] = None,
    limit: object = None,
    cursor: Optional[str] = None,
    default_limit: int = DEFAULT_LIMIT,
    max_limit: int = MAX_LIMIT,
) -> SearchRequest:
    """Turn raw query parameters into a canonical SearchRequest."""
    return SearchRequest(
        server_id=server_id,
        query=(q or "").strip(),
        channel_id=_optional_id(channel_id),
        author_id=_optional_id(author_id),
        limit=parse_limit(limit, default=default_limit, maximum=max_limit),
        cursor=_optional_id(cursor),
    )


class SearchService:
    """Scoped, paginated substring search over a server's messages."""

    def __init__(
        self,
        db_service: DatabaseService | None = None,
        *,
        config: AppConfig | None = None,
        memberships: MembershipStore | None = None,
        channels: ChannelStore | None = None,
        messages: MessageStore | None = None,
        serializer: MessageSerializer | None = None,
    ) -> None:
        self.config = config or get_config()
        db = db_service or DatabaseService(self.config.database_path)
        self.memberships = memberships or MembershipStore(db)
        self.channels = channels or ChannelStore(db)
        self.messages = messages or MessageStore(db)
        self.serializer = serializer or MessageSerializer(self.config.uploads_url_prefix)

    def search(
        self,
        user_id: str,
        server_id: str,
        *,
        q: Optional[str] = None,
        channel_id: Optional[str] = None,
        author_id: Optional[str] = None,
        limit: object = None,
        cursor: Optional[str] = None,
    ) -> SearchPage:
        """
        Run the full pipeline for one request.

        Raises MembershipError if ``user_id`` is not a member of ``server_id``.
        Store failures propagate unchanged.
        """
        self.memberships.authorize(user_id, server_id)

        request = normalize_query(
            server_id,
            q=q,
            channel_id=channel_id,
            author_id=author_id,
            limit=limit,
            cursor=cursor,
            default_limit=self.config.search_default_limit,
            max_limit=self.config.search_max_limit,
        )
        if not request.query:
            return SearchPage.empty()

        scope = self.resolve_scope(request.server_id, request.channel_id)
        if not scope:
            return SearchPage.empty()

        rows = self.execute(scope, request)
        page = self.encode_page(rows, request.limit)
        logger.info(
            "Search in server %s by %s returned %d messages (more=%s)",
            server_id,
            user_id,
            len(page.data),
            page.next_cursor is not None,
        )
        return page

    def resolve_scope(self, server_id: str, channel_id: Optional[str] = None) -> Set[str]:
        """
        Return the channel ids a search may read.

        A requested channel is honoured only when it is one of the server's
        text channels; otherwise the scope is empty.
        """
        text_channels = {channel.id for channel in self.channels.list_channels(server_id, "text")}
        if channel_id is None:
            return text_channels
        if channel_id in text_channels:
            return {channel_id}
        logger.info(
            "Channel %s is not a text channel of server %s; search scope is empty",
            channel_id,
            server_id,
        )
        return set()

    def execute(self, scope: Set[str], request: SearchRequest) -> List[MessageRecord]:
        """Fetch up to ``limit + 1`` matching rows, newest first."""
        return self.messages.search_messages(
            MessageFilter(
                channel_ids=sorted(scope),
                contains=request.query,
                author_id=request.author_id,
            ),
            limit=request.limit + 1,
            cursor=request.cursor,
            case_sensitive=self.config.search_case_sensitive,
        )

    def encode_page(self, rows: List[MessageRecord], limit: int) -> SearchPage:
        """Trim the lookahead row and compute the next cursor."""
        has_more = len(rows) > limit
        if has_more:
            rows = rows[:limit]
        return SearchPage(
            data=[self.serializer.serialize(row) for row in rows],
            next_cursor=rows[-1].id if has_more else None,
        )


# Singleton instance for dependency injection
_search_service: SearchService | None = None


def get_search_service() -> SearchService:
    """Get or create the search service singleton."""
    global _search_service
    if _search_service is None:
        _search_service = SearchService()
    return _search_service


__all__ = [
    "SearchService",
    "get_search_service",
    "normalize_query",
    "parse_limit",
    "DEFAULT_LIMIT",
    "MAX_LIMIT",
]
