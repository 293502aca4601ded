"""Pydantic models for data validation and serialization."""

from .auth import JWTPayload
from .message import MessageRecord, SerializedMessage
from .search import SearchPage, SearchRequest
from .server import Channel, Membership

__all__ = [
    "Channel",
    "Membership",
    "MessageRecord",
    "SerializedMessage",
    "SearchRequest",
    "SearchPage",
    "JWTPayload",
]
