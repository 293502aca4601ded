"""Service layer for business logic and persistence."""

from .auth import AuthError, AuthService
from .channels import ChannelStore
from .config import AppConfig, get_config, reload_config
from .database import DatabaseService, init_database
from .membership import MembershipError, MembershipStore
from .messages import MessageFilter, MessageStore
from .search import SearchService, get_search_service, normalize_query, parse_limit
from .serializers import MessageSerializer, aggregate_reactions

__all__ = [
    "AppConfig",
    "get_config",
    "reload_config",
    "DatabaseService",
    "init_database",
    "AuthService",
    "AuthError",
    "MembershipStore",
    "MembershipError",
    "ChannelStore",
    "MessageStore",
    "MessageFilter",
    "MessageSerializer",
    "aggregate_reactions",
    "SearchService",
    "get_search_service",
    "normalize_query",
    "parse_limit",
]
