"""github-keys — sync SSH public keys of GitHub organization members into authorized_keys."""

__version__ = "1.0.0"

from github_keys.config import SyncConfig, load_config
from github_keys.client import GithubClient, MembershipGraph
from github_keys.models import Key, Membership, Page, PublicKey, Team, User
from github_keys.render import render_authorized_keys
from github_keys.resolver import MemberFilter, resolve_members
from github_keys.keys import build_key_set, fetch_keys
from github_keys.retry import RetryPolicy, retry_call
from github_keys.sync import SyncResult, run_daemon, sync_once
from github_keys.errors import (
    ApiError,
    AuthError,
    ConfigError,
    ForbiddenError,
    GithubKeysError,
    NotFoundError,
    RateLimitError,
    ResolutionError,
    RetryExhaustedError,
    ServerError,
    SinkError,
    TeamNotFoundError,
    ValidationError,
)

__all__ = [
    "SyncConfig",
    "load_config",
    "GithubClient",
    "MembershipGraph",
    "Key",
    "Membership",
    "Page",
    "PublicKey",
    "Team",
    "User",
    "render_authorized_keys",
    "MemberFilter",
    "resolve_members",
    "build_key_set",
    "fetch_keys",
    "RetryPolicy",
    "retry_call",
    "SyncResult",
    "run_daemon",
    "sync_once",
    "ApiError",
    "AuthError",
    "ConfigError",
    "ForbiddenError",
    "GithubKeysError",
    "NotFoundError",
    "RateLimitError",
    "ResolutionError",
    "RetryExhaustedError",
    "ServerError",
    "SinkError",
    "TeamNotFoundError",
    "ValidationError",
]
