"""Structured exceptions for github-keys."""

from __future__ import annotations

from typing import Any, Optional


class ApiError(Exception):
    """Base exception for all GitHub API errors."""

    def __init__(
        self,
        status_code: int,
        message: str,
        detail: Any = None,
        request_id: Optional[str] = None,
    ) -> None:
        self.status_code = status_code
        self.message = message
        self.detail = detail
        self.request_id = request_id
        super().__init__(f"[{status_code}] {message}")


class AuthError(ApiError):
    """401 Unauthorized — missing or invalid token."""
    pass


class ForbiddenError(ApiError):
    """403 Forbidden — token lacks the required scope."""
    pass


class NotFoundError(ApiError):
    """404 Not Found — a definite negative answer, never retried."""
    pass


class ValidationError(ApiError):
    """422 Unprocessable Entity — invalid request parameters."""
    pass


class RateLimitError(ApiError):
    """429, or 403 with an exhausted rate limit."""
    pass


class ServerError(ApiError):
    """500+ — server-side error."""
    pass


class GithubKeysError(Exception):
    """Base error for local github-keys failures."""


class ConfigError(GithubKeysError):
    """Invalid or missing configuration."""


class ResolutionError(GithubKeysError):
    """A named team or resource could not be resolved in the organization."""


class TeamNotFoundError(ResolutionError):
    def __init__(self, team: str, org: str) -> None:
        self.team = team
        self.org = org
        super().__init__(f"Team {team} not part of organisation {org}")


class SinkError(GithubKeysError):
    """Writing the authorized_keys file or applying its owner failed."""


class RetryExhaustedError(GithubKeysError):
    """A bounded retry policy gave up."""

    def __init__(self, operation: str, attempts: int, last_error: BaseException) -> None:
        self.operation = operation
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"{operation}: gave up after {attempts} attempts ({last_error})")
