"""GithubClient — the membership graph the sync pipeline reads from."""

from __future__ import annotations

import uuid
from typing import Any, Dict, List, Optional, Protocol

import httpx

from github_keys.auth import build_auth_headers
from github_keys.errors import (
    ApiError,
    AuthError,
    ForbiddenError,
    NotFoundError,
    RateLimitError,
    ServerError,
    ValidationError,
)
from github_keys.models import Membership, Page, PublicKey, Team, User

DEFAULT_BASE_URL = "https://api.github.com"
API_VERSION = "2022-11-28"


class MembershipGraph(Protocol):
    """The remote operations the sync pipeline needs.

    Listing calls return one page; ``get_team_membership`` raises
    ``NotFoundError`` when the user is not on the team.
    """

    def list_org_members(self, org: str, page: int = 1) -> Page[User]: ...

    def list_org_teams(self, org: str, page: int = 1) -> Page[Team]: ...

    def get_team_membership(self, org: str, team: Team, login: str) -> Membership: ...

    def list_repo_collaborators(self, owner: str, repo: str, page: int = 1) -> Page[User]: ...

    def list_user_keys(self, login: str, page: int = 1) -> Page[PublicKey]: ...


def generate_request_id() -> str:
    """Generate a short UUID4 hex string for X-Request-ID."""
    return uuid.uuid4().hex[:12]


def next_page_number(resp: httpx.Response) -> Optional[int]:
    """Page number of the ``rel="next"`` link, or None on the last page."""
    link = resp.links.get("next")
    if not link or "url" not in link:
        return None
    page = httpx.URL(link["url"]).params.get("page")
    if page is None or not page.isdigit():
        return None
    return int(page)


class GithubClient:
    """Synchronous client for the subset of the GitHub REST API used here.

    Usage::

        from github_keys.client import GithubClient

        with GithubClient(token="...") as gh:
            page = gh.list_org_members("acme")
            print([u.login for u in page.items])
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        token: Optional[str] = None,
        timeout: float = 30.0,
        per_page: int = 100,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._token = token
        self._timeout = timeout
        self._per_page = per_page
        self._client = httpx.Client(
            base_url=self._base_url, timeout=self._timeout, transport=transport
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "GithubClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # ── Internal helpers ─────────────────────────────────────────

    def _headers(self) -> Dict[str, str]:
        headers: Dict[str, str] = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": API_VERSION,
            "X-Request-ID": generate_request_id(),
        }
        headers.update(build_auth_headers(self._token))
        return headers

    def _raise_for_status(self, resp: httpx.Response) -> None:
        if resp.status_code < 400:
            return
        request_id = resp.headers.get("x-github-request-id")
        try:
            body = resp.json()
        except ValueError:
            body = resp.text

        if isinstance(body, dict):
            message = body.get("message") or str(body)
        else:
            message = str(body) or resp.reason_phrase
        message = f"{message} ({resp.request.method} {resp.request.url.path})"

        if resp.status_code == 401:
            raise AuthError(resp.status_code, message, body, request_id)
        if resp.status_code == 403:
            if resp.headers.get("x-ratelimit-remaining") == "0":
                raise RateLimitError(resp.status_code, message, body, request_id)
            raise ForbiddenError(resp.status_code, message, body, request_id)
        if resp.status_code == 404:
            raise NotFoundError(resp.status_code, message, body, request_id)
        if resp.status_code == 422:
            raise ValidationError(resp.status_code, message, body, request_id)
        if resp.status_code == 429:
            raise RateLimitError(resp.status_code, message, body, request_id)
        if resp.status_code >= 500:
            raise ServerError(resp.status_code, message, body, request_id)
        raise ApiError(resp.status_code, message, body, request_id)

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> httpx.Response:
        resp = self._client.get(path, params=params, headers=self._headers())
        self._raise_for_status(resp)
        return resp

    def _get_page(self, path: str, page: int) -> httpx.Response:
        return self._get(path, params={"per_page": self._per_page, "page": page})

    # ── Public API ───────────────────────────────────────────────

    def list_org_members(self, org: str, page: int = 1) -> Page[User]:
        """GET /orgs/{org}/members"""
        resp = self._get_page(f"/orgs/{org}/members", page)
        return Page([User(**u) for u in resp.json()], next_page_number(resp))

    def list_org_teams(self, org: str, page: int = 1) -> Page[Team]:
        """GET /orgs/{org}/teams"""
        resp = self._get_page(f"/orgs/{org}/teams", page)
        return Page([Team(**t) for t in resp.json()], next_page_number(resp))

    def get_team_membership(self, org: str, team: Team, login: str) -> Membership:
        """GET /orgs/{org}/teams/{team_slug}/memberships/{username}"""
        resp = self._get(f"/orgs/{org}/teams/{team.slug}/memberships/{login}")
        return Membership(**resp.json())

    def list_repo_collaborators(self, owner: str, repo: str, page: int = 1) -> Page[User]:
        """GET /repos/{owner}/{repo}/collaborators"""
        resp = self._get_page(f"/repos/{owner}/{repo}/collaborators", page)
        return Page([User(**u) for u in resp.json()], next_page_number(resp))

    def list_user_keys(self, login: str, page: int = 1) -> Page[PublicKey]:
        """GET /users/{username}/keys"""
        resp = self._get_page(f"/users/{login}/keys", page)
        keys: List[PublicKey] = [PublicKey(**k) for k in resp.json()]
        return Page(keys, next_page_number(resp))
