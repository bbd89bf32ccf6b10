"""Shared fixtures: an in-memory membership graph that records every call."""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

import pytest

from github_keys.errors import NotFoundError, ServerError
from github_keys.models import Membership, Page, PublicKey, Team, User
from github_keys.retry import RetryPolicy


class FakeGraph:
    """MembershipGraph double. Listings are split into ``page_size`` pages.

    ``missing_users`` lists logins whose key listing answers 404.
    ``failures`` maps an operation name to the number of transient errors to
    raise before answering.
    """

    def __init__(
        self,
        members: Optional[List[User]] = None,
        teams: Optional[List[Team]] = None,
        memberships: Optional[Dict[Tuple[str, str], str]] = None,
        collaborators: Optional[Dict[str, List[User]]] = None,
        keys: Optional[Dict[str, List[PublicKey]]] = None,
        page_size: int = 100,
        failures: Optional[Dict[str, int]] = None,
        missing_users: Optional[List[str]] = None,
    ) -> None:
        self.members = members or []
        self.teams = teams or []
        self.memberships = memberships or {}
        self.collaborators = collaborators or {}
        self.keys = keys or {}
        self.page_size = page_size
        self.failures = dict(failures or {})
        self.missing_users = set(missing_users or ())
        self.calls: List[tuple] = []

    def count(self, op: str) -> int:
        return sum(1 for c in self.calls if c[0] == op)

    def _record(self, op: str, *args) -> None:
        self.calls.append((op,) + args)
        if self.failures.get(op, 0) > 0:
            self.failures[op] -= 1
            raise ServerError(502, "Bad Gateway")

    def _page(self, items: list, page: int) -> Page:
        start = (page - 1) * self.page_size
        end = start + self.page_size
        return Page(list(items[start:end]), page + 1 if end < len(items) else None)

    def list_org_members(self, org: str, page: int = 1) -> Page[User]:
        self._record("list_org_members", org, page)
        return self._page(self.members, page)

    def list_org_teams(self, org: str, page: int = 1) -> Page[Team]:
        self._record("list_org_teams", org, page)
        return self._page(self.teams, page)

    def get_team_membership(self, org: str, team: Team, login: str) -> Membership:
        self._record("get_team_membership", team.name, login)
        state = self.memberships.get((team.name, login))
        if state is None:
            raise NotFoundError(404, "Not Found")
        return Membership(state=state)

    def list_repo_collaborators(self, owner: str, repo: str, page: int = 1) -> Page[User]:
        self._record("list_repo_collaborators", repo, page)
        if repo not in self.collaborators:
            raise NotFoundError(404, "Not Found")
        return self._page(self.collaborators[repo], page)

    def list_user_keys(self, login: str, page: int = 1) -> Page[PublicKey]:
        self._record("list_user_keys", login, page)
        if login in self.missing_users:
            raise NotFoundError(404, "Not Found")
        return self._page(self.keys.get(login, []), page)


@pytest.fixture
def make_graph():
    return FakeGraph


@pytest.fixture
def fast_policy() -> RetryPolicy:
    return RetryPolicy.fast()


@pytest.fixture
def alice() -> User:
    return User(login="alice", id=1)


@pytest.fixture
def bob() -> User:
    return User(login="bob", id=2)


@pytest.fixture
def carol() -> User:
    return User(login="carol", id=3)
