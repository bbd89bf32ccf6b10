"""Resolve which organization members should receive access.

Three mutually exclusive modes:

* no filter: every member of the organization;
* team filter: members whose membership in one of the listed teams is active;
* repo filter: collaborators of the listed repositories.

Duplicates across teams or repositories are kept here; see
:func:`github_keys.keys.unique_users`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from github_keys.client import MembershipGraph
from github_keys.errors import ConfigError, TeamNotFoundError
from github_keys.models import Team, User
from github_keys.pagination import collect_pages
from github_keys.retry import RetryPolicy, retry_call

logger = logging.getLogger(__name__)


def split_names(value: Optional[str]) -> Tuple[str, ...]:
    """Parse a comma-separated list, dropping blank entries."""
    if not value:
        return ()
    return tuple(v.strip() for v in value.split(",") if v.strip())


@dataclass(frozen=True)
class MemberFilter:
    teams: Tuple[str, ...] = ()
    repos: Tuple[str, ...] = ()

    @property
    def mode(self) -> str:
        if self.teams:
            return "team"
        if self.repos:
            return "repo"
        return "org"

    def validate(self) -> None:
        if self.teams and self.repos:
            raise ConfigError("Can not specify both --team and --repo flags")


def list_org_members(
    graph: MembershipGraph, org: str, *, policy: Optional[RetryPolicy] = None
) -> List[User]:
    return collect_pages(
        lambda page: graph.list_org_members(org, page),
        policy=policy,
        operation=f"retrieve members of {org}",
    )


def find_team(
    graph: MembershipGraph, org: str, name: str, *, policy: Optional[RetryPolicy] = None
) -> Team:
    """Look up a team by exact (case-sensitive) name."""
    teams = collect_pages(
        lambda page: graph.list_org_teams(org, page),
        policy=policy,
        operation=f"retrieve teams of {org}",
    )
    for team in teams:
        if team.name == name:
            return team
    raise TeamNotFoundError(name, org)


def is_active_member(
    graph: MembershipGraph,
    org: str,
    team: Team,
    user: User,
    *,
    policy: Optional[RetryPolicy] = None,
) -> bool:
    # 404 means the user is not on the team.
    membership = retry_call(
        lambda: graph.get_team_membership(org, team, user.login),
        policy=policy,
        operation=f"retrieve membership of {user.login} in {team.name}",
        not_found=None,
    )
    return membership is not None and membership.is_active


def list_repo_collaborators(
    graph: MembershipGraph, org: str, repo: str, *, policy: Optional[RetryPolicy] = None
) -> List[User]:
    return collect_pages(
        lambda page: graph.list_repo_collaborators(org, repo, page),
        policy=policy,
        operation=f"retrieve collaborators of {org}/{repo}",
        missing_ok=True,
    )


def resolve_members(
    graph: MembershipGraph,
    org: str,
    member_filter: Optional[MemberFilter] = None,
    *,
    policy: Optional[RetryPolicy] = None,
) -> List[User]:
    """Return the identities to sync, in discovery order.

    Raises:
        ConfigError: both team and repo filters given (before any remote call).
        TeamNotFoundError: a listed team does not exist in ``org``.
    """
    member_filter = member_filter or MemberFilter()
    member_filter.validate()

    if member_filter.repos:
        resolved: List[User] = []
        for repo in member_filter.repos:
            collaborators = list_repo_collaborators(graph, org, repo, policy=policy)
            logger.debug("repo %s: %d collaborators", repo, len(collaborators))
            resolved.extend(collaborators)
        return resolved

    members = list_org_members(graph, org, policy=policy)
    if not member_filter.teams:
        return members

    resolved = []
    for name in member_filter.teams:
        team = find_team(graph, org, name, policy=policy)
        matched = [m for m in members if is_active_member(graph, org, team, m, policy=policy)]
        logger.debug("team %s: %d active members", name, len(matched))
        resolved.extend(matched)
    return resolved
