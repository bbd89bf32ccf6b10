"""Fetch public keys for resolved identities and aggregate them."""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from github_keys.client import MembershipGraph
from github_keys.models import Key, User
from github_keys.pagination import collect_pages
from github_keys.retry import RetryPolicy

logger = logging.getLogger(__name__)


def fetch_keys(
    graph: MembershipGraph, user: User, *, policy: Optional[RetryPolicy] = None
) -> List[Key]:
    """All public keys registered to ``user``, commented ``"<login> - <key-id>"``.

    A user that no longer exists (404) has no keys.
    """
    public_keys = collect_pages(
        lambda page: graph.list_user_keys(user.login, page),
        policy=policy,
        operation=f"retrieve ssh keys of {user.login}",
        missing_ok=True,
    )
    return [Key.for_user(user, pk) for pk in public_keys]


def unique_users(users: Iterable[User]) -> List[User]:
    """Drop repeated identities, keeping first-seen order."""
    seen = set()
    out: List[User] = []
    for user in users:
        if user.login in seen:
            continue
        seen.add(user.login)
        out.append(user)
    return out


def build_key_set(
    graph: MembershipGraph,
    users: Iterable[User],
    *,
    policy: Optional[RetryPolicy] = None,
    dedupe: bool = True,
) -> List[Key]:
    """Concatenate the keys of ``users`` in order.

    With ``dedupe`` each login is fetched once per cycle. Identical keys
    registered to different users are always kept.
    """
    users = list(users)
    if dedupe:
        before = len(users)
        users = unique_users(users)
        if len(users) != before:
            logger.debug("skipped %d repeated members", before - len(users))

    keys: List[Key] = []
    for user in users:
        keys.extend(fetch_keys(graph, user, policy=policy))
    return keys
