"""One sync cycle (resolve → fetch → render → write) and the daemon loop."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, List, Optional

from github_keys.client import MembershipGraph
from github_keys.config import SyncConfig
from github_keys.errors import ApiError, GithubKeysError
from github_keys.keys import build_key_set
from github_keys.models import Key, User
from github_keys.render import render_authorized_keys
from github_keys.resolver import resolve_members
from github_keys.retry import RetryPolicy
from github_keys.sink import Owner, resolve_owner, write_authorized_keys

logger = logging.getLogger(__name__)

Sink = Callable[[str, bytes, Owner], int]


@dataclass
class SyncResult:
    """Summary of a completed cycle."""

    members: List[User]
    keys: List[Key]
    content: bytes
    path: Optional[str] = None
    bytes_written: int = 0


def collect(
    config: SyncConfig,
    graph: MembershipGraph,
    *,
    policy: Optional[RetryPolicy] = None,
) -> SyncResult:
    """Resolve members and render their keys without touching the filesystem."""
    members = resolve_members(graph, config.org, config.member_filter, policy=policy)
    logger.info("resolved %d members of %s (%s filter)", len(members), config.org,
                config.member_filter.mode)
    keys = build_key_set(graph, members, policy=policy, dedupe=config.dedupe)
    logger.info("fetched %d public keys", len(keys))
    return SyncResult(members=members, keys=keys, content=render_authorized_keys(keys))


def sync_once(
    config: SyncConfig,
    graph: MembershipGraph,
    *,
    policy: Optional[RetryPolicy] = None,
    sink: Sink = write_authorized_keys,
    owner_lookup: Callable[[str], Owner] = resolve_owner,
) -> SyncResult:
    """Run a full cycle. Nothing is written unless resolution and fetching succeed."""
    config.validate()
    result = collect(config, graph, policy=policy)
    owner = owner_lookup(config.owner)
    result.path = config.file
    result.bytes_written = sink(config.file, result.content, owner)
    return result


def run_daemon(
    config: SyncConfig,
    graph: MembershipGraph,
    *,
    policy: Optional[RetryPolicy] = None,
    sink: Sink = write_authorized_keys,
    owner_lookup: Callable[[str], Owner] = resolve_owner,
    sleep: Callable[[float], None] = time.sleep,
    max_cycles: Optional[int] = None,
) -> int:
    """Run cycles back to back, waiting ``config.sync_period`` after each.

    A failed cycle stops the loop unless ``config.keep_going`` is set, in
    which case it is logged and the next tick runs as usual.

    Returns:
        Number of cycles that completed successfully.
    """
    logger.info("running in daemon mode (every %.0fs)", config.sync_period)
    completed = 0
    cycles = 0
    while max_cycles is None or cycles < max_cycles:
        cycles += 1
        try:
            sync_once(config, graph, policy=policy, sink=sink, owner_lookup=owner_lookup)
            completed += 1
        except (GithubKeysError, ApiError) as e:
            if not config.keep_going:
                raise
            logger.error("sync cycle %d failed: %s", cycles, e)
        if max_cycles is not None and cycles >= max_cycles:
            break
        sleep(config.sync_period)
    return completed
