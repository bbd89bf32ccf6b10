"""Write the rendered file and hand it to its owner."""

from __future__ import annotations

import logging
import os
import pwd
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from github_keys.errors import SinkError

logger = logging.getLogger(__name__)

FILE_MODE = 0o600


@dataclass(frozen=True)
class Owner:
    name: str
    uid: int
    gid: int


def resolve_owner(name: str) -> Owner:
    """Look up a local user's uid/gid."""
    try:
        entry = pwd.getpwnam(name)
    except KeyError as e:
        raise SinkError(f"failed to lookup users uid/gid: unknown user {name!r}") from e
    return Owner(name=name, uid=entry.pw_uid, gid=entry.pw_gid)


def write_authorized_keys(path: Union[str, Path], data: bytes, owner: Owner) -> int:
    """Replace ``path`` with ``data`` (mode 0600), then chown it to ``owner``.

    The write and the chown are separate steps: if the chown fails the new
    contents are already on disk.

    Returns:
        Number of bytes written.
    """
    p = Path(path)
    try:
        p.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(p, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, FILE_MODE)
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.chmod(p, FILE_MODE)
    except OSError as e:
        raise SinkError(f"failed to write authorized file {p}: {e}") from e
    logger.info("file has been written: %s", p)

    try:
        os.chown(p, owner.uid, owner.gid)
    except OSError as e:
        raise SinkError(f"failed to chown authorized file {p}: {e}") from e
    logger.info("user permissions have been updated: %s (%d:%d)", owner.name, owner.uid, owner.gid)
    return len(data)
