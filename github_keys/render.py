"""authorized_keys rendering."""

from __future__ import annotations

from typing import Iterable

from github_keys.models import Key


def render_authorized_keys(keys: Iterable[Key]) -> bytes:
    """Render keys as ``# <comment>\\n<material>\\n`` records, in order."""
    return "".join(f"# {key.comment}\n{key.material}\n" for key in keys).encode("utf-8")
