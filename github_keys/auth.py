"""Token handling for the GitHub API."""

from __future__ import annotations

from typing import Dict, Optional


def build_auth_headers(token: Optional[str] = None) -> Dict[str, str]:
    """Return Authorization header dict if a token is given.

    The token comes from SyncConfig (flag, GITHUB_TOKEN or config file);
    this function never reads the environment itself.
    """
    if token:
        return {"Authorization": f"Bearer {token}"}
    return {}
