"""Repo-wide test fixtures.

Snapshots and restores the environment variables the config loader reads,
so a developer's GITHUB_TOKEN never leaks into a test.
"""

from __future__ import annotations

import os

import pytest

_SENSITIVE_ENV_VARS = [
    "GITHUB_TOKEN",
    "GITHUB_KEYS_ORG",
    "GITHUB_KEYS_TEAM",
    "GITHUB_KEYS_REPO",
    "GITHUB_KEYS_FILE",
    "GITHUB_KEYS_OWNER",
    "GITHUB_KEYS_DAEMON",
    "GITHUB_KEYS_SYNC_PERIOD",
    "GITHUB_KEYS_BASE_URL",
    "GITHUB_KEYS_LOG_FORMAT",
]


@pytest.fixture(autouse=True)
def _clean_env():
    """Clear config env vars before each test and restore them after."""
    snapshot = {}
    for var in _SENSITIVE_ENV_VARS:
        val = os.environ.pop(var, None)
        if val is not None:
            snapshot[var] = val

    yield

    for var in _SENSITIVE_ENV_VARS:
        if var in snapshot:
            os.environ[var] = snapshot[var]
        else:
            os.environ.pop(var, None)
