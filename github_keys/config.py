"""Sync configuration: one immutable value built at startup.

Sources, lowest precedence first: defaults, an optional YAML file,
environment variables, explicit overrides (CLI flags). The core functions
receive the resulting :class:`SyncConfig` and never read the environment.
"""

from __future__ import annotations

import os
import re
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

import yaml

from github_keys.client import DEFAULT_BASE_URL
from github_keys.errors import ConfigError
from github_keys.resolver import MemberFilter, split_names

DEFAULT_SYNC_PERIOD = 300.0

_DURATION_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}
_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ns|us|µs|ms|s|m|h)")

# env var -> config field
_ENV_FIELDS = {
    "GITHUB_TOKEN": "token",
    "GITHUB_KEYS_ORG": "org",
    "GITHUB_KEYS_TEAM": "teams",
    "GITHUB_KEYS_REPO": "repos",
    "GITHUB_KEYS_FILE": "file",
    "GITHUB_KEYS_OWNER": "owner",
    "GITHUB_KEYS_DAEMON": "daemon",
    "GITHUB_KEYS_SYNC_PERIOD": "sync_period",
    "GITHUB_KEYS_BASE_URL": "base_url",
    "GITHUB_KEYS_LOG_FORMAT": "log_format",
}

# YAML keys accepted besides the field names themselves.
_ALIASES = {"team": "teams", "repo": "repos"}


def parse_duration(value: Union[str, int, float]) -> float:
    """Parse ``"5m"``, ``"1h30m"``, ``"500ms"`` or a bare number of seconds."""
    if isinstance(value, bool):
        raise ConfigError(f"invalid duration: {value!r}")
    if isinstance(value, (int, float)):
        return float(value)
    text = value.strip()
    try:
        return float(text)
    except ValueError:
        pass
    pos = 0
    total = 0.0
    for match in _DURATION_PART.finditer(text):
        if match.start() != pos:
            break
        total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        pos = match.end()
    if pos == 0 or pos != len(text):
        raise ConfigError(f"invalid duration: {value!r}")
    return total


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "on")


def _parse_names(value: Any) -> Tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, (list, tuple)):
        return tuple(str(v).strip() for v in value if str(v).strip())
    return split_names(str(value))


@dataclass(frozen=True)
class SyncConfig:
    """Immutable sync configuration. Safe to log — the token is masked."""

    org: str = ""
    teams: Tuple[str, ...] = ()
    repos: Tuple[str, ...] = ()
    file: str = ""
    owner: str = ""
    daemon: bool = False
    sync_period: float = DEFAULT_SYNC_PERIOD
    token: str = ""
    base_url: str = DEFAULT_BASE_URL
    dedupe: bool = True
    keep_going: bool = False
    log_format: str = "text"

    def __repr__(self) -> str:
        return (
            f"SyncConfig(org={self.org!r}, teams={self.teams!r}, repos={self.repos!r}, "
            f"file={self.file!r}, owner={self.owner!r}, daemon={self.daemon}, "
            f"sync_period={self.sync_period}, token={'***' if self.token else ''!r}, "
            f"base_url={self.base_url!r}, dedupe={self.dedupe}, keep_going={self.keep_going})"
        )

    @property
    def member_filter(self) -> MemberFilter:
        return MemberFilter(teams=self.teams, repos=self.repos)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "SyncConfig":
        """Build config from a plain dict, normalising value types."""
        values: Dict[str, Any] = {}
        for key, value in d.items():
            key = _ALIASES.get(key, key)
            if key not in cls.__dataclass_fields__:
                raise ConfigError(f"unknown config key: {key}")
            if value is None:
                continue
            if key in ("teams", "repos"):
                value = _parse_names(value)
            elif key == "sync_period":
                value = parse_duration(value)
            elif key in ("daemon", "dedupe", "keep_going"):
                value = _parse_bool(value)
            else:
                value = str(value)
            values[key] = value
        return cls(**values)

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> Dict[str, Any]:
        """Read the raw mapping from a YAML config file."""
        p = Path(path)
        if not p.exists():
            raise ConfigError(f"Config file not found: {path}")
        with open(p) as f:
            raw = yaml.safe_load(f)
        if raw is None:
            return {}
        if not isinstance(raw, dict):
            raise ConfigError(f"Config file must be a YAML mapping: {path}")
        return raw

    def validate(self, require_sink: bool = True) -> None:
        """Raise ConfigError if the configuration is invalid."""
        if not self.org:
            raise ConfigError("org is required")
        self.member_filter.validate()
        if require_sink:
            if not self.file:
                raise ConfigError("file is required")
            if not self.owner:
                raise ConfigError("owner is required")
        if self.sync_period <= 0:
            raise ConfigError(f"sync_period must be positive, got {self.sync_period}")
        if self.log_format not in ("text", "json"):
            raise ConfigError(f"log_format must be 'text' or 'json', got '{self.log_format}'")

    def to_dict(self) -> Dict[str, Any]:
        """JSON-safe dict with the token masked."""
        d = asdict(self)
        d["teams"] = list(self.teams)
        d["repos"] = list(self.repos)
        d["token"] = "configured" if self.token else "not set"
        return d


def load_config(
    config_path: Optional[Union[str, Path]] = None,
    require_sink: bool = True,
    **overrides: Any,
) -> SyncConfig:
    """Load and validate configuration.

    Args:
        config_path: Optional YAML file.
        require_sink: Whether ``file`` and ``owner`` must be set.
        **overrides: Field overrides; ``None`` values are ignored.

    Returns:
        Validated SyncConfig instance
    """
    raw: Dict[str, Any] = {}
    if config_path:
        for key, val in SyncConfig.from_yaml(config_path).items():
            raw[_ALIASES.get(key, key)] = val

    for var, key in _ENV_FIELDS.items():
        val = os.environ.get(var)
        if val:
            raw[key] = val

    for key, val in overrides.items():
        if val is not None:
            raw[key] = val

    config = SyncConfig.from_dict(raw)
    config.validate(require_sink=require_sink)
    return config
