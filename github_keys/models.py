"""Pydantic models for GitHub payloads and the authorized_keys entries built from them.

Everything here is a read-only snapshot fetched during one sync cycle.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict

T = TypeVar("T")


class _Snapshot(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


# ── Membership graph ─────────────────────────────────────────────

class User(_Snapshot):
    login: str
    id: int


class Team(_Snapshot):
    id: int
    name: str
    slug: str


class Membership(_Snapshot):
    state: str
    role: str = "member"

    @property
    def is_active(self) -> bool:
        return self.state == "active"


class PublicKey(_Snapshot):
    id: int
    key: str


# ── Output ───────────────────────────────────────────────────────

class Key(_Snapshot):
    """One authorized_keys entry: a comment line plus the key material."""

    comment: str
    material: str

    @classmethod
    def for_user(cls, user: User, public_key: PublicKey) -> "Key":
        return cls(comment=f"{user.login} - {public_key.id}", material=public_key.key)


@dataclass
class Page(Generic[T]):
    """One page of a paginated listing. ``next_page`` is None on the last page."""

    items: List[T] = field(default_factory=list)
    next_page: Optional[int] = None
