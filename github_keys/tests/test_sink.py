"""Tests for writing the authorized_keys file."""

from __future__ import annotations

import os
import pwd
import stat

import pytest

from github_keys.errors import SinkError
from github_keys.sink import Owner, resolve_owner, write_authorized_keys


@pytest.fixture
def chown_calls(monkeypatch):
    calls = []
    monkeypatch.setattr(os, "chown", lambda path, uid, gid: calls.append((str(path), uid, gid)))
    return calls


OWNER = Owner(name="deploy", uid=1001, gid=1002)


class TestWriteAuthorizedKeys:
    def test_writes_bytes_with_0600(self, tmp_path, chown_calls):
        path = tmp_path / "authorized_keys"
        n = write_authorized_keys(path, b"# a - 1\nssh-rsa AAAA\n", OWNER)
        assert n == len(b"# a - 1\nssh-rsa AAAA\n")
        assert path.read_bytes() == b"# a - 1\nssh-rsa AAAA\n"
        assert stat.S_IMODE(path.stat().st_mode) == 0o600

    def test_replaces_whole_file(self, tmp_path, chown_calls):
        path = tmp_path / "authorized_keys"
        path.write_bytes(b"old content that is longer than the new one\n")
        os.chmod(path, 0o644)
        write_authorized_keys(path, b"new\n", OWNER)
        assert path.read_bytes() == b"new\n"
        assert stat.S_IMODE(path.stat().st_mode) == 0o600

    def test_empty_content(self, tmp_path, chown_calls):
        path = tmp_path / "authorized_keys"
        write_authorized_keys(path, b"", OWNER)
        assert path.read_bytes() == b""

    def test_creates_parent_directory(self, tmp_path, chown_calls):
        path = tmp_path / ".ssh" / "authorized_keys"
        write_authorized_keys(path, b"x\n", OWNER)
        assert path.exists()

    def test_chowns_to_owner(self, tmp_path, chown_calls):
        path = tmp_path / "authorized_keys"
        write_authorized_keys(path, b"x\n", OWNER)
        assert chown_calls == [(str(path), 1001, 1002)]

    def test_chown_failure_after_write(self, tmp_path, monkeypatch):
        def deny(*args):
            raise PermissionError("Operation not permitted")

        monkeypatch.setattr(os, "chown", deny)
        path = tmp_path / "authorized_keys"
        with pytest.raises(SinkError, match="chown"):
            write_authorized_keys(path, b"written anyway\n", OWNER)
        assert path.read_bytes() == b"written anyway\n"

    def test_write_failure(self, tmp_path, chown_calls):
        target = tmp_path / "is_a_dir"
        target.mkdir()
        with pytest.raises(SinkError, match="write"):
            write_authorized_keys(target, b"x\n", OWNER)
        assert chown_calls == []


class TestResolveOwner:
    def test_current_user(self):
        entry = pwd.getpwuid(os.getuid())
        owner = resolve_owner(entry.pw_name)
        assert (owner.uid, owner.gid) == (entry.pw_uid, entry.pw_gid)

    def test_unknown_user(self):
        with pytest.raises(SinkError, match="uid/gid"):
            resolve_owner("no-such-user-github-keys")
