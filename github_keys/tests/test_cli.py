"""Tests for the github-keys CLI."""

from __future__ import annotations

import pytest
from typer.testing import CliRunner

import github_keys.cli as cli
from github_keys import __version__
from github_keys.cli import app
from github_keys.models import PublicKey

runner = CliRunner()


class FakeClient:
    """Stands in for GithubClient; delegates to a FakeGraph."""

    instances = []

    def __init__(self, graph, **kwargs):
        self.graph = graph
        self.kwargs = kwargs
        FakeClient.instances.append(self)

    def __enter__(self):
        return self.graph

    def __exit__(self, *exc):
        return None


@pytest.fixture
def fake_client(monkeypatch, make_graph, alice):
    FakeClient.instances = []
    graph = make_graph(members=[alice], keys={"alice": [PublicKey(id=7, key="ssh-ed25519 AAAA")]})
    monkeypatch.setattr(cli, "GithubClient", lambda **kw: FakeClient(graph, **kw))
    return FakeClient


class TestVersion:
    def test_version_command(self):
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_version_flag(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output


class TestSyncCommand:
    def test_team_and_repo_rejected_without_client(self, fake_client):
        result = runner.invoke(
            app,
            ["sync", "--org", "acme", "--team", "ops", "--repo", "infra", "--file", "f", "--owner", "o"],
        )
        assert result.exit_code == 2
        assert fake_client.instances == []

    def test_missing_org(self, fake_client):
        result = runner.invoke(app, ["sync", "--file", "f", "--owner", "o"])
        assert result.exit_code == 2
        assert fake_client.instances == []

    def test_dry_run_prints_keys(self, fake_client):
        result = runner.invoke(app, ["sync", "--org", "acme", "--dry-run"])
        assert result.exit_code == 0, result.output
        assert "# alice - 7\nssh-ed25519 AAAA\n" in result.output

    def test_writes_file(self, fake_client, tmp_path, monkeypatch):
        import os
        import pwd

        monkeypatch.setattr(os, "chown", lambda *a: None)
        target = tmp_path / "authorized_keys"
        owner = pwd.getpwuid(os.getuid()).pw_name
        result = runner.invoke(
            app,
            ["sync", "--org", "acme", "--file", str(target), "--owner", owner, "--token", "tok"],
        )
        assert result.exit_code == 0, result.output
        assert target.read_bytes() == b"# alice - 7\nssh-ed25519 AAAA\n"
        assert fake_client.instances[0].kwargs["token"] == "tok"

    def test_unknown_team_exits_nonzero(self, fake_client, tmp_path):
        target = tmp_path / "authorized_keys"
        result = runner.invoke(
            app,
            ["sync", "--org", "acme", "--team", "ghosts", "--file", str(target), "--owner", "root"],
        )
        assert result.exit_code == 1
        assert not target.exists()

    def test_unknown_owner_exits_nonzero(self, fake_client, tmp_path):
        result = runner.invoke(
            app,
            ["sync", "--org", "acme", "--file", str(tmp_path / "k"), "--owner", "no-such-user-github-keys"],
        )
        assert result.exit_code == 1


class TestNoArgsHelp:
    def test_no_args_shows_help(self):
        result = runner.invoke(app, [])
        assert "sync" in result.output
