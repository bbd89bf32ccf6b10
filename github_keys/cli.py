"""github-keys CLI — Typer app."""

from __future__ import annotations

import datetime
import json
import logging
import sys
import traceback
from typing import Optional

import typer
from rich.console import Console

from github_keys import __version__
from github_keys.client import GithubClient
from github_keys.config import load_config
from github_keys.errors import ConfigError
from github_keys.sync import collect, run_daemon, sync_once

logger = logging.getLogger(__name__)

console = Console(stderr=True)

EXIT_FATAL = 1
EXIT_CONFIG = 2
EXIT_INTERRUPTED = 130

app = typer.Typer(
    name="github-keys",
    help=(
        "Sync SSH public keys of GitHub organization members into an authorized_keys file.\n\n"
        "Exit codes: 0=OK, 1=FATAL, 2=CONFIG_ERROR."
    ),
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
    epilog=(
        "Examples:\n"
        "  github-keys sync --org acme --file /home/deploy/.ssh/authorized_keys --owner deploy\n"
        "  github-keys sync --org acme --team ops,sre --file keys --owner deploy --daemon\n"
        "  github-keys sync --org acme --repo infra --dry-run\n"
    ),
)


class _JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        event = {
            "ts": datetime.datetime.fromtimestamp(record.created, datetime.timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            event["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(event, separators=(",", ":"))


def _setup_logging(verbose: bool, log_format: str = "text") -> None:
    handler = logging.StreamHandler(sys.stderr)
    if log_format == "json":
        handler.setFormatter(_JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO, handlers=[handler])
    if not verbose:
        logging.getLogger("httpx").setLevel(logging.WARNING)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"github-keys v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False, "--version", "-v", help="Show version and exit.",
        callback=_version_callback, is_eager=True,
    ),
) -> None:
    """github-keys — authorized_keys from GitHub."""
    pass


# ── sync ─────────────────────────────────────────────────────────

@app.command()
def sync(
    org: Optional[str] = typer.Option(None, "--org", help="Organisation members to sync."),
    team: Optional[str] = typer.Option(
        None, "--team", help="Comma-separated list of teams within the organisation to sync."
    ),
    repo: Optional[str] = typer.Option(
        None, "--repo", help="Comma-separated list of repositories whose collaborators to sync."
    ),
    file: Optional[str] = typer.Option(None, "--file", help="Authorized keys file to write to."),
    owner: Optional[str] = typer.Option(None, "--owner", help="Enforce this owner on the file."),
    token: Optional[str] = typer.Option(
        None, "--token", envvar="GITHUB_TOKEN", show_envvar=True, help="GitHub API token."
    ),
    daemon: bool = typer.Option(False, "--daemon", help="Keep running and sync periodically."),
    sync_period: Optional[str] = typer.Option(
        None, "--sync-period", help="How often to sync in daemon mode, e.g. 5m, 1h30m. [default: 5m]"
    ),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Optional YAML config file."),
    base_url: Optional[str] = typer.Option(None, "--base-url", help="GitHub API base URL."),
    no_dedupe: bool = typer.Option(
        False, "--no-dedupe", help="Fetch members again for every team/repo they appear in."
    ),
    keep_going: bool = typer.Option(
        False, "--keep-going", help="In daemon mode, log a failed cycle and wait for the next one."
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Print the rendered file to stdout; do not write or chown."
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Enable DEBUG logging."),
) -> None:
    """Resolve members, fetch their keys and write the authorized_keys file.

    Example:
      github-keys sync --org acme --team ops --file /home/deploy/.ssh/authorized_keys --owner deploy
    """
    try:
        cfg = load_config(
            config,
            require_sink=not dry_run,
            org=org,
            teams=team,
            repos=repo,
            file=file,
            owner=owner,
            token=token,
            daemon=daemon or None,
            sync_period=sync_period,
            base_url=base_url,
            dedupe=False if no_dedupe else None,
            keep_going=keep_going or None,
        )
    except ConfigError as e:
        console.print(f"[red bold]Error:[/red bold] {e}")
        raise SystemExit(EXIT_CONFIG)

    _setup_logging(verbose, cfg.log_format)
    logger.debug("loaded config: %s", cfg.to_dict())

    def _impl() -> None:
        with GithubClient(base_url=cfg.base_url, token=cfg.token or None) as gh:
            if dry_run:
                result = collect(cfg, gh)
                typer.echo(result.content.decode("utf-8"), nl=False)
            elif cfg.daemon:
                run_daemon(cfg, gh)
            else:
                sync_once(cfg, gh)

    _run_safe(_impl, verbose=verbose)


# ── version ──────────────────────────────────────────────────────

@app.command()
def version() -> None:
    """Show version info."""
    typer.echo(f"github-keys v{__version__}")


def _run_safe(fn, verbose: bool = False) -> None:
    """Run a function with clean error handling."""
    try:
        fn()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted.[/yellow]")
        raise SystemExit(EXIT_INTERRUPTED)
    except ConfigError as e:
        console.print(f"[red bold]Error:[/red bold] {e}")
        raise SystemExit(EXIT_CONFIG)
    except Exception as e:
        logger.error("sync failed: %s", e)
        console.print(f"\n[red bold]Error:[/red bold] {e}")
        if verbose:
            console.print(traceback.format_exc())
        else:
            console.print("[dim]Run with --verbose for full traceback.[/dim]")
        raise SystemExit(EXIT_FATAL)
