"""Entry point for python -m github_keys."""

from github_keys.cli import app

if __name__ == "__main__":
    app()
