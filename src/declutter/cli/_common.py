"""Common CLI utilities and the main app group."""

import logging
import os
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler

console = Console(stderr=True)
_configured = False


def _load_env_file(env_path: Path | None = None) -> None:
    """
    Load environment variables from a .env file if one exists.

    Variables already present in the environment win.

    Args:
        env_path: Optional path to .env file. If None, looks for .env in current directory.
    """
    if env_path is None:
        env_path = Path.cwd() / ".env"

    if not env_path.is_file():
        return

    for line in env_path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.removeprefix("export ").strip()
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
            value = value[1:-1]
        if key and key not in os.environ:
            os.environ[key] = value


# API keys and DECLUTTER_* settings may live in .env
_load_env_file()


def configure_logging(*, verbose: bool = False) -> None:
    """Configure logging with Rich handler. Call once at startup."""
    global _configured
    if _configured:
        return

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[
            RichHandler(
                console=console,
                rich_tracebacks=True,
                tracebacks_show_locals=verbose,
                show_path=verbose,
            )
        ],
        force=True,
    )

    # Suppress noisy third-party loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    _configured = True


@click.group(help="Declutter web pages into clean markdown, HTML or PDF.")
@click.version_option(package_name="declutter", prog_name="declutter")
def app() -> None:
    """
    Entry point for the declutter CLI.

    Provides commands for decluttering a single page, an interactive loop
    over many pages, and converting existing markdown output.
    """
