"""Declutter command: one page in, one document out."""

import asyncio
from pathlib import Path
from typing import Any

import click

from declutter.cli._common import app, configure_logging, console
from declutter.exceptions import DeclutterError
from declutter.llm import DEFAULT_MODELS, PROVIDERS, LLMClient, resolve_llm_config
from declutter.models import DEFAULT_MAX_OUTPUT_TOKENS, OUTPUT_FORMATS, PDF_OUTPUT_FORMAT
from declutter.services.declutter import DeclutterInput, declutter_url
from declutter.services.session import SessionConfig, SessionManager
from declutter.services.styles import DEFAULT_STYLE, STYLES
from declutter.utils import normalise_address

DEFAULT_OUTPUT_DIRECTORY = Path.home() / "Documents"

_MODEL_HELP = "\n".join(f"{provider} -> {model}" for provider, model in DEFAULT_MODELS.items())


def build_session_config(browser_path: str | None, stealth: bool, timeout: int | None) -> SessionConfig:
    """SessionConfig from CLI flags; unset flags fall back to DECLUTTER_* variables."""
    overrides: dict[str, Any] = {"stealth": stealth}
    if browser_path:
        overrides["browser_path"] = browser_path
    if timeout is not None:
        overrides["timeout_ms"] = timeout
    return SessionConfig(**overrides)


def build_request(params: dict[str, Any]) -> DeclutterInput:
    """
    Turn parsed ``exec`` parameters into a pipeline request.

    Args:
        params: Parameter values keyed by click parameter name.

    Returns:
        DeclutterInput with a fresh LLM client (the caller closes it).

    Raises:
        ConfigurationError: If the provider cannot be resolved.
    """
    llm_config = resolve_llm_config(
        provider=params.get("provider"),
        model=params.get("model_name"),
        gemini_key=params.get("gemini_key"),
        openai_key=params.get("openai_key"),
        openrouter_key=params.get("open_router_key"),
        anthropic_key=params.get("anthropic_key"),
    )
    return DeclutterInput(
        url=normalise_address(params["url"]),
        client=LLMClient(llm_config),
        max_tokens=params.get("max_tokens", DEFAULT_MAX_OUTPUT_TOKENS),
        output_format=params.get("output_format", PDF_OUTPUT_FORMAT),
        output_directory=Path(params.get("directory") or DEFAULT_OUTPUT_DIRECTORY),
        style=params.get("style", DEFAULT_STYLE),
        session_config=build_session_config(
            params.get("browser_path"),
            params.get("stealth", False),
            params.get("timeout"),
        ),
    )


async def run_request(request: DeclutterInput, session: SessionManager | None = None) -> list[Path]:
    """Run the pipeline under a status spinner, closing the LLM client afterwards."""
    try:
        with console.status(f"Decluttering {request.url} ..."):
            return await declutter_url(request, session)
    finally:
        await request.client.close()


def report_written(paths: list[Path]) -> None:
    for path in paths:
        console.print(f"[green]✓[/green] written output to {path}")


@app.command("exec", help="Declutter a web page into a markdown, HTML or PDF document.")
@click.argument("url")
@click.option(
    "--max-tokens",
    "-t",
    type=click.IntRange(min=1),
    default=DEFAULT_MAX_OUTPUT_TOKENS,
    show_default=True,
    help="Max tokens in the LLM output. Raise it for very long pages.",
)
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(OUTPUT_FORMATS, case_sensitive=False),
    default=PDF_OUTPUT_FORMAT,
    show_default=True,
    help="Output format. The markdown file is always written as well.",
)
@click.option(
    "--style",
    "-s",
    type=click.Choice(list(STYLES)),
    default=DEFAULT_STYLE,
    show_default=True,
    help="Theme for html and pdf output.",
)
@click.option(
    "--directory",
    "-d",
    type=click.Path(exists=True, file_okay=False, dir_okay=True, writable=True, path_type=Path),
    default=DEFAULT_OUTPUT_DIRECTORY,
    show_default="~/Documents",
    help="Existing, writable directory under which Decluttered/ is created.",
)
@click.option(
    "--gemini-key",
    "-g",
    envvar="GEMINI_API_KEY",
    default=None,
    help="Gemini API key. Reads GEMINI_API_KEY env.",
)
@click.option(
    "--openai-key",
    "-o",
    envvar="OPENAI_API_KEY",
    default=None,
    help="OpenAI API key. Reads OPENAI_API_KEY env.",
)
@click.option(
    "--open-router-key",
    "-r",
    envvar="OPENROUTER_API_KEY",
    default=None,
    help="OpenRouter API key. Reads OPENROUTER_API_KEY env.",
)
@click.option(
    "--anthropic-key",
    "-a",
    envvar="ANTHROPIC_API_KEY",
    default=None,
    help="Anthropic API key. Reads ANTHROPIC_API_KEY env.",
)
@click.option(
    "--model-name",
    "-m",
    envvar="DEFAULT_DECLUTTER_MODEL",
    default=None,
    help=f"Model for the selected provider. Reads DEFAULT_DECLUTTER_MODEL env. Defaults: {_MODEL_HELP}",
)
@click.option(
    "--provider",
    "-p",
    type=click.Choice(PROVIDERS, case_sensitive=False),
    default=None,
    help="LLM provider. Its API key must be given by flag or env. Default: first provider with a key, else ollama.",
)
@click.option(
    "--browser-path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Chromium executable to drive. Also reads DECLUTTER_BROWSER_PATH env.",
)
@click.option(
    "--stealth/--no-stealth",
    default=False,
    help="Enhanced stealth mode via Patchright (requires: pip install declutter[stealth]).",
)
@click.option(
    "--timeout",
    type=click.IntRange(min=1),
    default=None,
    help="Navigation timeout in ms. Also reads DECLUTTER_TIMEOUT env (default 30000).",
)
@click.option("--verbose", "-v", is_flag=True, default=False, help="Debug logging.")
def exec_url(
    url: str,
    max_tokens: int,
    output_format: str,
    style: str,
    directory: Path,
    gemini_key: str | None,
    openai_key: str | None,
    open_router_key: str | None,
    anthropic_key: str | None,
    model_name: str | None,
    provider: str | None,
    browser_path: str | None,
    stealth: bool,
    timeout: int | None,
    verbose: bool,
) -> None:
    """Fetch a page like a person would, strip the clutter with an LLM, write the result.

    ANTI-BOT PROTECTION (automatic, no configuration needed):
        Spoofed user agent and headers, navigator patches, and simulated
        reading (pause, cursor move, scroll) are always active.

    FOR HEAVILY PROTECTED SITES:
        Install: pip install declutter[stealth]
        Then use: --stealth flag

    Examples:
        declutter exec https://example.com/post
        declutter exec example.com/post --format html --style CLASSIC_BOOK
        declutter exec https://example.com/post -f md -d ~/notes
        declutter exec https://example.com/post --provider ollama -m llama3.2
    """
    configure_logging(verbose=verbose)
    params = {
        "url": url,
        "max_tokens": max_tokens,
        "output_format": output_format.lower(),
        "style": style,
        "directory": directory,
        "gemini_key": gemini_key,
        "openai_key": openai_key,
        "open_router_key": open_router_key,
        "anthropic_key": anthropic_key,
        "model_name": model_name,
        "provider": provider,
        "browser_path": browser_path,
        "stealth": stealth,
        "timeout": timeout,
    }

    try:
        request = build_request(params)
        paths = asyncio.run(run_request(request))
    except DeclutterError as e:
        click.echo(f"Error Decluttering: {e.message}", err=True)
        raise SystemExit(1)

    report_written(paths)
