"""Convert an existing markdown output to html or pdf."""

import asyncio
from pathlib import Path

import click

from declutter.cli._common import app, configure_logging
from declutter.cli.exec import build_session_config, report_written
from declutter.exceptions import DeclutterError
from declutter.models import HTML_OUTPUT_FORMAT, PDF_OUTPUT_FORMAT
from declutter.services.outputs import convert_markdown_to
from declutter.services.styles import DEFAULT_STYLE, STYLES


@app.command("convert", help="Convert a markdown file to another format (html or pdf).")
@click.argument("markdown_file", type=click.Path(path_type=Path))
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice([HTML_OUTPUT_FORMAT, PDF_OUTPUT_FORMAT], case_sensitive=False),
    default=PDF_OUTPUT_FORMAT,
    show_default=True,
    help="Output format, written next to the markdown file.",
)
@click.option(
    "--style",
    "-s",
    type=click.Choice(list(STYLES)),
    default=DEFAULT_STYLE,
    show_default=True,
    help="Theme for the output.",
)
@click.option(
    "--browser-path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Chromium executable used to print PDFs. Also reads DECLUTTER_BROWSER_PATH env.",
)
@click.option("--verbose", "-v", is_flag=True, default=False, help="Debug logging.")
def convert(
    markdown_file: Path,
    output_format: str,
    style: str,
    browser_path: str | None,
    verbose: bool,
) -> None:
    """Render a markdown file (for example a previous declutter output) to html or pdf.

    Examples:
        declutter convert ~/Documents/Decluttered/example-com/post.md
        declutter convert post.md --format html --style TECH_TERMINAL
    """
    configure_logging(verbose=verbose)
    try:
        path = asyncio.run(
            convert_markdown_to(
                markdown_file,
                output_format.lower(),
                style,
                session_config=build_session_config(browser_path, stealth=False, timeout=None),
            )
        )
    except DeclutterError as e:
        click.echo(f"Error converting markdown: {e.message}", err=True)
        raise SystemExit(1)

    report_written([path])
