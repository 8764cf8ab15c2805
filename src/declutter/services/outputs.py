"""Output materialisation: markdown, styled HTML and printed PDF.

Layout on disk:
    <output_directory>/Decluttered/<host-dir>/<file>.md     (always)
    <output_directory>/Decluttered/<host-dir>/<file>.html   (format html)
    <output_directory>/Decluttered/<host-dir>/<file>.pdf    (format pdf)

PDFs are printed by the same Chromium session that fetched the page.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

import markdown as markdown_lib

from declutter.exceptions import ConfigurationError, DeclutterError, SessionNotReady, UnsupportedFormat
from declutter.models import (
    HTML_OUTPUT_FORMAT,
    MARKDOWN_OUTPUT_FORMAT,
    OUTPUT_FORMATS,
    PDF_OUTPUT_FORMAT,
)
from declutter.services.session import SessionConfig, SessionManager
from declutter.services.styles import CODE_CSS_CLASS, DEFAULT_STYLE, STYLES, stylesheet
from declutter.utils import path_from_url

LOGGER = logging.getLogger(__name__)

DECLUTTERED_DIRECTORY = "Decluttered"

PDF_MARGIN = "50px"

HTML_TEMPLATE = """<!doctype html>
<html lang="en">
    <head>
        <meta charset="UTF-8" />
        <meta name="viewport" content="width=device-width, initial-scale=1.0" />
        <style>
{style}
        </style>
    </head>
    <body>
{body}
    </body>
</html>
"""

# Resolves once every <img> has loaded or failed
WAIT_FOR_IMAGES_SCRIPT = """
() => Promise.all(
    Array.from(document.images)
        .filter((img) => !img.complete)
        .map((img) => new Promise((resolve) => {
            img.addEventListener('load', resolve, { once: true });
            img.addEventListener('error', resolve, { once: true });
        }))
)
"""


def markdown_to_html(text: str) -> str:
    """
    Render markdown to an HTML fragment.

    GitHub-flavoured behaviour: pipe tables, fenced code with syntax
    highlighting, and single newlines kept as line breaks.
    """
    return markdown_lib.markdown(
        text,
        extensions=[
            "tables",
            "fenced_code",
            "codehilite",
            "nl2br",
            "sane_lists",
        ],
        extension_configs={
            "codehilite": {
                "css_class": CODE_CSS_CLASS,
                "guess_lang": True,
            },
        },
    )


def styled_html(html: str, style: str = DEFAULT_STYLE) -> str:
    """
    Wrap an HTML fragment in a standalone document with a theme stylesheet.

    Args:
        html: Body fragment.
        style: Name of a theme in STYLES.

    Returns:
        Complete HTML document.

    Raises:
        ConfigurationError: If the theme does not exist.
    """
    if style not in STYLES:
        raise ConfigurationError(
            f"unknown style: {style}, must be one of {', '.join(STYLES)}",
            context={"style": style},
        )
    return HTML_TEMPLATE.format(style=stylesheet(style), body=html)


async def print_pdf(session: SessionManager, html: str, path: Path) -> Path:
    """
    Print an HTML document to an A4 PDF through a live browser session.

    Args:
        session: Initialized session manager.
        html: Complete HTML document.
        path: Destination file.

    Returns:
        The written path.

    Raises:
        SessionNotReady: If the session has not been initialized.
        DeclutterError: If the browser fails to render or print the document.
    """
    browser = session.browser
    timeout_ms = session.config.timeout_ms

    page = await browser.new_page()
    try:
        await page.set_content(html, wait_until="networkidle", timeout=timeout_ms)
        await page.evaluate(WAIT_FOR_IMAGES_SCRIPT)
        await page.pdf(
            path=str(path),
            format="A4",
            print_background=True,
            margin={
                "top": PDF_MARGIN,
                "right": PDF_MARGIN,
                "bottom": PDF_MARGIN,
                "left": PDF_MARGIN,
            },
        )
    except Exception as exc:
        raise DeclutterError(
            f"Could not print PDF to {path}: {exc}",
            context={"path": str(path)},
        ) from exc
    finally:
        try:
            await page.close()
        except Exception as exc:
            LOGGER.debug("PDF page close failed: %s", exc)

    LOGGER.info("PDF written to %s", path)
    return path


def _write_text(path: Path, content: str) -> Path:
    path.write_text(content, encoding="utf-8")
    LOGGER.info("Written output to %s", path)
    return path


@dataclass(frozen=True)
class OutputTarget:
    """What to write and where.

    Attributes:
        url: Address the document came from; names the output files.
        markdown: Final markdown, metadata table included.
        output_format: One of md, html, pdf.
        output_directory: Root under which ``Decluttered/`` is created.
        style: Theme used for html and pdf.
    """

    url: str
    markdown: str
    output_format: str
    output_directory: Path = field(default_factory=lambda: Path.home() / "Documents")
    style: str = DEFAULT_STYLE


class OutputMaterializer:
    """
    Writes distilled documents to disk.

    Usage:
        materializer = OutputMaterializer(session)
        paths = await materializer.write_output(
            OutputTarget(url=url, markdown=text, output_format="pdf")
        )
    """

    def __init__(self, session: SessionManager | None = None) -> None:
        """
        Initialise materializer.

        Args:
            session: Live session used to print PDFs. Not needed for md or html.
        """
        self.session = session

    async def write_output(self, target: OutputTarget) -> list[Path]:
        """
        Write the markdown artifact plus the requested format.

        The ``.md`` file is written first so the distilled text survives a
        failed PDF print.

        Args:
            target: Document and destination.

        Returns:
            Paths written, markdown first.

        Raises:
            UnsupportedFormat: If the format is not md, html or pdf (nothing is written).
            SessionNotReady: If a PDF is requested without a live session.
        """
        if target.output_format not in OUTPUT_FORMATS:
            raise UnsupportedFormat(target.output_format)
        session = self.session
        if target.output_format == PDF_OUTPUT_FORMAT and session is None:
            raise SessionNotReady()

        directory, file_prefix = path_from_url(target.url)
        final_directory = Path(target.output_directory).expanduser() / DECLUTTERED_DIRECTORY / directory
        final_directory.mkdir(parents=True, exist_ok=True)

        written = [_write_text(final_directory / f"{file_prefix}.{MARKDOWN_OUTPUT_FORMAT}", target.markdown)]

        if target.output_format == HTML_OUTPUT_FORMAT:
            document = styled_html(markdown_to_html(target.markdown), target.style)
            written.append(_write_text(final_directory / f"{file_prefix}.{HTML_OUTPUT_FORMAT}", document))
        elif target.output_format == PDF_OUTPUT_FORMAT and session is not None:
            document = styled_html(markdown_to_html(target.markdown), target.style)
            pdf_path = final_directory / f"{file_prefix}.{PDF_OUTPUT_FORMAT}"
            written.append(await print_pdf(session, document, pdf_path))

        return written


async def convert_markdown_to(
    markdown_file: Path | str,
    output_format: str,
    style: str = DEFAULT_STYLE,
    session_config: SessionConfig | None = None,
) -> Path:
    """
    Render an existing markdown file to html or pdf beside itself.

    A PDF needs a browser; one is launched for this call and closed afterwards.

    Args:
        markdown_file: Path to a ``.md`` file.
        output_format: ``html`` or ``pdf``.
        style: Theme name.
        session_config: Browser settings for PDF printing.

    Returns:
        Path of the written file.

    Raises:
        ConfigurationError: If the path does not end in ``.md`` or does not exist.
        UnsupportedFormat: If the format is not html or pdf.
    """
    source = Path(markdown_file).expanduser()
    if source.suffix != f".{MARKDOWN_OUTPUT_FORMAT}":
        raise ConfigurationError(
            f"invalid markdown file extension, must end with .{MARKDOWN_OUTPUT_FORMAT}",
            config_path=str(source),
        )
    if not source.is_file():
        raise ConfigurationError(
            f"markdown file does not exist: {source}",
            config_path=str(source),
        )
    if output_format not in (HTML_OUTPUT_FORMAT, PDF_OUTPUT_FORMAT):
        raise UnsupportedFormat(output_format)

    document = styled_html(markdown_to_html(source.read_text(encoding="utf-8")), style)
    destination = source.with_suffix(f".{output_format}")

    if output_format == HTML_OUTPUT_FORMAT:
        return _write_text(destination, document)

    async with SessionManager(session_config) as session:
        return await print_pdf(session, document, destination)
