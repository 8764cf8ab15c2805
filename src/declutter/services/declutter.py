"""Pipeline entry point: fetch, normalise, distill, write."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from urllib.parse import urlparse

from declutter.exceptions import UnsupportedFormat
from declutter.llm import LLMClient
from declutter.models import DEFAULT_MAX_OUTPUT_TOKENS, OUTPUT_FORMATS, PDF_OUTPUT_FORMAT, NormalizedDocument
from declutter.services.converter import normalize
from declutter.services.distiller import ContentDistiller
from declutter.services.extractor import ContentExtractor, HumanBehavior, ScrapeOptions
from declutter.services.outputs import OutputMaterializer, OutputTarget
from declutter.services.session import SessionConfig, SessionManager
from declutter.services.styles import DEFAULT_STYLE
from declutter.utils import format_timestamp, metadata_table

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeclutterInput:
    """Everything one pipeline run needs.

    Attributes:
        url: Absolute address to declutter.
        client: LLM client used for distillation. The caller closes it.
        max_tokens: Output token budget for distillation.
        output_format: md, html or pdf.
        output_directory: Root under which ``Decluttered/`` is created.
        style: Theme for html and pdf output.
        session_config: Browser settings when the pipeline launches its own session.
        human_behavior: Delay bounds for the simulated reading; None uses the defaults.
        wait_for_selector: Optional CSS selector to wait for before capture.
    """

    url: str
    client: LLMClient
    max_tokens: int = DEFAULT_MAX_OUTPUT_TOKENS
    output_format: str = PDF_OUTPUT_FORMAT
    output_directory: Path = field(default_factory=lambda: Path.home() / "Documents")
    style: str = DEFAULT_STYLE
    session_config: SessionConfig | None = None
    human_behavior: HumanBehavior | None = None
    wait_for_selector: str | None = None


async def declutter_url(request: DeclutterInput, session: SessionManager | None = None) -> list[Path]:
    """
    Declutter one page and write the result.

    When no session is given, one is created from ``request.session_config``
    and closed before returning, whether the run succeeds or fails. A session
    passed in is initialized if needed but never closed here; its owner
    closes it.

    Args:
        request: Pipeline inputs.
        session: Optional shared session (the REPL reuses one across runs).

    Returns:
        Paths written, markdown first.

    Raises:
        UnsupportedFormat: If the output format is unknown (checked before any browser work).
        LaunchFailure: If the browser cannot start.
        NavigationError: If the page cannot be loaded.
        EmptyInput: If the page produced no markdown.
        DistillationServiceFailure: If the LLM provider fails.
    """
    if request.output_format not in OUTPUT_FORMATS:
        raise UnsupportedFormat(request.output_format)

    owns_session = session is None
    if session is None:
        session = SessionManager(request.session_config)

    try:
        if not session.is_initialized():
            await session.initialize()

        extractor = ContentExtractor(session, behavior=request.human_behavior)
        acquisition = await extractor.scrape_page(
            request.url,
            ScrapeOptions(wait_for_selector=request.wait_for_selector),
        )

        origin_host = urlparse(request.url).hostname or ""
        document = NormalizedDocument(
            markdown=normalize(acquisition.html, origin_host),
            origin_host=origin_host,
        )
        LOGGER.debug("Normalised %d characters of markdown", len(document.markdown))

        distilled = await ContentDistiller(request.client).distill(document.markdown, request.max_tokens)

        table = metadata_table(
            {
                "url": request.url,
                "time": format_timestamp(datetime.now()),
                "input_tokens": distilled.usage.input_tokens,
                "output_tokens": distilled.usage.output_tokens,
                "total_tokens": distilled.usage.total_tokens,
            }
        )

        target = OutputTarget(
            url=request.url,
            markdown=(distilled.markdown or "") + table,
            output_format=request.output_format,
            output_directory=request.output_directory,
            style=request.style,
        )
        return await OutputMaterializer(session).write_output(target)
    finally:
        if owns_session:
            await session.close()
