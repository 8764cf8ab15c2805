"""Utility functions for declutter."""

import logging
import re
from datetime import datetime
from typing import Any
from urllib.parse import urlparse

from declutter.exceptions import generate_correlation_id

LOGGER = logging.getLogger(__name__)

_SCHEME_PATTERN = re.compile(r"^https?://", re.IGNORECASE)


def log_with_correlation(
    logger: logging.Logger,
    level: int,
    message: str,
    correlation_id: str | None = None,
    **kwargs: Any,
) -> None:
    """
    Log a message with correlation ID and additional context.

    Args:
        logger: Logger instance to use.
        level: Logging level (e.g., logging.INFO, logging.ERROR).
        message: Log message format string.
        correlation_id: Optional correlation ID. If None, generates a new one.
        **kwargs: Additional context to include in log extra fields.
    """
    corr_id = correlation_id or generate_correlation_id()
    extra = {"correlation_id": corr_id, **kwargs}
    logger.log(level, message, extra=extra)


def normalise_address(raw_url: str) -> str:
    """
    Prefix bare addresses (``example.com/post``) with ``https://``.

    Args:
        raw_url: Address as typed or pasted by the user.

    Returns:
        Address with an explicit http(s) scheme.
    """
    raw_url = raw_url.strip()
    if raw_url and not _SCHEME_PATTERN.match(raw_url):
        return f"https://{raw_url}"
    return raw_url


def path_from_url(url: str) -> tuple[str, str]:
    """
    Derive the output directory and file name prefix for an address.

    The directory is the host with ``www.`` removed and dots replaced by
    hyphens; the file name is the last non-empty path segment, or ``index``.

    Args:
        url: Absolute address.

    Returns:
        Tuple of (directory, file_name_prefix).

    Example:
        >>> path_from_url("https://www.example.com/blog/my-post")
        ('example-com', 'my-post')
    """
    parsed = urlparse(url)
    directory = (parsed.hostname or "").removeprefix("www.").replace(".", "-")

    segments = [segment.strip() for segment in parsed.path.split("/")]
    segments = [segment for segment in segments if segment]
    if not segments:
        return directory, "index"
    return directory, segments[-1]


def format_timestamp(moment: datetime) -> str:
    """Format a timestamp like ``October 18, 2026 at 09:05`` (24h clock)."""
    return f"{moment:%B} {moment.day}, {moment.year} at {moment:%H:%M}"


def _label(key: str) -> str:
    """Turn ``input_tokens`` into ``Input Tokens``."""
    return " ".join(part.capitalize() for part in key.split("_") if part)


def metadata_table(fields: dict[str, Any]) -> str:
    """
    Render a two-column markdown table of run metadata.

    Args:
        fields: Ordered mapping of snake_case keys to values. None renders as empty.

    Returns:
        Markdown table prefixed with a blank line so it can be appended to a document.
    """
    rows = ["| Metadata | Value |", "|-------|-------|"]
    for key, value in fields.items():
        display = "" if value is None else str(value)
        rows.append(f"| {_label(key)} | {display} |")
    return "\n\n" + "\n".join(rows) + "\n"
