"""HTML to Markdown normalisation.

Uses BeautifulSoup + markdownify:
1. BeautifulSoup drops non-content elements (scripts, styles, frames, objects)
2. markdownify converts the rest with two overrides:
   - tables become flat pipe tables built from cell text
   - image sources are rewritten against the origin host

No boilerplate stripping happens here; telling navigation from article text
is the distiller's job.
"""

import logging

from bs4 import BeautifulSoup
from markdownify import MarkdownConverter as BaseMarkdownConverter

LOGGER = logging.getLogger(__name__)


def resolve_image_source(src: str, origin_host: str) -> str:
    """Make an image source absolute relative to the origin host.

    - ``http(s)://...`` is left unchanged
    - ``//cdn/img.png`` becomes ``https://cdn/img.png``
    - ``/img.png`` becomes ``<origin_host>/img.png``
    - ``img.png`` becomes ``<origin_host>/img.png``

    Args:
        src: Raw ``src`` attribute.
        origin_host: Host name of the page the image came from.

    Returns:
        Rewritten source, or empty string when there is nothing to resolve.
    """
    if not src:
        return ""
    if src.startswith(("http://", "https://")):
        return src
    if src.startswith("//"):
        return "https:" + src
    if src.startswith("/"):
        return origin_host + src
    return origin_host + "/" + src


class HostAwareConverter(BaseMarkdownConverter):
    """Markdownify converter with flat tables and host-resolved images."""

    def __init__(self, origin_host: str = "", **kwargs):
        """Initialize with the origin host used for image sources."""
        super().__init__(**kwargs)
        self.origin_host = origin_host

    def convert_table(self, el, text, parent_tags):
        """Convert a table to pipe rows with a separator after the first row.

        Column count follows each row's own cell count; rows of differing
        width are not re-aligned.
        """
        lines = []
        for index, row in enumerate(el.find_all("tr")):
            cells = row.find_all(["td", "th"])
            lines.append("| " + " | ".join(cell.get_text().strip() for cell in cells) + " |")
            if index == 0:
                lines.append("| " + " | ".join("---" for _ in cells) + " |")
        if not lines:
            return ""
        return "\n\n" + "\n".join(lines) + "\n\n"

    def convert_img(self, el, text, parent_tags):
        """Convert image tags, resolving sources against the origin host."""
        alt = el.get("alt", "") or ""
        title = el.get("title", "") or ""
        src = resolve_image_source(el.get("src", "") or "", self.origin_host)

        if not src:
            return ""

        if title:
            return f'![{alt}]({src} "{title}")'
        return f"![{alt}]({src})"


class MarkdownConverter:
    """Convert rendered HTML to semantic markdown.

    Usage:
        converter = MarkdownConverter()
        markdown = converter.convert(html, origin_host="example.com")
    """

    # Tags removed with their content before conversion
    REMOVE_TAGS = [
        "script",
        "style",
        "iframe",
        "object",
        "embed",
        "noscript",
    ]

    def convert(self, html: str, origin_host: str) -> str:
        """Convert HTML to markdown.

        Args:
            html: Rendered markup from the browser.
            origin_host: Host name used to absolutise image sources.

        Returns:
            Markdown string. Empty input is returned unchanged.
        """
        if not html:
            return html

        soup = BeautifulSoup(html, "html.parser")
        self._remove_tags(soup)

        converter = HostAwareConverter(
            origin_host=origin_host,
            heading_style="atx",
            bullets="-",
            code_language="",
            wrap=False,
            wrap_width=0,
        )
        markdown = converter.convert_soup(soup)
        return self._clean_whitespace(markdown)

    def _remove_tags(self, soup: BeautifulSoup) -> None:
        """Remove non-content elements in-place."""
        removed = 0
        for tag_name in self.REMOVE_TAGS:
            for tag in soup.find_all(tag_name):
                tag.decompose()
                removed += 1
        if removed:
            LOGGER.debug("Removed %d non-content elements", removed)

    def _clean_whitespace(self, markdown: str) -> str:
        """Collapse runs of blank lines and strip trailing spaces."""
        lines = []
        prev_empty = False

        for line in markdown.splitlines():
            stripped = line.rstrip()
            is_empty = not stripped

            if is_empty:
                if not prev_empty:
                    lines.append("")
                prev_empty = True
            else:
                lines.append(stripped)
                prev_empty = False

        return "\n".join(lines).strip()


def normalize(html: str, origin_host: str) -> str:
    """Convert rendered HTML to markdown with absolute image references."""
    return MarkdownConverter().convert(html, origin_host)
