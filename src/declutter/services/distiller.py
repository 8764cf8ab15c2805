"""
LLM-powered distillation of page markdown.

Streams normalised markdown through the configured provider under a fixed
directive that strips navigation, ads and other page chrome while keeping
article text and editorial images verbatim.
"""

import logging

from declutter.exceptions import (
    DistillationServiceFailure,
    EmptyInput,
    ProviderError,
    generate_correlation_id,
)
from declutter.llm import LLMClient
from declutter.models import DEFAULT_MAX_OUTPUT_TOKENS, DistillationResult
from declutter.utils import log_with_correlation

LOGGER = logging.getLogger(__name__)

INPUT_PROMPT = """Now declutter the text provided in the document section
<document>
{document}
</document>
"""

SYSTEM_PROMPT = """
You are a document decluttering specialist. Your task is to transform messy, web-scraped, or poorly formatted documents into clean, professional markdown while preserving all substantive content.

Core Principles
* Content is Sacred: Never modify, omit, or alter the main article content, quotes, facts, data, or images
* Structure Matters: Organize content logically with clear hierarchy and visual separation
* Remove Noise: Eliminate everything that isn't central to the important text in data provided
* Images are Essential: All images that are part of the article content must be preserved with their proper markdown syntax

What to Remove (Navigation & UI Elements)
* Header/footer navigation menus and site logos
* Sidebar elements, widgets, and advertisements
* Cookie consent banners and privacy/tracking notifications
* Menu links in the page
* "Related articles," "Recommended reading," or "More content" sections
* Breadcrumb trails and page navigation elements
* Social sharing buttons and subscription prompts
* Analytics, tracking pixels, and script tags
* Login/sign-up forms and authentication prompts
* Search bars and advanced filter controls
* Terms of service, privacy policy links (unless editorially relevant)
* Decorative icons, avatars, and UI graphics (non-editorial images)
* Comments sections and user-generated content

What to Keep (Relevant Content & Context)
* All article text, paragraphs, and quotes verbatim
* **ALL images relevant to the main theme of the text** - photos, infographics, charts, diagrams, illustrations that support the article content
* Image captions, alt text, and credits
* Byline, author name, and publication date
* Section headings and subheadings
* Bulleted lists and data points
* Relevant hyperlinks within the article body
* Attribution and source citations
* Pull quotes or highlighted text

Image Handling Requirements
* Convert all relevant images to markdown format: `![alt text](image_url)` THERE SHOULD BE NO LINE BREAKS IN IMAGES
* Place images in their logical position within the article flow
* Include image captions immediately below images (in italics if applicable)
* Preserve photo credits and attribution
* Keep infographics, charts, and data visualizations
* Maintain the relationship between images and surrounding text
* **Double-check before finalizing**: Scan the entire document to ensure NO editorial images have been accidentally omitted

Formatting Guidelines
* Use markdown heading hierarchy (H1 for title, H2 for sections, H3 for subsections)
* Apply consistent spacing between sections
* Convert unstructured lists into clean bullet points or numbered lists
* Maintain paragraph breaks and readability
* Bold key phrases or topic headers for scannability
* Preserve quote formatting and emphasis (italics, bold)
* Use horizontal rules (---) to separate major sections if helpful
* Format images with proper markdown syntax and include captions

Output Requirements
* Single, clean markdown document
* Professional, publication-ready appearance
* Logical flow from introduction through conclusion
* No orphaned links or broken references
* Consistent formatting throughout
* **ALL relevant images included** in proper markdown format with captions

What NOT to Do
* Don't rewrite, summarize, or condense content
* Don't reorganize the article's original structure or intent
* Don't remove factual information or context
* Don't interpret or editorialize the content
* Don't add your own commentary or analysis
* Don't change the author's voice or tone
* **Don't skip or omit any important images from the article**

Final Checklist Before Output
1. All editorial images converted to markdown format
2. Image captions and credits preserved
3. Images positioned logically within article flow
4. Navigation and UI elements removed
5. All article text preserved verbatim
6. Consistent formatting applied

Just produce markdown output directly no need to explain the output
IMPORTANT: do not wrap markdown output in code section just generate output in markdown
"""

# Near-deterministic output for the same page
DISTILL_TEMPERATURE = 0.0


class ContentDistiller:
    """
    Strip page chrome from markdown with a streaming LLM.

    Example usage:
        >>> client = LLMClient(resolve_llm_config())
        >>> distiller = ContentDistiller(client)
        >>> result = await distiller.distill(markdown, max_tokens=10000)
        >>> result.markdown, result.usage.total_tokens
    """

    def __init__(self, client: LLMClient) -> None:
        """
        Initialise distiller.

        Args:
            client: LLM client used for every call. The caller owns and closes it.
        """
        self._client = client

    async def distill(
        self,
        markdown: str,
        max_tokens: int = DEFAULT_MAX_OUTPUT_TOKENS,
    ) -> DistillationResult:
        """
        Distill a document into clean markdown.

        Chunks are folded in arrival order. A stream that yields no text is a
        valid outcome and gives ``markdown=None``. No retries.

        Args:
            markdown: Normalised page markdown.
            max_tokens: Output token budget.

        Returns:
            DistillationResult with the text and the reported token usage.

        Raises:
            EmptyInput: If the document is blank (checked before any service call).
            DistillationServiceFailure: If the provider fails mid-call or mid-stream.
        """
        if not markdown or not markdown.strip():
            raise EmptyInput()

        correlation_id = generate_correlation_id()
        log_with_correlation(
            LOGGER,
            logging.INFO,
            "Starting declutter",
            correlation_id=correlation_id,
            provider=self._client.config.provider,
            model=self._client.config.model,
            input_chars=len(markdown),
        )

        chunks: list[str] = []
        try:
            stream = self._client.stream_text(
                SYSTEM_PROMPT,
                INPUT_PROMPT.format(document=markdown),
                temperature=DISTILL_TEMPERATURE,
                max_tokens=max_tokens,
            )
            async for chunk in stream:
                chunks.append(chunk)
        except ProviderError as e:
            log_with_correlation(
                LOGGER,
                logging.ERROR,
                f"Distillation failed: {e.message}",
                correlation_id=correlation_id,
                error=str(e),
            )
            raise DistillationServiceFailure(
                f"Distillation failed: {e.message}",
                provider=e.context.get("provider", self._client.config.provider),
                correlation_id=correlation_id,
                context={"cause_correlation_id": e.correlation_id},
            ) from e

        text = "".join(chunks) if chunks else None
        log_with_correlation(
            LOGGER,
            logging.INFO,
            "Decluttering complete",
            correlation_id=correlation_id,
            output_chars=len(text or ""),
            total_tokens=stream.usage.total_tokens,
        )
        return DistillationResult(markdown=text, usage=stream.usage)
