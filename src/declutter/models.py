"""Data models for declutter."""

from typing import Any, Literal, TypeAlias

from pydantic import BaseModel, ConfigDict, Field, model_validator

# =============================================================================
# Output Formats
# =============================================================================

OutputFormat: TypeAlias = Literal["md", "html", "pdf"]

MARKDOWN_OUTPUT_FORMAT = "md"
HTML_OUTPUT_FORMAT = "html"
PDF_OUTPUT_FORMAT = "pdf"
OUTPUT_FORMATS: tuple[str, ...] = (MARKDOWN_OUTPUT_FORMAT, PDF_OUTPUT_FORMAT, HTML_OUTPUT_FORMAT)

DEFAULT_MAX_OUTPUT_TOKENS = 10_000


# =============================================================================
# Pipeline Stage Results
# =============================================================================


class AcquisitionResult(BaseModel):
    """Rendered markup captured from one page load."""

    model_config = ConfigDict(frozen=True)

    url: str
    html: str
    elapsed_ms: int = Field(ge=0)


class NormalizedDocument(BaseModel):
    """Markdown produced from rendered markup, image references made absolute."""

    model_config = ConfigDict(frozen=True)

    markdown: str
    origin_host: str


class TokenUsage(BaseModel):
    """Token counters reported by the text-generation service.

    ``total_tokens`` defaults to the sum of input and output when the
    provider does not report it.
    """

    model_config = ConfigDict(frozen=True)

    input_tokens: int = 0
    output_tokens: int = 0
    total_tokens: int = 0

    @model_validator(mode="before")
    @classmethod
    def _fill_total(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("total_tokens") is None:
            input_tokens = data.get("input_tokens") or 0
            output_tokens = data.get("output_tokens") or 0
            data = {**data, "input_tokens": input_tokens, "output_tokens": output_tokens}
            data["total_tokens"] = input_tokens + output_tokens
        return data


class DistillationResult(BaseModel):
    """Output of the distillation stage.

    ``markdown`` is None when the service streamed no text at all.
    """

    model_config = ConfigDict(frozen=True)

    markdown: str | None = None
    usage: TokenUsage = Field(default_factory=TokenUsage)
