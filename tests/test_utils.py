"""Tests for utility functions and data models."""

from datetime import datetime

import pytest
from pydantic import ValidationError

from declutter.models import AcquisitionResult, DistillationResult, TokenUsage
from declutter.utils import format_timestamp, metadata_table, normalise_address, path_from_url


class TestNormaliseAddress:
    """Tests for normalise_address function."""

    def test_adds_https_to_bare_host(self):
        """Test that a bare host gets an https scheme."""
        assert normalise_address("example.com/post") == "https://example.com/post"

    def test_keeps_existing_scheme(self):
        """Test that http and https addresses are untouched."""
        assert normalise_address("http://example.com") == "http://example.com"
        assert normalise_address("HTTPS://example.com") == "HTTPS://example.com"

    def test_strips_whitespace(self):
        """Test that pasted whitespace is removed."""
        assert normalise_address("  example.com \n") == "https://example.com"


class TestPathFromUrl:
    """Tests for path_from_url function."""

    def test_last_segment_names_file(self):
        """Test that the last path segment becomes the file prefix."""
        assert path_from_url("https://www.example.com/blog/my-post") == ("example-com", "my-post")

    def test_trailing_slash_ignored(self):
        """Test that empty trailing segments are skipped."""
        assert path_from_url("https://example.com/blog/my-post/") == ("example-com", "my-post")

    def test_root_is_index(self):
        """Test that the root path becomes index."""
        assert path_from_url("https://news.example.co.uk/") == ("news-example-co-uk", "index")
        assert path_from_url("https://example.com") == ("example-com", "index")

    def test_only_leading_www_removed(self):
        """Test that www. is stripped only at the start of the host."""
        assert path_from_url("https://swww.example.com/a") == ("swww-example-com", "a")
        assert path_from_url("https://news.www.example.com/a") == ("news-www-example-com", "a")
        assert path_from_url("https://www.news.example.com/a") == ("news-example-com", "a")

    def test_query_not_part_of_name(self):
        """Test that query strings do not leak into the file name."""
        assert path_from_url("https://example.com/article?id=4") == ("example-com", "article")


class TestMetadataTable:
    """Tests for metadata_table and format_timestamp."""

    def test_format_timestamp(self):
        """Test the long-form 24h timestamp."""
        assert format_timestamp(datetime(2026, 10, 18, 9, 5)) == "October 18, 2026 at 09:05"

    def test_table_rows_are_title_cased(self):
        """Test that snake_case keys become Title Case labels in order."""
        table = metadata_table(
            {
                "url": "https://example.com",
                "input_tokens": 10,
                "output_tokens": 5,
                "total_tokens": 15,
            }
        )
        assert table.startswith("\n\n| Metadata | Value |\n|-------|-------|\n")
        lines = table.strip().splitlines()
        assert lines[2] == "| Url | https://example.com |"
        assert lines[3] == "| Input Tokens | 10 |"
        assert lines[4] == "| Output Tokens | 5 |"
        assert lines[5] == "| Total Tokens | 15 |"

    def test_none_renders_empty(self):
        """Test that missing values render as empty cells."""
        assert "| Time |  |" in metadata_table({"time": None})


class TestModels:
    """Tests for pipeline data models."""

    def test_token_usage_fills_total(self):
        """Test that total_tokens defaults to input plus output."""
        usage = TokenUsage(input_tokens=3, output_tokens=4)
        assert usage.total_tokens == 7

    def test_token_usage_keeps_reported_total(self):
        """Test that a provider-reported total wins."""
        usage = TokenUsage(input_tokens=3, output_tokens=4, total_tokens=10)
        assert usage.total_tokens == 10

    def test_token_usage_defaults_to_zero(self):
        """Test empty usage."""
        assert TokenUsage() == TokenUsage(input_tokens=0, output_tokens=0, total_tokens=0)

    def test_results_are_frozen(self):
        """Test that stage outputs cannot be mutated."""
        result = AcquisitionResult(url="https://example.com", html="<p>x</p>", elapsed_ms=12)
        with pytest.raises(ValidationError):
            result.html = "changed"  # type: ignore[misc]

    def test_elapsed_cannot_be_negative(self):
        """Test that elapsed_ms is validated."""
        with pytest.raises(ValidationError):
            AcquisitionResult(url="https://example.com", html="", elapsed_ms=-1)

    def test_distillation_result_allows_no_text(self):
        """Test that an empty stream is representable."""
        result = DistillationResult()
        assert result.markdown is None
        assert result.usage.total_tokens == 0
