"""Service layer for declutter.

This module provides the pipeline stages:
- SessionManager: Chromium process lifecycle
- StealthPageController: Anti-detection page contexts
- ContentExtractor: Navigation, simulated reading and markup capture
- MarkdownConverter: HTML to Markdown normalisation
- ContentDistiller: LLM-powered decluttering
- OutputMaterializer: Markdown, HTML and PDF output
- declutter_url: The whole pipeline for one URL
"""

from declutter.services.converter import MarkdownConverter, normalize
from declutter.services.declutter import DeclutterInput, declutter_url
from declutter.services.distiller import ContentDistiller
from declutter.services.extractor import ContentExtractor, HumanBehavior, ScrapeOptions
from declutter.services.outputs import OutputMaterializer, OutputTarget, convert_markdown_to
from declutter.services.session import SessionConfig, SessionManager
from declutter.services.stealth import PageContext, StealthPageController

__all__ = [
    "ContentDistiller",
    "ContentExtractor",
    "DeclutterInput",
    "HumanBehavior",
    "MarkdownConverter",
    "OutputMaterializer",
    "OutputTarget",
    "PageContext",
    "ScrapeOptions",
    "SessionConfig",
    "SessionManager",
    "StealthPageController",
    "convert_markdown_to",
    "declutter_url",
    "normalize",
]
