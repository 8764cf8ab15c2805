"""Custom exceptions for declutter with context support."""

import uuid
from typing import Any


def generate_correlation_id() -> str:
    """
    Generate an 8-character UUID-based correlation ID.

    Returns:
        8-character correlation ID string.
    """
    return str(uuid.uuid4())[:8]


class DeclutterError(Exception):
    """Base exception for declutter with context and correlation ID support."""

    def __init__(
        self,
        message: str,
        correlation_id: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialise exception with message, correlation ID, and context.

        Args:
            message: Error message.
            correlation_id: Optional correlation ID. If None, generates a new one.
            context: Optional context dictionary for debugging.
        """
        self.message = message
        self.correlation_id = correlation_id or generate_correlation_id()
        self.context = context or {}
        super().__init__(f"{message} [correlation_id={self.correlation_id}]")


class ConfigurationError(DeclutterError):
    """Raised when configuration loading or validation fails."""

    def __init__(
        self,
        message: str,
        config_path: str | None = None,
        correlation_id: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialise configuration error with path context.

        Args:
            message: Error message.
            config_path: Optional path to the offending file.
            correlation_id: Optional correlation ID. If None, generates a new one.
            context: Optional context dictionary for debugging.
        """
        if context is None:
            context = {}
        if config_path is not None:
            context["config_path"] = str(config_path)
        super().__init__(message, correlation_id=correlation_id, context=context)


class ProviderError(DeclutterError):
    """Raised when a text-generation provider call fails."""

    def __init__(
        self,
        message: str,
        provider: str | None = None,
        correlation_id: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialise provider error with provider context.

        Args:
            message: Error message.
            provider: Optional provider name that caused the error (e.g., "ollama").
            correlation_id: Optional correlation ID. If None, generates a new one.
            context: Optional context dictionary for debugging.
        """
        if context is None:
            context = {}
        if provider is not None:
            context["provider"] = provider
        super().__init__(message, correlation_id=correlation_id, context=context)


class LaunchFailure(DeclutterError):
    """Raised when the browser process could not be started."""


class SessionNotReady(DeclutterError):
    """Raised when an operation needs a live browser session that was never initialised."""

    def __init__(self, correlation_id: str | None = None) -> None:
        super().__init__(
            "Browser session not initialized. Call initialize() first.",
            correlation_id=correlation_id,
        )


class NavigationError(DeclutterError):
    """Raised when the target address cannot be reached."""

    def __init__(
        self,
        message: str,
        url: str | None = None,
        correlation_id: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialise navigation error with the address that failed.

        Args:
            message: Error message.
            url: Optional address that was being loaded.
            correlation_id: Optional correlation ID. If None, generates a new one.
            context: Optional context dictionary for debugging.
        """
        if context is None:
            context = {}
        if url is not None:
            context["url"] = url
        super().__init__(message, correlation_id=correlation_id, context=context)


class NavigationTimeout(NavigationError):
    """Raised when a page never reaches network quiescence (or a selector never appears) in time."""


class DistillationServiceFailure(ProviderError):
    """Raised when the text-generation service errors or is unreachable during distillation."""


class EmptyInput(DeclutterError):
    """Raised when distillation is asked to process a blank document."""

    def __init__(self, correlation_id: str | None = None) -> None:
        super().__init__("input to declutter cannot be blank", correlation_id=correlation_id)


class UnsupportedFormat(DeclutterError):
    """Raised when an output format is not one of md, html or pdf."""

    def __init__(self, output_format: str, correlation_id: str | None = None) -> None:
        super().__init__(
            f"unknown format: {output_format} cannot generate output",
            correlation_id=correlation_id,
            context={"output_format": output_format},
        )
