"""Application-level exception types for Eidos."""

from __future__ import annotations


class EidosError(Exception):
    """Base exception for Eidos."""


class ConfigurationError(EidosError):
    """Base exception for configuration and startup validation errors."""


class ApiKeyNotConfiguredError(ConfigurationError):
    """Raised when an API key is required but missing."""


class UnsupportedProviderError(ConfigurationError):
    """Raised when the configured AI provider is unknown."""


class PromptConfigError(ConfigurationError):
    """Raised when a prompt configuration file cannot be loaded."""


class CollaboratorError(EidosError):
    """Base exception for failures reported by external services."""


class GenerationError(CollaboratorError):
    """Raised when the image generation service fails."""


class StorageError(CollaboratorError):
    """Raised when an image cannot be stored."""


class GitHubError(CollaboratorError):
    """Raised when a GitHub API call fails."""
