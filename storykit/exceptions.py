"""Custom exception hierarchy for storykit."""

from __future__ import annotations


class StorykitError(Exception):
    """Base exception for all storykit-specific errors."""

    def __init__(self, message: str, details: dict[str, str] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(StorykitError):
    """Raised when configuration is invalid or missing."""
    pass


class PreflightError(StorykitError):
    """Base class for checks that must pass before publishing."""
    pass


class DirtyWorkspaceError(PreflightError):
    """Raised when the working tree has uncommitted changes."""
    pass


class ProjectDateError(PreflightError):
    """Raised when projectInitDate is missing or malformed."""
    pass


class PublishError(StorykitError):
    """Raised when a publish task cannot start or finish."""
    pass


class AssetError(StorykitError):
    """Raised when cache-busting or asset path rewriting fails."""
    pass


class MetadataError(StorykitError):
    """Raised when generated metadata JSON is missing or malformed."""
    pass
