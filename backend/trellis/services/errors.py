"""Exceptions shared by the service layer."""

from __future__ import annotations


class EngagementNotFoundError(LookupError):
    """No engagement row exists for the requested identifier."""

    def __init__(self, engagement_id: str) -> None:
        super().__init__(f"Engagement {engagement_id} not found")
        self.engagement_id = engagement_id


class StorageError(RuntimeError):
    """The object store rejected or failed an operation."""


class StorageConflictError(StorageError):
    """An object already exists at the requested path."""


class InvalidSignatureError(ValueError):
    """A signed download link is malformed, tampered with or expired."""
