"""Exception hierarchy for the collection pipeline."""

from __future__ import annotations


class CollectorError(Exception):
    """Base class for collector failures."""


class SessionError(CollectorError):
    """Raised when the management-plane session cannot be established."""


class TransportError(CollectorError):
    """Raised when an encoded payload cannot be delivered."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class InvalidIdentifierError(CollectorError, ValueError):
    """Raised when a metric identifier has no namespace delimiter."""
