"""
Application-level exceptions.

Responsibilities:
- Define domain exceptions: invalid request input, upstream indexer/RPC
  failure, and malformed upstream records.
- Provide consistent error codes and messages for API error handling.
"""

from __future__ import annotations


class ExplorerError(Exception):
    """Base class for errors surfaced to API callers."""

    code = "explorer_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, str]:
        return {"detail": self.message, "code": self.code}


class ValidationError(ExplorerError):
    """Malformed address/hash or pagination out of range. Raised before any upstream call."""

    code = "invalid_request"


class UpstreamError(ExplorerError):
    """Indexer or RPC call failed or timed out. Not retried here; the caller retries the request."""

    code = "upstream_unavailable"

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class DataIntegrityError(ExplorerError):
    """An upstream record cannot be turned into a response row (e.g. transaction without sender)."""

    code = "data_integrity"
