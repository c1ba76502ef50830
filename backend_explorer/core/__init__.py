"""
Core utilities — error taxonomy shared by indexer, services, and API server.
"""

from backend_explorer.core.exceptions import (
    DataIntegrityError,
    ExplorerError,
    UpstreamError,
    ValidationError,
)

__all__ = [
    "DataIntegrityError",
    "ExplorerError",
    "UpstreamError",
    "ValidationError",
]
