"""Errors raised for caller bugs against the graph engine."""

from __future__ import annotations

from typing import Any, Dict, Optional


class GraphEngineError(Exception):
    """Base class for graph engine programming errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class InvalidHopsError(GraphEngineError, ValueError):
    """Raised when a focus hop count is negative or not an integer."""


class UnknownGroupModeError(GraphEngineError, ValueError):
    """Raised for a group mode outside none/category/tag/folder."""


class UnknownNodeError(GraphEngineError, KeyError):
    """Raised when a node id is not part of the rendered graph."""

    def __str__(self) -> str:
        return self.message


class UnknownGroupKeyError(GraphEngineError, KeyError):
    """Raised when a collapse toggle names a group key that does not exist."""

    def __str__(self) -> str:
        return self.message


class ProjectNotFoundError(GraphEngineError, KeyError):
    """Raised when a project id is not in the project store."""

    def __str__(self) -> str:
        return self.message


class PageNotFoundError(GraphEngineError, KeyError):
    """Raised when a page id is not part of its project."""

    def __str__(self) -> str:
        return self.message


__all__ = [
    "GraphEngineError",
    "InvalidHopsError",
    "UnknownGroupModeError",
    "UnknownNodeError",
    "UnknownGroupKeyError",
    "ProjectNotFoundError",
    "PageNotFoundError",
]
