"""HTTP API route handlers."""

from . import graph, projects

__all__ = ["graph", "projects"]
