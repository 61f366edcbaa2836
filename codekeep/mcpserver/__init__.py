"""MCP endpoint for read-only snippet access."""

from .server import mcp

__all__ = ["mcp"]
