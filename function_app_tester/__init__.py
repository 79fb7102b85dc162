"""MCP stdio server that forwards test requests to a Function App."""

__version__ = "0.1.0"
