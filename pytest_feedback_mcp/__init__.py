"""Feedback-driven pytest generation over MCP."""

__version__ = "0.1.0"
