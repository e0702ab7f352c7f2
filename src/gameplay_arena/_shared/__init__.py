# Area: Shared
"""Shared infrastructure: logging setup and id generation."""
