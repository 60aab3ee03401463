"""Utility helpers for the voice relay."""

from .text import sanitize_text

__all__ = ["sanitize_text"]
