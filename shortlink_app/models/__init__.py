"""
Database models for the URL shortener.

A single table maps aliases to target URLs.
"""

from .url import URL, UPDATED_AT_TRIGGER

__all__ = ["URL", "UPDATED_AT_TRIGGER"]
