"""
Error taxonomy

Every error carries the HTTP status the top-level handler in app.py answers
with. ExtractionParseError is normally absorbed by the extraction pipeline.
"""
from __future__ import annotations


class NovelGlossError(Exception):
    """Base error with optional code and details."""

    status_code = 500

    def __init__(self, message: str, code: str | None = None, details: dict | None = None):
        super().__init__(message)
        self.code = code
        self.details = details or {}


class AuthError(NovelGlossError):
    """The LLM credential is missing or was rejected."""

    status_code = 401


class TransportError(NovelGlossError):
    """The LLM call failed for any reason other than credentials."""

    status_code = 502


class ExtractionParseError(NovelGlossError):
    """The extractor returned something that is not a list of name pairs."""

    status_code = 422


class StoreError(NovelGlossError):
    """Reading or writing the key/value store failed."""

    status_code = 500
