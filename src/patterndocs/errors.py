from __future__ import annotations

from enum import StrEnum


class ErrorCode(StrEnum):
    ENTRY_NOT_FOUND = "ENTRY_NOT_FOUND"
    INVALID_INPUT = "INVALID_INPUT"
    CACHE_UNAVAILABLE = "CACHE_UNAVAILABLE"
    CATALOG_UNAVAILABLE = "CATALOG_UNAVAILABLE"


class PatternDocsError(Exception):
    """Raised for all expected failure conditions.

    Tool handlers raise it for bad input and unknown entries; the cache raises
    it with ``CACHE_UNAVAILABLE`` when the backend fails. Caught by server.py
    and serialised into the MCP error response. Missing content is never an
    error and never produces one of these.
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        suggestion: str,
        recoverable: bool = False,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.recoverable = recoverable

    def to_dict(self) -> dict:
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "suggestion": self.suggestion,
                "recoverable": self.recoverable,
            }
        }
