from __future__ import annotations

from typing import Any


class APIError(Exception):
    def __init__(
        self,
        status_code: int,
        code: str,
        message: str,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.message = message
        self.details = details


class KeyTreeError(ValueError):
    """Base class for problems with the flat key listing handed to the tree builder."""

    code = "invalid_listing"

    def __init__(self, key: str, message: str):
        super().__init__(message)
        self.key = key
        self.message = message


class InvalidKeyError(KeyTreeError):
    code = "invalid_key"


class DuplicateKeyError(KeyTreeError):
    code = "duplicate_key"

    def __init__(self, key: str):
        super().__init__(key, f"Duplicate object key in listing: {key!r}")
