from __future__ import annotations

from collections.abc import Sequence

from blobdrive.core.errors import InvalidKeyError

DELIMITER = "/"


def segments(key: str) -> list[str]:
    """Split an object key on the delimiter.

    Empty segments are kept as-is: ``"a//b"`` gives ``["a", "", "b"]``.
    """
    if not key:
        raise InvalidKeyError(key, "Object key must not be empty")
    return key.split(DELIMITER)


def first_segment(key: str) -> str:
    return segments(key)[0]


def remainder(key: str, prefix_len: int) -> str:
    """Drop ``prefix_len`` characters plus the delimiter that follows them."""
    if prefix_len < 0 or prefix_len >= len(key):
        raise InvalidKeyError(key, f"Prefix length {prefix_len} out of range for key {key!r}")
    return key[prefix_len + 1 :]


def join(parts: Sequence[str]) -> str:
    if not parts:
        raise InvalidKeyError("", "Cannot join an empty list of segments")
    return DELIMITER.join(parts)


def directory_prefix(names: Sequence[str]) -> str:
    # container root has no prefix
    if not names:
        return ""
    return join(names) + DELIMITER


def upload_key(names: Sequence[str], filename: str) -> str:
    if not filename or DELIMITER in filename:
        raise InvalidKeyError(filename, f"Invalid file name for upload: {filename!r}")
    return directory_prefix(names) + filename
