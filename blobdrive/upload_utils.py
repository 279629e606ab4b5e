import os
from pathlib import PurePosixPath

from fastapi import UploadFile

from blobdrive.core.errors import APIError


TRUTHY_VALUES = {"1", "true", "yes", "on"}
DEFAULT_MAX_UPLOAD_BYTES = 100 * 1024 * 1024


def parse_boolish(value: str | None, default: bool = False) -> bool:
    if value is None or not value.strip():
        return default
    return value.strip().lower() in TRUTHY_VALUES


def max_upload_bytes() -> int:
    raw = os.getenv("BLOBDRIVE_MAX_UPLOAD_BYTES", "")
    try:
        return int(raw) if raw else DEFAULT_MAX_UPLOAD_BYTES
    except ValueError:
        return DEFAULT_MAX_UPLOAD_BYTES


def upload_filename(file: UploadFile | None) -> str:
    if file is None:
        raise APIError(400, "bad_request", "file is required")
    # browsers may send a client-side path; keep only the last component
    name = PurePosixPath((file.filename or "").replace("\\", "/")).name
    if not name.strip():
        raise APIError(400, "bad_request", "file must have a name")
    return name


def read_upload_limited(file: UploadFile, limit: int) -> bytes:
    data = file.file.read(limit + 1)
    if len(data) > limit:
        raise APIError(413, "payload_too_large", f"file exceeds {limit} bytes")
    return data
