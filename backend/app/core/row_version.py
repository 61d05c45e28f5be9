from __future__ import annotations

import base64
import binascii
import uuid

ROW_VERSION_LENGTH = 16


def new_row_version() -> bytes:
    return uuid.uuid4().bytes


def encode_row_version(value: bytes) -> str:
    return base64.b64encode(value).decode("ascii")


def decode_row_version(value: str) -> bytes:
    try:
        decoded = base64.b64decode(value.strip(), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValueError("row_version must be a base64 encoded token") from exc
    if not decoded:
        raise ValueError("row_version must not be empty")
    return decoded
