"""Key material sources and PEM handling.

A ``KeySource`` records once, at configuration load, whether key material is
inline text or a file reference. File-backed sources are read again on every
``read()``; callers that sign at high rates should pass keys inline.
"""
from __future__ import annotations

import base64
import binascii
import os
from pathlib import Path
from typing import Any, Literal

from cryptography.hazmat.primitives import serialization
from pydantic import BaseModel, ConfigDict, model_validator

from ..constants import KEY_END, KEY_START
from ..errors import InvalidKeyFormat


class KeySource(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["inline", "file"]
    value: str

    @model_validator(mode="before")
    @classmethod
    def _classify(cls, data: Any) -> Any:
        if isinstance(data, (str, os.PathLike)):
            return cls.classify(os.fspath(data))
        if isinstance(data, dict) and "kind" not in data:
            if "file" in data:
                return {"kind": "file", "value": os.fspath(data["file"])}
            if "inline" in data:
                return {"kind": "inline", "value": data["inline"]}
        return data

    @staticmethod
    def classify(value: str) -> dict:
        if value and os.path.isfile(value):
            return {"kind": "file", "value": value}
        return {"kind": "inline", "value": value}

    @classmethod
    def inline(cls, value: str) -> "KeySource":
        return cls(kind="inline", value=value)

    @classmethod
    def file(cls, path: str | os.PathLike) -> "KeySource":
        return cls(kind="file", value=os.fspath(path))

    def read(self) -> str:
        if self.kind == "file":
            try:
                return Path(self.value).read_text(encoding="utf-8")
            except OSError as e:
                raise InvalidKeyFormat(f"cannot read key file {self.value}: {e}") from e
        return self.value


def require(source: KeySource | None, name: str) -> str:
    if source is None:
        raise InvalidKeyFormat(f"{name} is not configured")
    return source.read()


def master_key_bytes(source: KeySource | None) -> bytes:
    """Decode the base64 master key used to protect signature-key tokens."""
    text = require(source, "master key").strip()
    try:
        raw = base64.b64decode(text)
    except (binascii.Error, ValueError) as e:
        raise InvalidKeyFormat("master key is not valid base64") from e
    if not raw:
        raise InvalidKeyFormat("master key is empty")
    return raw


def strip_public_key(key: str) -> str:
    """Remove the SPKI PEM envelope, leaving the base64 body."""
    if not isinstance(key, str) or not key.strip():
        raise InvalidKeyFormat("Invalid public key format")
    body = key.strip().replace(KEY_START, "").replace(KEY_END, "").strip()
    if "-----" in body:
        raise InvalidKeyFormat("Invalid public key format")
    return body


def wrap_public_key(body: str) -> str:
    return KEY_START + body + KEY_END


def load_private_key(pem: str):
    try:
        return serialization.load_pem_private_key(pem.encode(), password=None)
    except (ValueError, TypeError) as e:
        raise InvalidKeyFormat(f"Invalid private key: {e}") from e


def load_public_key(pem: str):
    try:
        return serialization.load_pem_public_key(pem.encode())
    except (ValueError, TypeError) as e:
        raise InvalidKeyFormat(f"Invalid public key: {e}") from e


__all__ = [
    "KeySource",
    "require",
    "master_key_bytes",
    "strip_public_key",
    "wrap_public_key",
    "load_private_key",
    "load_public_key",
]
