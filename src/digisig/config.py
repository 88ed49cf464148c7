"""Signing configuration.

``.env`` is loaded on import. ``load_config`` reads a JSON or YAML document
(camelCase keys such as ``signatureParams`` are accepted alongside the
snake_case field names) and applies environment overrides for key material.
"""
from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .constants import DEFAULT_JWE_HEADER
from .crypto.keyloader import KeySource

load_dotenv()

CONFIG_PATH = os.getenv("DIGISIG_CONFIG", "config/signing.json")

_KEY_ENV = {
    "private_key": "DIGISIG_PRIVATE_KEY",
    "public_key": "DIGISIG_PUBLIC_KEY",
    "master_key": "DIGISIG_MASTER_KEY",
}


class SignatureComponents(BaseModel):
    """Resolved values for the ``@``-prefixed pseudo-headers."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    method: str = ""
    authority: str = ""
    target_uri: str = Field("", alias="targetUri")
    path: str = ""
    scheme: str = ""
    request_target: str = Field("", alias="requestTarget")


class SigningConfig(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    digest_algorithm: Literal["sha256", "sha512"] = Field("sha256", alias="digestAlgorithm")
    signature_params: List[str] = Field(alias="signatureParams", min_length=1)
    signature_components: SignatureComponents = Field(
        default_factory=SignatureComponents, alias="signatureComponents"
    )

    private_key: Optional[KeySource] = Field(None, alias="privateKey")
    public_key: Optional[KeySource] = Field(None, alias="publicKey")
    master_key: Optional[KeySource] = Field(None, alias="masterKey")

    jwe: Optional[str] = None
    jwe_header_params: Dict[str, Any] = Field(
        default_factory=lambda: dict(DEFAULT_JWE_HEADER), alias="jweHeaderParams"
    )
    jwt_payload: Dict[str, Any] = Field(default_factory=dict, alias="jwtPayload")
    jwt_expiration: int = Field(1, alias="jwtExpiration", ge=0)

    max_signature_age: Optional[int] = Field(None, alias="maxSignatureAge", gt=0)

    @field_validator("signature_params")
    @classmethod
    def _no_blank_params(cls, v: List[str]) -> List[str]:
        if any(not p or p != p.strip() for p in v):
            raise ValueError("signature parameter names must be non-empty and unpadded")
        return v

    def with_components(self, components: SignatureComponents) -> "SigningConfig":
        return self.model_copy(update={"signature_components": components})


def _read_document(path: Path) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        if path.suffix.lower() in (".yml", ".yaml"):
            data = yaml.safe_load(f) or {}
        else:
            data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping at top level")
    return data


def load_config(path: Optional[str] = None) -> SigningConfig:
    """Load a ``SigningConfig`` from ``path`` (or ``DIGISIG_CONFIG``)."""
    config_path = Path(path or os.getenv("DIGISIG_CONFIG", CONFIG_PATH))
    if not config_path.exists():
        raise FileNotFoundError(f"signing config not found: {config_path}")
    data = _read_document(config_path)

    # Env overrides
    for field, env in _KEY_ENV.items():
        if os.getenv(env):
            data.pop(SigningConfig.model_fields[field].alias, None)
            data[field] = os.environ[env]
    if os.getenv("DIGISIG_JWE"):
        data["jwe"] = os.environ["DIGISIG_JWE"]
    if os.getenv("DIGISIG_DIGEST_ALGORITHM"):
        data.pop("digestAlgorithm", None)
        data["digest_algorithm"] = os.environ["DIGISIG_DIGEST_ALGORITHM"]

    # Relative key paths resolve against the config file's directory
    for field in _KEY_ENV:
        alias = SigningConfig.model_fields[field].alias
        for key in (field, alias):
            value = data.get(key)
            if isinstance(value, str) and "\n" not in value and not os.path.isabs(value):
                candidate = os.path.join(config_path.parent, value)
                if os.path.isfile(candidate):
                    data[key] = candidate
    return SigningConfig.model_validate(data)


__all__ = [
    "CONFIG_PATH",
    "SignatureComponents",
    "SigningConfig",
    "load_config",
]
