"""Boundary types between the signing core and an HTTP framework."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Mapping, MutableMapping, Protocol, runtime_checkable


@runtime_checkable
class MessageLike(Protocol):
    method: str
    body: bytes
    headers: Mapping[str, str]


@runtime_checkable
class ResponseLike(Protocol):
    def set_header(self, name: str, value: str) -> None: ...


@dataclass
class HttpMessage:
    method: str = "GET"
    body: bytes = b""
    headers: Mapping[str, str] = field(default_factory=dict)


@dataclass
class ResponseHeaders:
    """``ResponseLike`` over any mutable header mapping (e.g. Starlette ``MutableHeaders``)."""

    target: MutableMapping[str, str] = field(default_factory=dict)

    def set_header(self, name: str, value: str) -> None:
        self.target[name] = value


def header_set(headers: Mapping[str, str] | None) -> Dict[str, str]:
    """Case-insensitive view: names lower-cased, rebuilt per call."""
    if not headers:
        return {}
    return {k.lower(): v for k, v in headers.items()}


__all__ = ["MessageLike", "ResponseLike", "HttpMessage", "ResponseHeaders", "header_set"]
