"""Canonical signature-base construction.

Both directions share one builder. Each covered component becomes a line

    "<lower-cased name>": <value>

followed by a final ``"@signature-params": <clause>`` line with no trailing
newline. Generation takes the component list from configuration and stamps
``created`` from a clock; calculation takes both the list and the clause
verbatim from the sender's Signature-Input header.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from operator import attrgetter
from typing import Dict, List, Mapping, Optional, Tuple

from ..config import SignatureComponents, SigningConfig
from ..constants import CONTENT_DIGEST, SIGNATURE_INPUT, SIGNATURE_LABEL
from ..errors import (
    BaseConstructionError,
    InvalidFormat,
    MissingHeader,
    SignatureError,
    UnknownPseudoHeader,
)
from ..utils.clock import Clock, unix_now
from ..utils.logging import get_logger
from .message import header_set

SIGNATURE_INPUT_RE = re.compile(r".+=(\((.+)\);created=(\d+)(;keyid=.+)?)")

PSEUDO_HEADERS = {
    "@method": attrgetter("method"),
    "@authority": attrgetter("authority"),
    "@target-uri": attrgetter("target_uri"),
    "@path": attrgetter("path"),
    "@scheme": attrgetter("scheme"),
    "@request-target": attrgetter("request_target"),
}

log = get_logger()


@dataclass(frozen=True)
class SignatureInput:
    label: str
    components: List[str]
    created: int
    keyid: Optional[str]
    signature_params: str


def resolve_pseudo_header(name: str, components: SignatureComponents) -> str:
    accessor = PSEUDO_HEADERS.get(name.lower())
    if accessor is None:
        raise UnknownPseudoHeader(f"Unknown pseudo header {name}")
    return accessor(components)


def signature_params_clause(params: List[str], created: int) -> str:
    comp_list = " ".join(f'"{p}"' for p in params)
    return f"({comp_list});created={created}"


def effective_params(headers: Mapping[str, str], config: SigningConfig) -> List[str]:
    """Configured parameter list, minus content-digest when the message has none."""
    return [
        p for p in config.signature_params
        if not (p.lower() == CONTENT_DIGEST and not headers.get(CONTENT_DIGEST))
    ]


def _build_base(headers: Dict[str, str], components: SignatureComponents, params: List[str], clause: str) -> str:
    lines: List[str] = []
    for name in params:
        lc = name.lower()
        if name.startswith("@"):
            val = resolve_pseudo_header(lc, components)
        else:
            val = headers.get(lc)
            if not val:
                raise MissingHeader(f"Header {name} not included in message")
        lines.append(f'"{lc}": {val}')
    lines.append(f'"@signature-params": {clause}')
    return "\n".join(lines)


def generate_signature_input(headers: Mapping[str, str], config: SigningConfig, clock: Clock = unix_now) -> str:
    hs = header_set(headers)
    return f"{SIGNATURE_LABEL}={signature_params_clause(effective_params(hs, config), clock())}"


def parse_signature_input(value: Optional[str]) -> SignatureInput:
    if not value:
        raise MissingHeader("Signature-Input header missing")
    m = SIGNATURE_INPUT_RE.search(value)
    if not m:
        raise InvalidFormat(r"Invalid Signature-Input. Make sure it's of format: .+=\(.+\;created=\d+)")
    label = value[: m.start(1) - 1].strip()
    components = m.group(2).replace('"', "").split()
    keyid = m.group(4)[len(";keyid="):].strip('"') if m.group(4) else None
    return SignatureInput(
        label=label,
        components=components,
        created=int(m.group(3)),
        keyid=keyid,
        signature_params=m.group(1),
    )


def generate_base(headers: Mapping[str, str], config: SigningConfig, clock: Clock = unix_now) -> str:
    """Signer-side base over the configured parameter list."""
    try:
        hs = header_set(headers)
        params = effective_params(hs, config)
        base = _build_base(hs, config.signature_components, params, signature_params_clause(params, clock()))
    except SignatureError as e:
        raise BaseConstructionError(f"Error calculating signature base: {e}") from e
    log.debug(f"generated signature base:\n{base}")
    return base


def calculate_base_with_input(headers: Mapping[str, str], config: SigningConfig) -> Tuple[str, SignatureInput]:
    """Verifier-side base, following the sender's Signature-Input exactly.

    The parsed Signature-Input is returned alongside the base.
    """
    try:
        hs = header_set(headers)
        sig_input = parse_signature_input(hs.get(SIGNATURE_INPUT))
        base = _build_base(hs, config.signature_components, sig_input.components, sig_input.signature_params)
    except SignatureError as e:
        raise BaseConstructionError(f"Error calculating base: {e}") from e
    log.debug(f"calculated signature base:\n{base}")
    return base, sig_input


def calculate_base(headers: Mapping[str, str], config: SigningConfig) -> str:
    return calculate_base_with_input(headers, config)[0]


__all__ = [
    "SignatureInput",
    "PSEUDO_HEADERS",
    "resolve_pseudo_header",
    "signature_params_clause",
    "effective_params",
    "generate_signature_input",
    "parse_signature_input",
    "generate_base",
    "calculate_base_with_input",
    "calculate_base",
]
