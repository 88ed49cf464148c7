"""Detached signatures over the canonical base."""
from __future__ import annotations

import base64
import binascii
import re
from typing import Mapping

from ..config import SigningConfig
from ..constants import SIGNATURE, SIGNATURE_KEY, SIGNATURE_LABEL
from ..crypto.keyloader import load_private_key, load_public_key, require
from ..crypto.signatures import sign_bytes, verify_bytes
from ..errors import InvalidFormat, MissingHeader, StaleSignature, UnresolvedKey
from ..jwe.token import issue_token, redeem_token
from ..utils.clock import Clock, unix_now
from ..utils.logging import get_logger
from .base_string import calculate_base_with_input, generate_base
from .message import header_set

SIGNATURE_RE = re.compile(r".+=:(.+):")

log = get_logger()


async def generate_signature_key(config: SigningConfig, clock: Clock = unix_now) -> str:
    """Value for the signature-key header."""
    return await issue_token(config, clock=clock)


def generate_signature(headers: Mapping[str, str], config: SigningConfig, clock: Clock = unix_now) -> str:
    base = generate_base(headers, config, clock=clock)
    private_key = load_private_key(require(config.private_key, "private key"))
    sig = base64.b64encode(sign_bytes(private_key, base.encode())).decode()
    return f"{SIGNATURE_LABEL}=:{sig}:"


def check_freshness(created: int, config: SigningConfig, clock: Clock = unix_now) -> None:
    if config.max_signature_age is None:
        return
    age = clock() - created
    if abs(age) > config.max_signature_age:
        raise StaleSignature(
            f"Signature created={created} outside the {config.max_signature_age}s window (age {age}s)"
        )


async def validate_signature_header(headers: Mapping[str, str], config: SigningConfig, clock: Clock = unix_now) -> bool:
    """Verify the Signature header; ``False`` means the cryptographic check failed.

    Structural problems (missing headers, malformed values, undecryptable
    key token) raise instead. A token without a public key raises
    ``UnresolvedKey``.
    """
    hs = header_set(headers)
    signature = hs.get(SIGNATURE)
    signature_key = hs.get(SIGNATURE_KEY)
    if not signature_key:
        raise MissingHeader(f"{SIGNATURE_KEY} header missing")
    if not signature:
        raise MissingHeader(f"{SIGNATURE} header missing")

    m = SIGNATURE_RE.search(signature)
    if not m:
        raise InvalidFormat("Signature header invalid")
    try:
        signature_bytes = base64.b64decode(m.group(1))
    except (binascii.Error, ValueError) as e:
        raise InvalidFormat("Signature header is not valid base64") from e

    public_pem = await redeem_token(signature_key, config)
    base, sig_input = calculate_base_with_input(hs, config)
    if public_pem is None:
        raise UnresolvedKey("signature key token carries no public key")
    check_freshness(sig_input.created, config, clock=clock)

    public_key = load_public_key(public_pem)
    ok = verify_bytes(public_key, signature_bytes, base.encode())
    if not ok:
        log.info("signature did not verify against recomputed base")
    return ok


__all__ = [
    "generate_signature_key",
    "generate_signature",
    "check_freshness",
    "validate_signature_header",
]
