"""Signature-key tokens: the signer's public key inside a JWE.

The verifier holds only the shared master key. ``issue_token`` encrypts the
signer's public key (``pkey`` claim) together with ``iat``/``nbf``/``exp``;
``redeem_token`` decrypts it and hands back a PEM public key.
"""
from __future__ import annotations

import json
from typing import Optional

from jwcrypto import jwk, jwt
from jwcrypto.common import JWException, base64url_encode

from ..config import SigningConfig
from ..constants import SECONDS_PER_YEAR
from ..crypto.keyloader import master_key_bytes, require, strip_public_key, wrap_public_key
from ..errors import DecryptionError, InvalidKeyFormat
from ..utils.clock import Clock, unix_now
from ..utils.logging import get_logger

PKEY_CLAIM = "pkey"

log = get_logger()


def _master_jwk(config: SigningConfig) -> jwk.JWK:
    return jwk.JWK(kty="oct", k=base64url_encode(master_key_bytes(config.master_key)))


async def issue_token(config: SigningConfig, clock: Clock = unix_now) -> str:
    key = _master_jwk(config)
    public_key = strip_public_key(require(config.public_key, "public key"))
    now = clock()
    claims = {
        **config.jwt_payload,
        PKEY_CLAIM: public_key,
        "iat": now,
        "nbf": now,
        "exp": now + config.jwt_expiration * SECONDS_PER_YEAR,
    }
    try:
        token = jwt.JWT(header=dict(config.jwe_header_params), claims=claims)
        token.make_encrypted_token(key)
        serialized = token.serialize()
    except (JWException, ValueError) as e:
        raise InvalidKeyFormat(f"Unable to encrypt signature key: {e}") from e
    log.info(f"issued signature-key token alg={config.jwe_header_params.get('alg')} exp={claims['exp']}")
    return serialized


async def redeem_token(token: str, config: SigningConfig) -> Optional[str]:
    """Return the PEM public key carried by ``token``, or ``None`` if it has none."""
    key = _master_jwk(config)
    try:
        decrypted = jwt.JWT(jwt=token, key=key, expected_type="JWE")
        claims = json.loads(decrypted.claims)
    except (JWException, ValueError, TypeError) as e:
        raise DecryptionError(f"Error parsing JWE from signature key header: {e}") from e
    pkey = claims.get(PKEY_CLAIM) if isinstance(claims, dict) else None
    if not pkey:
        log.warning("signature-key token carries no public key claim")
        return None
    if not isinstance(pkey, str):
        raise DecryptionError(f"{PKEY_CLAIM} claim is not a string")
    return wrap_public_key(pkey)


__all__ = ["PKEY_CLAIM", "issue_token", "redeem_token"]
