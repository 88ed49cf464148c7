"""Asymmetric sign/verify primitives.

The algorithm is implied by the key type; nothing is negotiated:
  - Ed25519 / Ed448: pure EdDSA
  - RSA: RSASSA-PKCS1-v1_5 with SHA-256
  - EC: ECDSA with SHA-256
"""
from __future__ import annotations

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec, ed448, ed25519, padding, rsa

from ..errors import InvalidKeyFormat


def sign_bytes(private_key, message: bytes) -> bytes:
    if isinstance(private_key, (ed25519.Ed25519PrivateKey, ed448.Ed448PrivateKey)):
        return private_key.sign(message)
    if isinstance(private_key, rsa.RSAPrivateKey):
        return private_key.sign(message, padding.PKCS1v15(), hashes.SHA256())
    if isinstance(private_key, ec.EllipticCurvePrivateKey):
        return private_key.sign(message, ec.ECDSA(hashes.SHA256()))
    raise InvalidKeyFormat(f"Unsupported private key type {type(private_key).__name__}")


def verify_bytes(public_key, signature: bytes, message: bytes) -> bool:
    try:
        if isinstance(public_key, (ed25519.Ed25519PublicKey, ed448.Ed448PublicKey)):
            public_key.verify(signature, message)
        elif isinstance(public_key, rsa.RSAPublicKey):
            public_key.verify(signature, message, padding.PKCS1v15(), hashes.SHA256())
        elif isinstance(public_key, ec.EllipticCurvePublicKey):
            public_key.verify(signature, message, ec.ECDSA(hashes.SHA256()))
        else:
            raise InvalidKeyFormat(f"Unsupported public key type {type(public_key).__name__}")
    except InvalidSignature:
        return False
    return True


__all__ = ["sign_bytes", "verify_bytes"]
