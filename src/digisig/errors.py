"""Error taxonomy for signing and verification.

Every failure the core can diagnose is a ``SignatureError``. Faults raised by
``cryptography``/``jwcrypto`` are translated where they occur so callers only
ever need to catch this hierarchy.
"""


class SignatureError(Exception):
    """Base class for all signing/verification failures."""


class MissingHeader(SignatureError):
    pass


class InvalidFormat(SignatureError):
    pass


class UnsupportedAlgorithm(SignatureError):
    pass


class DigestMismatch(SignatureError):
    pass


class UnknownPseudoHeader(SignatureError):
    pass


class InvalidKeyFormat(SignatureError):
    pass


class DecryptionError(SignatureError):
    """Raised when a signature-key token cannot be decrypted or authenticated."""


class BaseConstructionError(SignatureError):
    """Wraps a failure raised while building a canonical base (see ``__cause__``)."""


class StaleSignature(SignatureError):
    """Raised when ``created`` falls outside the configured freshness window."""


class UnresolvedKey(SignatureError):
    """Raised when the signature-key token decrypts but names no public key."""


__all__ = [
    "SignatureError",
    "MissingHeader",
    "InvalidFormat",
    "UnsupportedAlgorithm",
    "DigestMismatch",
    "UnknownPseudoHeader",
    "InvalidKeyFormat",
    "DecryptionError",
    "BaseConstructionError",
    "StaleSignature",
    "UnresolvedKey",
]
