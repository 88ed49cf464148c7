import base64
import hashlib
import hmac
import re
from typing import Optional

from ..constants import DIGEST_LABELS
from ..errors import DigestMismatch, InvalidFormat, MissingHeader, UnsupportedAlgorithm

CONTENT_DIGEST_RE = re.compile(r"(.+)=:(.+):")

_ALGORITHM_FOR_LABEL = {label: alg for alg, label in DIGEST_LABELS.items()}


def needs_content_digest(body: Optional[bytes]) -> bool:
    return body is not None and len(body) > 0


def digest_b64(data: bytes, algorithm: str) -> str:
    if algorithm not in DIGEST_LABELS:
        raise UnsupportedAlgorithm(f"Unsupported digest algorithm {algorithm}")
    return base64.b64encode(hashlib.new(algorithm, data).digest()).decode()


def generate_digest_header(payload: Optional[bytes], algorithm: str = "sha256") -> str:
    """Return the Content-Digest value for ``payload``.

    An absent or empty payload yields ``""``; the caller omits the header then.
    """
    if not payload:
        return ""
    return f"{DIGEST_LABELS.get(algorithm, '')}=:{digest_b64(payload, algorithm)}:"


def validate_digest_header(header_value: Optional[str], body: bytes) -> None:
    """Check a received Content-Digest against ``body``.

    Comparison is on the full header string, so label casing or formatting
    drift fails the same way a wrong hash does.
    """
    if not header_value:
        raise MissingHeader("Content-Digest header missing")
    m = CONTENT_DIGEST_RE.search(header_value)
    if not m:
        raise InvalidFormat("Content-Digest header invalid")
    label = m.group(1)
    algorithm = _ALGORITHM_FOR_LABEL.get(label)
    if algorithm is None:
        raise UnsupportedAlgorithm(f"Invalid cipher {label}")
    expected = generate_digest_header(body, algorithm)
    if not hmac.compare_digest(expected.encode(), header_value.encode()):
        raise DigestMismatch(f"Content-Digest value is invalid. Expected body digest is: {expected}")


__all__ = [
    "needs_content_digest",
    "digest_b64",
    "generate_digest_header",
    "validate_digest_header",
]
