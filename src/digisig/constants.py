# Header names (wire format, lower case)
CONTENT_DIGEST = "content-digest"
SIGNATURE_INPUT = "signature-input"
SIGNATURE_KEY = "x-ebay-signature-key"
SIGNATURE = "signature"

SIGNATURE_LABEL = "sig1"

# Digest algorithm id -> Content-Digest label
DIGEST_LABELS = {
    "sha256": "sha-256",
    "sha512": "sha-512",
}

KEY_START = "-----BEGIN PUBLIC KEY-----\n"
KEY_END = "\n-----END PUBLIC KEY-----"

# JWT "y" unit: 365.25 days
SECONDS_PER_YEAR = 31557600

DEFAULT_JWE_HEADER = {"alg": "A256GCMKW", "enc": "A256GCM", "zip": "DEF"}
