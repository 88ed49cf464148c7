import base64
import secrets

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from jwcrypto import jwk, jwt
from jwcrypto.common import base64url_encode

from digisig.config import SignatureComponents, SigningConfig
from digisig.crypto.keyloader import KeySource

CREATED = 1663459378
PARAMS = ["content-digest", "x-ebay-signature-key", "@method", "@path", "@authority"]


def pem_pair(sk):
    priv = sk.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode()
    pub = sk.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode()
    return priv, pub


def encrypted_token(claims, master_key_b64):
    """Key token with arbitrary claims under the configured master key."""
    key = jwk.JWK(kty="oct", k=base64url_encode(base64.b64decode(master_key_b64)))
    t = jwt.JWT(header={"alg": "A256GCMKW", "enc": "A256GCM"}, claims=claims)
    t.make_encrypted_token(key)
    return t.serialize()


@pytest.fixture(scope="session")
def ed25519_pems():
    return pem_pair(Ed25519PrivateKey.generate())


@pytest.fixture(scope="session")
def master_key_b64():
    return base64.b64encode(secrets.token_bytes(32)).decode()


@pytest.fixture
def components():
    return SignatureComponents(method="POST", authority="localhost:8080", path="/test")


@pytest.fixture
def config(ed25519_pems, master_key_b64, components):
    priv, pub = ed25519_pems
    return SigningConfig(
        digest_algorithm="sha256",
        signature_params=PARAMS,
        signature_components=components,
        private_key=KeySource.inline(priv),
        public_key=KeySource.inline(pub),
        master_key=KeySource.inline(master_key_b64),
        jwt_payload={"appid": "test-app"},
    )
