from __future__ import annotations

import argparse
import asyncio
import base64
import json
import os
import secrets
from pathlib import Path

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, ed25519, rsa

from .config import load_config
from .crypto.digest import generate_digest_header
from .errors import SignatureError
from .http.message import HttpMessage, ResponseHeaders
from .jwe.token import issue_token, redeem_token
from .orchestrator import sign_message, validate_signature


def _generate_private_key(kind: str):
    if kind == "rsa":
        return rsa.generate_private_key(public_exponent=65537, key_size=2048)
    if kind == "ec":
        return ec.generate_private_key(ec.SECP256R1())
    return ed25519.Ed25519PrivateKey.generate()


def _read_body(path: str | None) -> bytes:
    return Path(path).read_bytes() if path else b""


def cmd_keygen(args: argparse.Namespace) -> int:
    out = Path(args.out_dir)
    out.mkdir(parents=True, exist_ok=True)
    sk = _generate_private_key(args.type)
    (out / "private.pem").write_bytes(sk.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ))
    (out / "public.pem").write_bytes(sk.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    ))
    (out / "master.key").write_text(base64.b64encode(secrets.token_bytes(32)).decode())
    print(f"wrote {out / 'private.pem'}, {out / 'public.pem'}, {out / 'master.key'}")
    return 0


def cmd_digest(args: argparse.Namespace) -> int:
    print(generate_digest_header(_read_body(args.input), args.algorithm))
    return 0


def cmd_issue_token(args: argparse.Namespace) -> int:
    print(asyncio.run(issue_token(load_config(args.config))))
    return 0


def cmd_redeem_token(args: argparse.Namespace) -> int:
    pem = asyncio.run(redeem_token(args.token, load_config(args.config)))
    if pem is None:
        print("token carries no public key")
        return 1
    print(pem)
    return 0


def cmd_sign(args: argparse.Namespace) -> int:
    message = HttpMessage(method=args.method, body=_read_body(args.input))
    headers = asyncio.run(sign_message(message, ResponseHeaders(), load_config(args.config)))
    print(json.dumps(headers, indent=2))
    return 0


def cmd_verify(args: argparse.Namespace) -> int:
    with open(args.headers, "r", encoding="utf-8") as f:
        headers = json.load(f)
    message = HttpMessage(method=args.method, body=_read_body(args.input), headers=headers)
    result = asyncio.run(validate_signature(message, load_config(args.config)))
    print(result.model_dump_json(exclude_none=True))
    return 0 if result.ok else 1


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser("digisig")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_keygen = sub.add_parser("keygen", help="generate a signing key pair and a master key")
    p_keygen.add_argument("--out-dir", dest="out_dir", default="keys")
    p_keygen.add_argument("--type", choices=["ed25519", "rsa", "ec"], default="ed25519")
    p_keygen.set_defaults(func=cmd_keygen)

    p_digest = sub.add_parser("digest", help="print the Content-Digest of a file")
    p_digest.add_argument("--input", required=True)
    p_digest.add_argument("--algorithm", choices=["sha256", "sha512"], default="sha256")
    p_digest.set_defaults(func=cmd_digest)

    default_config = os.getenv("DIGISIG_CONFIG")

    p_issue = sub.add_parser("issue-token", help="issue a signature-key token")
    p_issue.add_argument("--config", default=default_config)
    p_issue.set_defaults(func=cmd_issue_token)

    p_redeem = sub.add_parser("redeem-token", help="recover the public key from a token")
    p_redeem.add_argument("--config", default=default_config)
    p_redeem.add_argument("--token", required=True)
    p_redeem.set_defaults(func=cmd_redeem_token)

    p_sign = sub.add_parser("sign", help="sign a message body; prints the headers")
    p_sign.add_argument("--config", default=default_config)
    p_sign.add_argument("--method", default="POST")
    p_sign.add_argument("--input")
    p_sign.set_defaults(func=cmd_sign)

    p_verify = sub.add_parser("verify", help="verify a message body against signed headers")
    p_verify.add_argument("--config", default=default_config)
    p_verify.add_argument("--method", default="POST")
    p_verify.add_argument("--headers", required=True, help="JSON file of received headers")
    p_verify.add_argument("--input")
    p_verify.set_defaults(func=cmd_verify)

    args = p.parse_args(argv)
    try:
        return args.func(args)
    except SignatureError as e:
        print(f"error: {e}")
        return 2


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
