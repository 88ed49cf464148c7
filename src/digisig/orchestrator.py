"""End-to-end signing and validation of a message.

Signing attaches headers in a fixed order. The signature goes last because
its base covers the signature-key header, which must already be in the
working header set.
"""
from __future__ import annotations

from typing import Dict

from .config import SigningConfig
from .constants import CONTENT_DIGEST, SIGNATURE, SIGNATURE_INPUT, SIGNATURE_KEY
from .crypto.digest import generate_digest_header, needs_content_digest, validate_digest_header
from .errors import MissingHeader, SignatureError, StaleSignature, UnresolvedKey
from .http.base_string import generate_signature_input
from .http.message import MessageLike, ResponseLike, header_set
from .http.signature import generate_signature, generate_signature_key, validate_signature_header
from .models import ValidationResult
from .obs.prom import observe_sign, observe_validation
from .utils.clock import Clock, frozen, unix_now
from .utils.logging import get_logger

log = get_logger()


async def sign_message(
    message: MessageLike,
    response: ResponseLike,
    config: SigningConfig,
    clock: Clock = unix_now,
) -> Dict[str, str]:
    """Sign ``message`` and set the signature headers on ``response``.

    Returns the generated headers. Failures propagate as ``SignatureError``.
    """
    created = frozen(clock())
    generated: Dict[str, str] = {}
    try:
        if needs_content_digest(message.body):
            content_digest = generate_digest_header(message.body, config.digest_algorithm)
            response.set_header(CONTENT_DIGEST, content_digest)
            generated[CONTENT_DIGEST] = content_digest

        signature_input = generate_signature_input(generated, config, clock=created)
        response.set_header(SIGNATURE_INPUT, signature_input)
        generated[SIGNATURE_INPUT] = signature_input

        signature_key = config.jwe or await generate_signature_key(config, clock=created)
        response.set_header(SIGNATURE_KEY, signature_key)
        generated[SIGNATURE_KEY] = signature_key

        signature = generate_signature(generated, config, clock=created)
        response.set_header(SIGNATURE, signature)
        generated[SIGNATURE] = signature
    except SignatureError:
        observe_sign("error")
        raise
    observe_sign("ok")
    log.info(f"signed {message.method} message: {signature_input}")
    return generated


async def validate_signature(
    message: MessageLike,
    config: SigningConfig,
    clock: Clock = unix_now,
) -> ValidationResult:
    try:
        headers = header_set(message.headers)
        if not headers.get(SIGNATURE):
            raise MissingHeader("Signature header is missing")
        if needs_content_digest(message.body):
            validate_digest_header(headers.get(CONTENT_DIGEST), message.body)
        verified = await validate_signature_header(headers, config, clock=clock)
        result = ValidationResult.valid() if verified else ValidationResult.invalid("signature mismatch")
    except (StaleSignature, UnresolvedKey) as e:
        result = ValidationResult.invalid(str(e))
    except SignatureError as e:
        log.warning(f"signature validation error: {e}")
        result = ValidationResult.error(str(e))
    observe_validation(result.status.value)
    log.info(f"signature validation {message.method}: {result.status.value}")
    return result


__all__ = ["sign_message", "validate_signature"]
