"""Prometheus instrumentation for signing and validation.

Labels stay coarse (outcome only) to keep cardinality bounded.
"""
from __future__ import annotations

from prometheus_client import (
    CollectorRegistry,
    Counter,
    generate_latest,
    CONTENT_TYPE_LATEST,
)

REGISTRY = CollectorRegistry()

MESSAGES_SIGNED = Counter(
    "digisig_messages_signed_total",
    "Messages passed through sign_message.",
    ["result"],
    registry=REGISTRY,
)
SIGNATURE_VALIDATIONS = Counter(
    "digisig_signature_validations_total",
    "Signature validations by outcome.",
    ["status"],
    registry=REGISTRY,
)


def observe_sign(result: str) -> None:
    MESSAGES_SIGNED.labels(result=result).inc()


def observe_validation(status: str) -> None:
    SIGNATURE_VALIDATIONS.labels(status=status).inc()


def prometheus_latest() -> tuple[bytes, str]:
    return generate_latest(REGISTRY), CONTENT_TYPE_LATEST


__all__ = ["REGISTRY", "observe_sign", "observe_validation", "prometheus_latest"]
