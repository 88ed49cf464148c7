"""Example HTTP service around the signing core.

Pseudo-header values are derived from each incoming request and merged into
the configured ``SigningConfig`` before signing or verifying.
"""
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response

from .config import SignatureComponents, SigningConfig, load_config
from .constants import CONTENT_DIGEST, SIGNATURE_INPUT, SIGNATURE_KEY, SIGNATURE
from .crypto.digest import generate_digest_header, needs_content_digest, validate_digest_header
from .errors import SignatureError, StaleSignature, UnresolvedKey
from .http.base_string import generate_signature_input
from .http.message import HttpMessage, ResponseHeaders, header_set
from .http.signature import generate_signature, generate_signature_key, validate_signature_header
from .models import ValidationResult, ValidationStatus
from .obs.prom import prometheus_latest
from .orchestrator import sign_message, validate_signature
from .utils.clock import frozen, unix_now
from .utils.logging import get_logger

load_dotenv()

log = get_logger()


def canonical_authority(host_header: Optional[str], fallback_netloc: str) -> str:
    """Host with explicit port when one is known; hostname lower-cased, port verbatim."""
    host = host_header or fallback_netloc or ""
    if "/" in host:
        host = host.split("/")[0]
    if host.count(":") == 0 and fallback_netloc and ":" in fallback_netloc:
        port = fallback_netloc.split(":")[-1]
        if port.isdigit():
            host = f"{host}:{port}"
    if ":" in host:
        h, p = host.split(":", 1)
        return f"{h.lower()}:{p}"
    return host.lower()


def components_for(request: Request) -> SignatureComponents:
    path = request.url.path or "/"
    if request.url.query:
        path = f"{path}?{request.url.query}"
    return SignatureComponents(
        method=request.method.upper(),
        authority=canonical_authority(request.headers.get("host"), request.url.netloc),
        target_uri=str(request.url),
        path=path,
        scheme=request.url.scheme,
        request_target=f"{request.method.lower()} {path}",
    )


def create_app(config: Optional[SigningConfig] = None) -> FastAPI:
    app = FastAPI(title="digisig example service")
    app.state.config = config

    def request_config(request: Request) -> SigningConfig:
        if app.state.config is None:
            app.state.config = load_config()
        return app.state.config.with_components(components_for(request))

    async def as_message(request: Request) -> HttpMessage:
        return HttpMessage(method=request.method, body=await request.body(), headers=request.headers)

    @app.get("/__health")
    async def health():
        return {"status": "ok"}

    @app.get("/__metrics")
    async def metrics():
        body, content_type = prometheus_latest()
        return Response(content=body, media_type=content_type)

    @app.post("/sign-request")
    async def sign_request(request: Request):
        response = Response(status_code=200)
        try:
            await sign_message(await as_message(request), ResponseHeaders(response.headers), request_config(request))
        except SignatureError as e:
            log.error(f"sign-request failed: {e}")
            return JSONResponse({"error": str(e)}, status_code=500)
        return response

    @app.post("/sign")
    async def sign(request: Request):
        cfg = request_config(request)
        body = await request.body()
        created = frozen(unix_now())
        generated = {}
        try:
            if needs_content_digest(body):
                generated[CONTENT_DIGEST] = generate_digest_header(body, cfg.digest_algorithm)
            generated[SIGNATURE_INPUT] = generate_signature_input(generated, cfg, clock=created)
            generated[SIGNATURE_KEY] = await generate_signature_key(cfg, clock=created)
            generated[SIGNATURE] = generate_signature(generated, cfg, clock=created)
        except SignatureError as e:
            log.error(f"sign failed: {e}")
            return JSONResponse({"error": str(e)}, status_code=500)
        return JSONResponse(generated)

    @app.post("/verify")
    async def verify(request: Request):
        result = await validate_signature(await as_message(request), request_config(request))
        status_code = 200 if result.status is ValidationStatus.VALID else 400
        return JSONResponse(result.model_dump(mode="json", exclude_none=True), status_code=status_code)

    @app.post("/validate")
    async def validate(request: Request):
        cfg = request_config(request)
        body = await request.body()
        headers = header_set(request.headers)
        try:
            if needs_content_digest(body):
                validate_digest_header(headers.get(CONTENT_DIGEST), body)
            verified = await validate_signature_header(headers, cfg)
        except (StaleSignature, UnresolvedKey) as e:
            return JSONResponse(ValidationResult.invalid(str(e)).model_dump(mode="json"), status_code=400)
        except SignatureError as e:
            log.error(f"validate failed: {e}")
            return JSONResponse({"error": str(e)}, status_code=500)
        if not verified:
            log.error("signature verification failure")
            return JSONResponse(ValidationResult.invalid("signature mismatch").model_dump(mode="json"), status_code=400)
        return JSONResponse(ValidationResult.valid().model_dump(mode="json", exclude_none=True))

    return app


app = create_app()
