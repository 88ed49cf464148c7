import pytest
from hypothesis import HealthCheck, given, settings, strategies as st

from digisig.config import SignatureComponents
from digisig.errors import (
    BaseConstructionError,
    InvalidFormat,
    MissingHeader,
    UnknownPseudoHeader,
)
from digisig.http.base_string import (
    calculate_base,
    calculate_base_with_input,
    generate_base,
    generate_signature_input,
    parse_signature_input,
    resolve_pseudo_header,
)
from digisig.utils.clock import frozen

CREATED = 1663459378
DIGEST = "sha-256=:X48E9qOokqqrvdts8nOJRJN3OWDUoyWxBf7kbu9DBPE=:"
KEY_TOKEN = "eyJhbGciOiJBMjU2R0NNS1ciLCJlbmMiOiJBMjU2R0NNIn0.a.b.c.d"


def test_signature_input_with_payload(config):
    actual = generate_signature_input({"content-digest": "test"}, config, clock=frozen(CREATED))
    assert actual == (
        'sig1=("content-digest" "x-ebay-signature-key" "@method" "@path" "@authority");created=1663459378'
    )


def test_signature_input_without_payload(config):
    actual = generate_signature_input({}, config, clock=frozen(CREATED))
    assert actual == 'sig1=("x-ebay-signature-key" "@method" "@path" "@authority");created=1663459378'


def test_generate_base_layout(config):
    headers = {"Content-Digest": DIGEST, "X-EBAY-SIGNATURE-KEY": KEY_TOKEN}
    base = generate_base(headers, config, clock=frozen(CREATED))
    assert base == "\n".join([
        f'"content-digest": {DIGEST}',
        f'"x-ebay-signature-key": {KEY_TOKEN}',
        '"@method": POST',
        '"@path": /test',
        '"@authority": localhost:8080',
        '"@signature-params": ("content-digest" "x-ebay-signature-key" "@method" "@path" "@authority");created=1663459378',
    ])
    assert not base.endswith("\n")


def test_generate_then_calculate_round_trip(config):
    headers = {"content-digest": DIGEST, "x-ebay-signature-key": KEY_TOKEN}
    clock = frozen(CREATED)
    headers["signature-input"] = generate_signature_input(headers, config, clock=clock)
    assert calculate_base(headers, config) == generate_base(headers, config, clock=clock)


def test_bodiless_request_omits_content_digest_symmetrically(config):
    get_config = config.with_components(SignatureComponents(method="GET", authority="localhost:8080", path="/test"))
    headers = {"x-ebay-signature-key": KEY_TOKEN}
    clock = frozen(CREATED)
    headers["signature-input"] = generate_signature_input(headers, get_config, clock=clock)
    generated = generate_base(headers, get_config, clock=clock)
    assert '"content-digest"' not in generated
    assert calculate_base(headers, get_config) == generated


def test_calculate_uses_senders_order(config):
    headers = {
        "x-ebay-signature-key": KEY_TOKEN,
        "signature-input": 'sig1=("@path" "@method");created=42',
    }
    assert calculate_base(headers, config) == '"@path": /test\n"@method": POST\n"@signature-params": ("@path" "@method");created=42'


def test_calculate_reproduces_trailing_clause_verbatim(config):
    headers = {"signature-input": 'sig1=("@method");created=42;keyid="abc"'}
    base = calculate_base(headers, config)
    assert base.endswith('"@signature-params": ("@method");created=42;keyid="abc"')


def test_calculate_returns_parsed_signature_input(config):
    headers = {"signature-input": 'sig1=("@method");created=42;keyid="abc"'}
    base, sig_input = calculate_base_with_input(headers, config)
    assert base == calculate_base(headers, config)
    assert sig_input.created == 42
    assert sig_input.keyid == "abc"
    assert sig_input.components == ["@method"]


def test_calculate_requires_signature_input(config):
    with pytest.raises(BaseConstructionError) as ei:
        calculate_base({}, config)
    assert isinstance(ei.value.__cause__, MissingHeader)


def test_calculate_rejects_malformed_signature_input(config):
    with pytest.raises(BaseConstructionError) as ei:
        calculate_base({"signature-input": "sig1=@method;created=now"}, config)
    assert isinstance(ei.value.__cause__, InvalidFormat)


def test_calculate_does_not_skip_declared_content_digest(config):
    headers = {"signature-input": 'sig1=("content-digest" "@method");created=42'}
    with pytest.raises(BaseConstructionError) as ei:
        calculate_base(headers, config)
    assert isinstance(ei.value.__cause__, MissingHeader)


def test_missing_regular_header_fails(config):
    cfg = config.model_copy(update={"signature_params": ["content-type", "@method"]})
    with pytest.raises(BaseConstructionError) as ei:
        generate_base({}, cfg, clock=frozen(CREATED))
    assert isinstance(ei.value.__cause__, MissingHeader)
    assert "content-type" in str(ei.value)


def test_unknown_pseudo_header(config):
    cfg = config.model_copy(update={"signature_params": ["@query"]})
    with pytest.raises(BaseConstructionError) as ei:
        generate_base({}, cfg, clock=frozen(CREATED))
    assert isinstance(ei.value.__cause__, UnknownPseudoHeader)


def test_pseudo_header_table():
    comps = SignatureComponents(
        method="POST",
        authority="example.com:443",
        target_uri="https://example.com/a?b=1",
        path="/a?b=1",
        scheme="https",
        request_target="post /a?b=1",
    )
    assert resolve_pseudo_header("@method", comps) == "POST"
    assert resolve_pseudo_header("@Authority", comps) == "example.com:443"
    assert resolve_pseudo_header("@target-uri", comps) == "https://example.com/a?b=1"
    assert resolve_pseudo_header("@path", comps) == "/a?b=1"
    assert resolve_pseudo_header("@scheme", comps) == "https"
    assert resolve_pseudo_header("@request-target", comps) == "post /a?b=1"
    with pytest.raises(UnknownPseudoHeader):
        resolve_pseudo_header("@status", comps)


def test_parse_signature_input():
    parsed = parse_signature_input('sig1=("content-digest" "@method");created=1663459378;keyid="k1"')
    assert parsed.label == "sig1"
    assert parsed.components == ["content-digest", "@method"]
    assert parsed.created == 1663459378
    assert parsed.keyid == "k1"
    assert parsed.signature_params == '("content-digest" "@method");created=1663459378;keyid="k1"'


header_value = st.text(
    alphabet=st.characters(min_codepoint=33, max_codepoint=126), min_size=1, max_size=40
)


@settings(suppress_health_check=[HealthCheck.function_scoped_fixture])
@given(
    digest=header_value,
    token=header_value,
    created=st.integers(min_value=0, max_value=2**33),
    with_body=st.booleans(),
)
def test_round_trip_property(config, digest, token, created, with_body):
    headers = {"x-ebay-signature-key": token}
    if with_body:
        headers["content-digest"] = digest
    clock = frozen(created)
    headers["signature-input"] = generate_signature_input(headers, config, clock=clock)
    assert calculate_base(headers, config) == generate_base(headers, config, clock=clock)
