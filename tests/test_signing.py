"""Reference-vector tests for TC3-HMAC-SHA256 signing."""

from __future__ import annotations

from cttranslate.translation import signing
from cttranslate.translation.tencent import build_payload

SECRET_ID = "AKIDEXAMPLE"
SECRET_KEY = "SecretKeyExample"
TIMESTAMP = 1700000000
HOST = "tmt.tencentcloudapi.com"
PAYLOAD = '{"SourceText":"Infinite Health","Source":"auto","Target":"zh","ProjectId":0}'
EXPECTED_SIGNATURE = "558f1f253267b39834710e594dbbeef122024b4689ecbcef7faa3fef4b93111e"


def test_payload_is_compact_and_ordered():
    assert build_payload("Infinite Health", "zh-CN") == PAYLOAD
    assert signing.sha256_hex(PAYLOAD) == "bfd75d7532429775846c9a246e816f510de5c967a76e5568bf17cdc8ec2e418e"


def test_canonical_request_layout():
    canonical = signing.canonical_request(PAYLOAD, HOST)
    assert canonical.split("\n") == [
        "POST",
        "/",
        "",
        "content-type:application/json; charset=utf-8",
        f"host:{HOST}",
        "",
        "content-type;host",
        signing.sha256_hex(PAYLOAD),
    ]
    assert signing.sha256_hex(canonical) == "2885911066b1014afb8f659b06cede9886dea74a6ee1e3d4c4760245f74b6a0b"


def test_signature_matches_reference_vector():
    assert signing.signature(SECRET_KEY, PAYLOAD, HOST, "tmt", TIMESTAMP) == EXPECTED_SIGNATURE


def test_sign_request_headers():
    signed = signing.sign_request(
        secret_id=SECRET_ID,
        secret_key=SECRET_KEY,
        payload=PAYLOAD,
        host=HOST,
        service="tmt",
        action="TextTranslate",
        version="2018-03-21",
        region="ap-guangzhou",
        timestamp=TIMESTAMP,
    )
    assert signed.headers["Authorization"] == (
        "TC3-HMAC-SHA256 Credential=AKIDEXAMPLE/2023-11-14/tmt/tc3_request, "
        f"SignedHeaders=content-type;host, Signature={EXPECTED_SIGNATURE}"
    )
    assert signed.headers["X-TC-Timestamp"] == "1700000000"
    assert signed.headers["X-TC-Region"] == "ap-guangzhou"
    assert signed.body == PAYLOAD.encode("utf-8")
