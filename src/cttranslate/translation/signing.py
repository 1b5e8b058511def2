"""TC3-HMAC-SHA256 request signing for the Tencent Cloud API."""

from __future__ import annotations

import hashlib
import hmac
from dataclasses import dataclass
from datetime import datetime, timezone


ALGORITHM = "TC3-HMAC-SHA256"
CONTENT_TYPE = "application/json; charset=utf-8"
SIGNED_HEADERS = "content-type;host"


@dataclass(frozen=True, slots=True)
class SignedRequest:
    """Headers and body for a signed POST."""

    headers: dict[str, str]
    body: bytes
    signature: str


def sha256_hex(value: str) -> str:
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


def hmac_sha256(key: bytes, message: str) -> bytes:
    return hmac.new(key, message.encode("utf-8"), hashlib.sha256).digest()


def utc_date(timestamp: int) -> str:
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).strftime("%Y-%m-%d")


def canonical_request(payload: str, host: str) -> str:
    """POST / with no query, signing content-type and host."""

    canonical_headers = f"content-type:{CONTENT_TYPE}\nhost:{host}\n"
    return "\n".join(
        ["POST", "/", "", canonical_headers, SIGNED_HEADERS, sha256_hex(payload)]
    )


def string_to_sign(payload: str, host: str, service: str, timestamp: int) -> str:
    scope = f"{utc_date(timestamp)}/{service}/tc3_request"
    return f"{ALGORITHM}\n{timestamp}\n{scope}\n{sha256_hex(canonical_request(payload, host))}"


def signature(secret_key: str, payload: str, host: str, service: str, timestamp: int) -> str:
    """Derive date → service → signing key from the secret and sign the request."""

    secret_date = hmac_sha256(f"TC3{secret_key}".encode("utf-8"), utc_date(timestamp))
    secret_service = hmac_sha256(secret_date, service)
    secret_signing = hmac_sha256(secret_service, "tc3_request")
    digest = hmac_sha256(secret_signing, string_to_sign(payload, host, service, timestamp))
    return digest.hex()


def sign_request(
    *,
    secret_id: str,
    secret_key: str,
    payload: str,
    host: str,
    service: str,
    action: str,
    version: str,
    region: str,
    timestamp: int,
) -> SignedRequest:
    """Build the full header set for one API call."""

    scope = f"{utc_date(timestamp)}/{service}/tc3_request"
    sig = signature(secret_key, payload, host, service, timestamp)
    headers = {
        "Authorization": (
            f"{ALGORITHM} Credential={secret_id}/{scope}, "
            f"SignedHeaders={SIGNED_HEADERS}, Signature={sig}"
        ),
        "Content-Type": CONTENT_TYPE,
        "Host": host,
        "X-TC-Action": action,
        "X-TC-Version": version,
        "X-TC-Timestamp": str(timestamp),
        "X-TC-Region": region,
    }
    return SignedRequest(headers=headers, body=payload.encode("utf-8"), signature=sig)
