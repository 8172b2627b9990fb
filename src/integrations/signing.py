"""
PayPay OPA-Auth request signing.

Every outbound call to the provider carries an Authorization header built from
the credential secret, the request method, the resource path, a timestamp, a
single-use nonce and a hash of the body:

    hmac OPA-Auth:<api_key>:<signature>:<nonce>:<timestamp>

The signature is base64(HMAC-SHA256(secret, base)) where base is

    METHOD\\nPATH\\nAPI_KEY\\nTIMESTAMP\\nNONCE\\nCONTENT_HASH\\n

Content hash rule: a GET request, or a blank body, hashes to the literal
"empty". Any other request hashes MD5("application/json" + body) and base64
encodes the digest. A GET carrying a body still uses "empty".

The clock and the random source are parameters so tests can pin both.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import secrets
import time
from dataclasses import dataclass
from typing import Callable, Dict, Mapping, Union

from src.integrations.contracts.interfaces import Credential, HttpMethod
from src.integrations.errors import ConfigurationError

AUTH_SCHEME = "hmac OPA-Auth"
CONTENT_TYPE = "application/json"
EMPTY_CONTENT_HASH = "empty"
NONCE_BYTES = 16
SUPPORTED_METHODS = tuple(m.value for m in HttpMethod)

Body = Union[str, bytes, None]
Clock = Callable[[], float]
RandomBytes = Callable[[int], bytes]


@dataclass(frozen=True)
class SignedRequest:
    method: str
    resource_path: str
    body: bytes
    timestamp: int
    nonce: str


@dataclass(frozen=True)
class AuthorizationParts:
    api_key: str
    signature: str
    nonce: str
    timestamp: int


def _to_bytes(body: Body) -> bytes:
    if body is None:
        return b""
    if isinstance(body, bytes):
        return body
    return body.encode("utf-8")


def _normalize_method(method: str) -> str:
    normalized = (method or "").strip().upper()
    if normalized not in SUPPORTED_METHODS:
        raise ValueError(f"Unsupported method for signing: {method!r}")
    return normalized


def _require_credential(credential: Credential) -> None:
    if credential is None:
        raise ConfigurationError("Cannot sign a provider request without credentials.")
    missing = credential.missing_fields()
    if missing:
        raise ConfigurationError(f"Credential is incomplete, missing: {', '.join(missing)}")


def _is_blank(body: Body) -> bool:
    if body is None:
        return True
    if isinstance(body, bytes):
        try:
            return not body.decode("utf-8").strip()
        except UnicodeDecodeError:
            return not body.strip()
    return not body.strip()


def compute_content_hash(method: str, body: Body) -> str:
    raw = _to_bytes(body)
    if _normalize_method(method) == HttpMethod.GET.value or _is_blank(body):
        return EMPTY_CONTENT_HASH
    digest = hashlib.md5(CONTENT_TYPE.encode("utf-8") + raw).digest()
    return base64.b64encode(digest).decode("ascii")


def new_signed_request(
    method: str,
    resource_path: str,
    body: Body = None,
    *,
    clock: Clock = time.time,
    random_bytes: RandomBytes = secrets.token_bytes,
) -> SignedRequest:
    return SignedRequest(
        method=_normalize_method(method),
        resource_path=resource_path,
        body=_to_bytes(body),
        timestamp=int(clock()),
        nonce=random_bytes(NONCE_BYTES).hex(),
    )


def build_signature_base(request: SignedRequest, api_key: str, content_hash: str) -> str:
    fields = (
        request.method,
        request.resource_path,
        api_key,
        str(request.timestamp),
        request.nonce,
        content_hash,
    )
    return "\n".join(fields) + "\n"


def sign(secret: str, base: str) -> str:
    mac = hmac.new(secret.encode("utf-8"), base.encode("utf-8"), hashlib.sha256)
    return base64.b64encode(mac.digest()).decode("ascii")


def headers_for(request: SignedRequest, credential: Credential) -> Dict[str, str]:
    """Sign an already-built request. Deterministic for a fixed request."""
    _require_credential(credential)
    content_hash = compute_content_hash(request.method, request.body)
    base = build_signature_base(request, credential.api_key, content_hash)
    signature = sign(credential.api_secret, base)
    return {
        "Authorization": (
            f"{AUTH_SCHEME}:{credential.api_key}:{signature}:{request.nonce}:{request.timestamp}"
        ),
        "Content-Type": CONTENT_TYPE,
        "X-ASSUME-MERCHANT": credential.merchant_id,
    }


def build_auth_headers(
    method: str,
    resource_path: str,
    body: Body,
    credential: Credential,
    *,
    clock: Clock = time.time,
    random_bytes: RandomBytes = secrets.token_bytes,
) -> Dict[str, str]:
    """
    Build the headers for one outbound provider call.

    Args:
        method: GET or POST
        resource_path: provider path, without query string
        body: exact bytes (or text) that will be sent; None or "" for no body
        credential: api key, secret and merchant id
        clock: returns seconds since epoch
        random_bytes: returns n unpredictable bytes

    Returns:
        Authorization, Content-Type and X-ASSUME-MERCHANT headers

    Raises:
        ConfigurationError: credential missing or incomplete
        ValueError: method is not GET or POST
    """
    request = new_signed_request(
        method, resource_path, body, clock=clock, random_bytes=random_bytes
    )
    return headers_for(request, credential)


def parse_authorization_header(value: str) -> AuthorizationParts:
    prefix = AUTH_SCHEME + ":"
    if not value or not value.startswith(prefix):
        raise ValueError("Authorization header is not an OPA-Auth header.")
    parts = value[len(prefix):].split(":")
    if len(parts) != 4:
        raise ValueError("Authorization header must carry key, signature, nonce and timestamp.")
    api_key, signature, nonce, timestamp = parts
    try:
        ts = int(timestamp)
    except ValueError as e:
        raise ValueError(f"Authorization timestamp is not an integer: {timestamp!r}") from e
    return AuthorizationParts(api_key=api_key, signature=signature, nonce=nonce, timestamp=ts)


def verify_auth_headers(
    headers: Mapping[str, str],
    method: str,
    resource_path: str,
    body: Body,
    credential: Credential,
) -> bool:
    """Recompute the signature from the header's own nonce and timestamp."""
    _require_credential(credential)
    try:
        parts = parse_authorization_header(headers.get("Authorization", ""))
    except ValueError:
        return False
    if not hmac.compare_digest(parts.api_key, credential.api_key):
        return False

    request = SignedRequest(
        method=_normalize_method(method),
        resource_path=resource_path,
        body=_to_bytes(body),
        timestamp=parts.timestamp,
        nonce=parts.nonce,
    )
    content_hash = compute_content_hash(request.method, request.body)
    expected = sign(credential.api_secret, build_signature_base(request, credential.api_key, content_hash))
    return hmac.compare_digest(expected, parts.signature)
