import hashlib
import hmac
import json
import re
from collections.abc import Mapping
from typing import Any

# Checked in order; the first one present wins.
SIGNATURE_HEADERS = ("x-moyasar-signature", "x-signature", "signature", "authorization")
_SIGNATURE_PREFIX = re.compile(r"^(sha256=|hmac-sha256=|Bearer\s+)", re.IGNORECASE)


def _to_bytes(payload: bytes | str | Mapping[str, Any]) -> bytes:
    if isinstance(payload, bytes):
        return payload
    if isinstance(payload, str):
        return payload.encode("utf-8")
    return json.dumps(payload, sort_keys=True, default=str).encode("utf-8")


def generate_signature(payload: bytes | str | Mapping[str, Any], secret: str) -> str:
    """Generate a hex HMAC-SHA256 signature. Mappings are signed as canonical JSON."""
    return hmac.new(
        secret.encode("utf-8"),
        _to_bytes(payload),
        hashlib.sha256,
    ).hexdigest()


def verify_hmac_signature(payload: bytes | str | Mapping[str, Any], signature: str, secret: str) -> bool:
    """Verify a hex HMAC-SHA256 signature in constant time."""
    if not signature or not secret:
        return False
    expected = generate_signature(payload, secret)
    return hmac.compare_digest(expected.encode("ascii"), signature.strip().lower().encode("utf-8"))


def create_signature_payload(payload: Mapping[str, Any], timestamp: int | None = None) -> str:
    """The string a timestamped signature is computed over: ``"<ts>.<json>"``."""
    body = json.dumps(payload, separators=(",", ":"), default=str)
    return f"{timestamp}.{body}" if timestamp else body


def extract_signature_from_headers(headers: Mapping[str, str | list[str]]) -> str | None:
    """Find a signature in the usual headers, stripping ``sha256=``/``Bearer`` prefixes."""
    lowered = {name.lower(): value for name, value in headers.items()}
    for name in SIGNATURE_HEADERS:
        value = lowered.get(name)
        if isinstance(value, list):
            value = value[0] if value else None
        if value:
            return _SIGNATURE_PREFIX.sub("", value)
    return None
