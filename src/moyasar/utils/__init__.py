from .cards import (
    card_last4,
    generate_idempotency_key,
    mask_card_number,
    requires_3ds,
    sanitize_description,
    validate_cvc_length,
)
from .crypto import (
    create_signature_payload,
    extract_signature_from_headers,
    generate_signature,
    verify_hmac_signature,
)

__all__ = [
    "card_last4", "generate_idempotency_key", "mask_card_number",
    "requires_3ds", "sanitize_description", "validate_cvc_length",
    "create_signature_payload", "extract_signature_from_headers",
    "generate_signature", "verify_hmac_signature",
]
