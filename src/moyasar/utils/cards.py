import secrets
import time
from collections.abc import Mapping
from typing import Any

from moyasar.models.payment import CardScheme
from moyasar.validation.payment import DESCRIPTION_MAX_LENGTH

CVC_LENGTH = 3
AMEX_CVC_LENGTH = 4


def validate_cvc_length(cvc: str, scheme: CardScheme | str | None = None) -> bool:
    expected = AMEX_CVC_LENGTH if scheme == CardScheme.AMEX else CVC_LENGTH
    return len(cvc) == expected


def mask_card_number(number: str) -> str:
    """Keep the first six and last four digits: ``411111******1111``."""
    if len(number) < 10:
        return number
    return f"{number[:6]}{'*' * (len(number) - 10)}{number[-4:]}"


def card_last4(number: str) -> str:
    return number[-4:]


def sanitize_description(description: str) -> str:
    return description.strip()[:DESCRIPTION_MAX_LENGTH]


def generate_idempotency_key(prefix: str = "pay") -> str:
    return f"{prefix}_{int(time.time() * 1000):x}_{secrets.token_hex(3)}"


def requires_3ds(source: Mapping[str, Any]) -> bool:
    # Cards go through 3-D Secure unless explicitly bypassed; wallets authenticate themselves.
    if source.get("type") == "creditcard":
        return source.get("3ds") is not False
    return False
