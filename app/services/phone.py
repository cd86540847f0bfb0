"""WhatsApp phone normalization and deep-link construction.

Pure functions, no I/O. "Sending" over WhatsApp is only ever the
construction of a ``wa.me`` link that a person opens themselves.
"""
import re
from typing import Optional
from urllib.parse import quote

from app.core.config import settings
from app.core.exceptions import InvalidPhone

MIN_PHONE_DIGITS = 10
TRUNK_PREFIX = "0"

# characters encodeURIComponent leaves untouched
_URI_COMPONENT_SAFE = "-_.!~*'()"
_NON_DIGITS = re.compile(r"\D")


def digits_only(raw: Optional[str]) -> str:
    return _NON_DIGITS.sub("", raw or "")


def normalize_phone(raw: Optional[str], country_code: Optional[str] = None) -> str:
    """Return the WhatsApp-dialable digit string for ``raw``.

    Non-digits are stripped; fewer than 10 digits raises ``InvalidPhone``.
    One leading trunk ``0`` is dropped, and a bare 10-digit national number
    gets the default country code. Anything else is assumed to already carry
    a country code and is returned unchanged.
    """
    country_code = country_code or settings.DEFAULT_COUNTRY_CODE
    digits = digits_only(raw)
    if len(digits) < MIN_PHONE_DIGITS:
        raise InvalidPhone(f"Phone number must contain at least {MIN_PHONE_DIGITS} digits")

    if digits.startswith(TRUNK_PREFIX):
        digits = digits[1:]

    if len(digits) == MIN_PHONE_DIGITS:
        digits = country_code + digits

    return digits


def is_valid_whatsapp_phone(raw: Optional[str]) -> bool:
    try:
        return len(normalize_phone(raw)) >= MIN_PHONE_DIGITS
    except InvalidPhone:
        return False


def encode_message(message: Optional[str]) -> str:
    if not message:
        return ""
    return quote(message.strip(), safe=_URI_COMPONENT_SAFE)


def create_whatsapp_url(raw_phone: Optional[str], message: Optional[str] = "") -> str:
    """Build ``https://wa.me/<digits>[?text=...]``.

    The ``text`` parameter is omitted when the message is empty or blank.
    """
    digits = normalize_phone(raw_phone)
    if len(digits) < MIN_PHONE_DIGITS:
        # a trunk-stripped 10-digit input can end up short
        raise InvalidPhone("Phone number is too short after removing the trunk prefix")

    url = f"{settings.WHATSAPP_BASE_URL.rstrip('/')}/{digits}"
    if message and message.strip():
        url += f"?text={encode_message(message)}"
    return url


def format_phone_display(raw: Optional[str]) -> str:
    """Cosmetic rendering for presentation only; never dial this string."""
    if not raw:
        return ""

    cleaned = digits_only(raw)
    if len(cleaned) < MIN_PHONE_DIGITS:
        return raw

    cc = settings.DEFAULT_COUNTRY_CODE
    if len(cleaned) == 10:
        return f"+{cc} {cleaned[:5]} {cleaned[5:]}"
    if len(cleaned) == 10 + len(cc) and cleaned.startswith(cc):
        national = cleaned[len(cc):]
        return f"+{cc} {national[:5]} {national[5:]}"
    if len(cleaned) == 11 and cleaned.startswith("1"):
        return f"+1 ({cleaned[1:4]}) {cleaned[4:7]}-{cleaned[7:]}"
    return f"+{cleaned}"
