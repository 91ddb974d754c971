"""Input validation and sanitization for everything donors and admins submit.

The predicates are pure; :func:`validate_donation` strings them together
and raises an :class:`~donation_api.core.errors.ApiError` naming the field
and the rule that failed.
"""

import html
import math
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional

from donation_api.core import errors

MIN_DONATION_AMOUNT = 10_000
MAX_DONATION_AMOUNT = 1_000_000_000

MAX_EMAIL_LENGTH = 254
MAX_TEXT_LENGTH = 255
MAX_HTML_LENGTH = 5000
MAX_PHONE_LENGTH = 20

EMAIL_RE = re.compile(
    r"^[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+"
    r"@[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)*$"
)
# 08xxxxxxxxx or 628xxxxxxxxxx once spaces, dashes and '+' are removed
PHONE_RE = re.compile(r"^(?:0|62)8[0-9]{8,11}$")
PHONE_NOISE_RE = re.compile(r"[\s\-+]")
CONTROL_CHARS_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
TAG_RE = re.compile(r"<[^>]*>")


def is_valid_email(email: Any) -> bool:
    if not email or not isinstance(email, str):
        return False
    if len(email) > MAX_EMAIL_LENGTH:
        return False
    return EMAIL_RE.match(email) is not None


def is_valid_phone(phone: Any) -> bool:
    """Indonesian mobile numbers: ``08…`` or ``62 8…``, 10 to 14 digits."""
    if not phone or not isinstance(phone, str):
        return False
    cleaned = PHONE_NOISE_RE.sub("", phone)
    return PHONE_RE.match(cleaned) is not None


def is_valid_donation_amount(amount: Any) -> bool:
    # bool is an int subclass; a JSON ``true`` is not an amount
    if isinstance(amount, bool) or not isinstance(amount, (int, float)):
        return False
    if isinstance(amount, float):
        if not math.isfinite(amount) or not amount.is_integer():
            return False
    return MIN_DONATION_AMOUNT <= amount <= MAX_DONATION_AMOUNT


def sanitize_text(value: Any, max_length: int = MAX_TEXT_LENGTH) -> str:
    """Strip control characters (tabs and newlines survive) and cap the length."""
    if not value or not isinstance(value, str):
        return ""
    cleaned = CONTROL_CHARS_RE.sub("", value)
    return cleaned[:max_length].strip()


def sanitize_html(value: Any, max_length: int = MAX_HTML_LENGTH) -> str:
    """Drop tags, escape what is left and cap the length."""
    if not value or not isinstance(value, str):
        return ""
    cleaned = TAG_RE.sub("", value)
    cleaned = html.escape(cleaned, quote=True).replace("/", "&#x2F;")
    return cleaned[:max_length].strip()


def calculate_fee(amount: int) -> int:
    """Gateway surcharge of 0.7%, rounded up to the next whole unit."""
    # ceil(amount * 7 / 1000) without going through floats
    return -(-amount * 7 // 1000)


@dataclass
class DonationInput:
    name: str
    email: str
    phone: Optional[str]
    amount: int
    message: Optional[str]
    anonymous: bool

    @property
    def fee(self) -> int:
        return calculate_fee(self.amount)

    @property
    def total(self) -> int:
        return self.amount + self.fee


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def validate_donation(data: Dict[str, Any]) -> DonationInput:
    """Validate and sanitize a donation submission.

    Raises ``ApiError`` (400) on the first rule that fails; nothing is
    written before this returns.
    """
    for field_name in ("name", "email", "amount"):
        if _is_blank(data.get(field_name)):
            raise errors.missing_required_field(field_name)

    if not isinstance(data["name"], str):
        raise errors.field_error("VALIDATION_ERROR", "Name must be text", "name")

    email = data["email"]
    if not isinstance(email, str) or not is_valid_email(email.strip()):
        raise errors.field_error("INVALID_EMAIL", "Invalid email format", "email")

    phone = data.get("phone")
    if not _is_blank(phone) and not is_valid_phone(phone):
        raise errors.field_error("INVALID_PHONE", "Invalid phone number format", "phone")

    amount = data["amount"]
    if not is_valid_donation_amount(amount):
        raise errors.field_error(
            "INVALID_AMOUNT",
            "Amount must be between Rp 10,000 and Rp 1,000,000,000",
            "amount",
            min=MIN_DONATION_AMOUNT,
            max=MAX_DONATION_AMOUNT,
        )

    name = sanitize_text(data["name"], MAX_TEXT_LENGTH)
    if not name:
        raise errors.missing_required_field("name")

    return DonationInput(
        name=name,
        email=email.strip().lower(),
        phone=None if _is_blank(phone) else sanitize_text(phone, MAX_PHONE_LENGTH),
        amount=int(amount),
        message=sanitize_html(data.get("message")) or None,
        anonymous=bool(data.get("anonymous")),
    )
