"""
Input normalisation for membership forms.

Form values arrive either as JSON or as multipart strings (nested sections
JSON-encoded), so every helper here accepts both shapes.
"""

import json
import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from utils.exceptions import ValidationFailed

from .models import MONEY_MAX

NUMBER_NOISE = re.compile(r"[,\s฿]")
IDENTIFIER_NOISE = re.compile(r"[\s-]")
THIRTEEN_DIGITS = re.compile(r"^\d{13}$")

INVALID_NUMBER_MESSAGE = "ข้อมูลตัวเลขไม่ถูกต้อง"


class NumberOutOfRange(ValueError):
    pass


def normalize_identifier(value):
    """Strip spaces and dashes from a tax id or id card number."""
    return IDENTIFIER_NOISE.sub("", str(value or ""))


def is_valid_identifier(value):
    return bool(THIRTEEN_DIGITS.match(value or ""))


def sanitize_decimal(raw, field="value", minimum=0, maximum=MONEY_MAX, allow_null=True):
    """
    Parse a money-like value into a ``Decimal`` with two decimal places.

    Commas, whitespace and the baht sign are ignored. Raises ``ValueError``
    (naming ``field``) on garbage or out-of-range input.
    """
    if raw is None or raw == "":
        if allow_null:
            return None
        raise ValueError(f"{field} is required")

    cleaned = NUMBER_NOISE.sub("", str(raw))
    try:
        number = Decimal(cleaned)
    except InvalidOperation as exc:
        raise ValueError(f"{field} is not a valid number") from exc
    if not number.is_finite():
        raise ValueError(f"{field} is not a valid number")

    low, high = Decimal(str(minimum)), Decimal(str(maximum))
    # quantize overflows the decimal context on very large inputs
    if number < low - 1 or number > high + 1:
        raise NumberOutOfRange(f"{field} out of allowed range")
    rounded = number.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    if rounded < low or rounded > high:
        raise NumberOutOfRange(f"{field} out of allowed range")
    return rounded


def sanitize_percent(raw, field="percent", allow_null=True):
    return sanitize_decimal(raw, field=field, minimum=0, maximum=100, allow_null=allow_null)


def sanitize_numbers(data, money_fields, percent_fields):
    """Sanitize several fields at once; any failure becomes a 400."""
    values = {}
    try:
        for field in money_fields:
            values[field] = sanitize_decimal(data.get(field), field=field)
        for field in percent_fields:
            values[field] = sanitize_percent(data.get(field), field=field)
    except ValueError as exc:
        raise ValidationFailed(INVALID_NUMBER_MESSAGE, details=str(exc)) from exc
    return values


def parse_int(raw):
    if raw is None or raw == "":
        return None
    try:
        return int(str(raw).replace(",", "").strip())
    except ValueError as exc:
        raise ValidationFailed(INVALID_NUMBER_MESSAGE, details=f"{raw!r} is not an integer") from exc


def parse_json_value(raw, default=None):
    """Decode a JSON-encoded form value; non-strings pass through untouched."""
    if raw is None or raw == "":
        return default
    if not isinstance(raw, str):
        return raw
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


def ensure_list(raw):
    """Always return a list: decoded JSON arrays, single values wrapped."""
    value = parse_json_value(raw, default=[])
    if value in (None, ""):
        return []
    if isinstance(value, list):
        return value
    return [value]


def text(value):
    if value is None:
        return ""
    return str(value).strip()
