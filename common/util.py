"""Miscellaneous utility functions."""
from __future__ import annotations

import logging
import uuid
from datetime import date
from decimal import Decimal
from decimal import InvalidOperation
from typing import Optional

from dateutil.parser import ParserError
from dateutil.parser import parse as parse_date

logger = logging.getLogger(__name__)

XSD_TRUE_VALUES = ("true", "1")
XSD_FALSE_VALUES = ("false", "0")


def is_truthy(value: str) -> bool:
    """
    Check whether a string represents a True boolean value.

    :param value str: The value to check
    :rtype: bool
    """
    return str(value).lower() not in ("", "n", "no", "off", "f", "false", "0")


def blank_to_none(value: Optional[str]) -> Optional[str]:
    """Return None for missing or whitespace-only strings, otherwise the
    value unchanged."""
    if value is None or not value.strip():
        return None
    return value


def parse_nullable_decimal(
    value: Optional[str],
    max_digits: Optional[int] = None,
    decimal_places: Optional[int] = None,
) -> Optional[Decimal]:
    """
    Parse a decimal token, returning None if the token is missing or is not a
    finite number.

    When ``max_digits`` and ``decimal_places`` are given the value is rounded
    to ``decimal_places`` and None is returned if it has more integer digits
    than a column of that precision can hold.

    .. code:: python

        >>> parse_nullable_decimal("10.5")
        Decimal('10.5')
        >>> parse_nullable_decimal("ten") is None
        True
        >>> parse_nullable_decimal("0.12345678901", 28, 10)
        Decimal('0.1234567890')
    """
    if value is None:
        return None
    try:
        result = Decimal(value.strip())
    except InvalidOperation:
        return None
    if not result.is_finite():
        return None
    if max_digits is None or decimal_places is None:
        return result
    try:
        result = result.quantize(Decimal(1).scaleb(-decimal_places))
    except InvalidOperation:
        return None
    if result.adjusted() >= max_digits - decimal_places:
        return None
    return result


def parse_nullable_int(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value.strip())
    except ValueError:
        return None


def parse_nullable_bool(value: Optional[str]) -> Optional[bool]:
    """
    Parse a token using the XML Schema boolean lexicon.

    ``true``/``1`` are True and ``false``/``0`` are False, case-insensitively.
    Anything else is None.
    """
    if value is None:
        return None
    token = value.strip().lower()
    if token in XSD_TRUE_VALUES:
        return True
    if token in XSD_FALSE_VALUES:
        return False
    return None


def parse_nullable_uuid(value: Optional[str]) -> Optional[uuid.UUID]:
    if not value:
        return None
    try:
        return uuid.UUID(value.strip())
    except ValueError:
        return None


def parse_hl7_date(value: Optional[str]) -> Optional[date]:
    """
    Parse an HL7 v3 timestamp (``YYYYMMDD`` optionally followed by a time and
    a timezone offset) into a date.

    Only the date part is kept. Unparseable values are None.
    """
    if not value or len(value.strip()) < 8:
        return None
    try:
        return parse_date(value.strip()[:8]).date()
    except (ParserError, ValueError, OverflowError):
        logger.warning("Unable to parse HL7 timestamp %r", value)
        return None
