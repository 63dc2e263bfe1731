"""
Shared money parsing utilities.

Receipt totals are written in US-style grouping:
- 1,234.56
- 1234.5
- $ 42.50
Grouping commas are stripped before the value is parsed.
"""

from decimal import Decimal, InvalidOperation
from typing import Optional
import logging
import re

logger = logging.getLogger(__name__)

# Symbol -> ISO code. ¥ is reported as JPY.
CURRENCY_SYMBOLS = {
    '$': 'USD',
    '₱': 'PHP',
    '€': 'EUR',
    '£': 'GBP',
    '¥': 'JPY',
    '₩': 'KRW',
    '₹': 'INR',
}

CURRENCY_SYMBOL_CLASS = '[' + re.escape(''.join(CURRENCY_SYMBOLS)) + ']'

# Digits with optional thousands separators and up to two decimals; a number
# running on past that shape ("42.505", "1,2345") is not matched at all
MONEY_NUMBER = r'(?:\d{1,3}(?:,\d{3})+|\d+)(?:\.\d{1,2})?(?![\d,.]?\d)'


def parse_money(amount_str: str) -> Optional[Decimal]:
    """
    Parse a money token into a Decimal.

    Args:
        amount_str: Matched numeric token, possibly with a currency symbol

    Returns:
        Decimal amount or None if the token is not a finite number

    Examples:
        >>> parse_money("$1,234.56")
        Decimal('1234.56')
        >>> parse_money("abc") is None
        True
    """
    if not amount_str or not isinstance(amount_str, str):
        return None

    cleaned = re.sub(CURRENCY_SYMBOL_CLASS, '', amount_str)
    cleaned = cleaned.replace(',', '').replace(' ', '').strip()

    if not cleaned:
        return None

    try:
        value = Decimal(cleaned)
    except InvalidOperation:
        logger.debug("Discarding malformed money token %r", amount_str)
        return None

    if not value.is_finite():
        return None

    return value


def currency_code(symbol: str) -> Optional[str]:
    """Map a currency symbol to its ISO code."""
    return CURRENCY_SYMBOLS.get(symbol)
