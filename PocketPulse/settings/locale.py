"""
Module for formatting decimal and currency values using Babel.

"""
import logging
from typing import List, Optional

from babel import Locale, UnknownLocaleError, numbers

DEFAULT_LOCALE: str = 'en_IN'
DEFAULT_SYMBOL: str = '₹'

CURRENCY_MAP: dict[str, str] = {
    'US': 'USD',
    'GB': 'GBP',
    'DE': 'EUR',
    'FR': 'EUR',
    'ES': 'EUR',
    'IT': 'EUR',
    'NL': 'EUR',
    'FI': 'EUR',
    'JP': 'JPY',
    'CA': 'CAD',
    'AU': 'AUD',
    'IN': 'INR',
    'BR': 'BRL',
    'CN': 'CNY',
    'HU': 'HUF',
    'MX': 'MXN',
    'ZA': 'ZAR',
}

LOCALE_MAP: List[str] = [
    'en_IN',
    'en_GB',
    'en_US',
    'en_AU',
    'en_CA',
    'en_ZA',
    'de_DE',
    'es_ES',
    'es_MX',
    'fi_FI',
    'fr_FR',
    'hu_HU',
    'it_IT',
    'ja_JP',
    'nl_NL',
    'pt_BR',
    'zh_CN',
]


def get_currency_from_locale(locale: str) -> str:
    """
    Retrieve the default currency code based on the locale's territory.

    Args:
        locale (str): Locale string, e.g. 'en_IN'.

    Returns:
        str: Currency code such as 'INR'. Defaults to 'INR' if the territory is unknown.
    """
    parts = (locale or '').split('_')
    if len(parts) < 2:
        return 'INR'
    return CURRENCY_MAP.get(parts[1], 'INR')


def format_fallback(value: float, symbol: str = DEFAULT_SYMBOL) -> str:
    """Format a value as the currency symbol followed by two decimals, e.g. '₹12.50'."""
    return f'{symbol}{float(value):.2f}'


def format_currency_value(
        value: float,
        locale: str = DEFAULT_LOCALE,
        currency: Optional[str] = None,
        symbol: str = DEFAULT_SYMBOL
) -> str:
    """
    Format a number as a currency string using the locale's conventions.

    When the locale or currency can't be resolved the value falls back to the
    fixed symbol-plus-two-decimals format.

    Args:
        value (float): The numeric value to be formatted.
        locale (str): Locale string, e.g. 'en_IN'.
        currency (str, optional): ISO currency code. Derived from the locale's territory if omitted.
        symbol (str): Symbol used by the fallback format.

    Returns:
        str: The formatted currency string.
    """
    try:
        currency_code = currency or get_currency_from_locale(locale)
        locale_obj = Locale.parse(locale)
        return numbers.format_currency(value, currency=currency_code, locale=locale_obj)
    except (UnknownLocaleError, ValueError, TypeError) as ex:
        logging.debug(f'Locale formatting unavailable for "{locale}": {ex}')
        return format_fallback(value, symbol)


def format_amount(value: float) -> str:
    """Format a number as currency using the configured locale, currency and fallback symbol."""
    from . import lib

    return format_currency_value(
        value,
        lib.settings['locale'] or DEFAULT_LOCALE,
        lib.settings['currency'] or None,
        lib.settings['fallback_symbol'] or DEFAULT_SYMBOL,
    )


def format_signed_amount(value: float, kind: str) -> str:
    """Format a transaction amount with a leading '+' for income and '-' for expense."""
    sign = '+' if kind == 'income' else '-'
    return f'{sign} {format_amount(value)}'
