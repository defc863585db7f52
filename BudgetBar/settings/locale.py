"""
Module for formatting and parsing amounts held in minor currency units using Babel.

"""
import logging
from decimal import Decimal, InvalidOperation
from typing import Optional

from babel import Locale, UnknownLocaleError, numbers
from babel.dates import format_date

DEFAULT_LOCALE: str = 'pl_PL'
DEFAULT_CURRENCY: str = 'PLN'
DECIMAL_PLACES: int = 2


def _current_locale() -> str:
    from . import lib
    try:
        return lib.get_settings()['locale'] or DEFAULT_LOCALE
    except Exception as ex:
        logging.debug(f'Falling back to default locale: {ex}')
        return DEFAULT_LOCALE


def _current_currency() -> str:
    from . import lib
    try:
        return lib.get_settings()['currency'] or DEFAULT_CURRENCY
    except Exception as ex:
        logging.debug(f'Falling back to default currency: {ex}')
        return DEFAULT_CURRENCY


def minor_to_major(minor_units: int, decimal_places: int = DECIMAL_PLACES) -> Decimal:
    """
    Convert an integer amount in minor units (e.g. grosz, cents) to a Decimal in major units.

    Args:
        minor_units (int): The amount in minor units.
        decimal_places (int): Number of minor-unit digits.

    Returns:
        Decimal: The amount in major units.
    """
    return Decimal(minor_units).scaleb(-decimal_places)


def format_currency(minor_units: int, decimal_places: int = DECIMAL_PLACES,
                    locale: Optional[str] = None, currency: Optional[str] = None) -> str:
    """
    Format an amount held in minor units as a localized currency string.

    Args:
        minor_units (int): The amount in minor units.
        decimal_places (int): Number of minor-unit digits.
        locale (str, optional): Locale string, e.g. 'pl_PL'. Defaults to the configured locale.
        currency (str, optional): Currency code, e.g. 'PLN'. Defaults to the configured currency.

    Returns:
        str: The formatted currency string.
    """
    locale = locale or _current_locale()
    currency = currency or _current_currency()
    value = minor_to_major(minor_units, decimal_places)
    try:
        return numbers.format_currency(value, currency, locale=Locale.parse(locale))
    except (ValueError, TypeError, LookupError, UnknownLocaleError) as ex:
        logging.error(f'Error formatting currency: {ex}')
        return f'{value:.{decimal_places}f} {currency}'


def parse_currency_to_minor(value: str, decimal_places: int = DECIMAL_PLACES) -> int:
    """
    Parse user input in major units into an integer amount of minor units.

    Invalid input yields 0. Both '.' and ',' are accepted as the decimal separator.

    Args:
        value (str): The text entered by the user, e.g. '12.34'.
        decimal_places (int): Number of minor-unit digits.

    Returns:
        int: The amount in minor units, rounded half away from zero.
    """
    text = (value or '').strip().replace(' ', '').replace(' ', '').replace(',', '.')
    try:
        number = Decimal(text)
    except InvalidOperation:
        return 0
    if not number.is_finite():
        return 0
    scaled = number.scaleb(decimal_places)
    return int(scaled.to_integral_value(rounding='ROUND_HALF_UP'))


def format_transaction_date(value, locale: Optional[str] = None) -> str:
    """
    Format a transaction date using the locale's medium date format.

    Args:
        value (datetime.date): The date to format.
        locale (str, optional): Locale string. Defaults to the configured locale.

    Returns:
        str: The formatted date.
    """
    locale = locale or _current_locale()
    try:
        return format_date(value, format='medium', locale=Locale.parse(locale))
    except (ValueError, TypeError, LookupError, UnknownLocaleError) as ex:
        logging.error(f'Error formatting date: {ex}')
        return value.isoformat()
