"""
Foreign exchange service for currency conversion and display.

Rates come from a fixed table; conversion accuracy is not a goal of the
engine. Unknown pairs convert 1:1.
"""
import logging
from typing import Dict, Optional
from splitsync.core.numeric import safe

logger = logging.getLogger(__name__)

# 1 unit of the outer currency = rate units of the inner currency
CONVERSION_RATES: Dict[str, Dict[str, float]] = {
    "USD": {"EUR": 0.85, "GBP": 0.73, "CAD": 1.25, "AUD": 1.35},
    "EUR": {"USD": 1.18, "GBP": 0.86, "CAD": 1.47, "AUD": 1.59},
    "GBP": {"USD": 1.37, "EUR": 1.16, "CAD": 1.71, "AUD": 1.85},
}

CURRENCY_SYMBOLS: Dict[str, str] = {
    "USD": "$",
    "CAD": "CA$",
    "AUD": "A$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
    "KRW": "₩",
}


def get_exchange_rate(source_currency: str, target_currency: str) -> Optional[float]:
    """Rate from source to target, or None if the pair is not in the table."""
    source = source_currency.upper()
    target = target_currency.upper()
    if source == target:
        return 1.0
    return CONVERSION_RATES.get(source, {}).get(target)


def convert_amount(amount: float, source_currency: str, target_currency: str) -> float:
    """
    Convert amount between currencies using the stub table.

    Args:
        amount: Amount in the source currency
        source_currency: Source currency code
        target_currency: Target currency code

    Returns:
        Amount in target currency (unchanged when the pair is unknown)
    """
    amount = safe(amount, "fx_service.convert_amount")
    rate = get_exchange_rate(source_currency, target_currency)
    if rate is None:
        logger.debug(f"No stub rate for {source_currency}->{target_currency}, returning amount unchanged")
        return amount
    return safe(amount * rate, "fx_service.convert_amount.rate")


def format_currency(amount: float, currency: str = "USD") -> str:
    """Format amount with two decimals and the currency symbol; non-finite shows as zero."""
    amount = safe(amount, "fx_service.format_currency")
    code = (currency or "USD").upper()
    sign = "-" if amount < 0 else ""
    symbol = CURRENCY_SYMBOLS.get(code)
    if symbol is None:
        return f"{sign}{code} {abs(amount):,.2f}"
    return f"{sign}{symbol}{abs(amount):,.2f}"
