"""Currency metadata and GBP based price conversion.

Catalog prices are stored in GBP. ``CURRENCY_RATES`` holds, per currency,
the rate that converts *from* that currency *to* GBP, so a customer price is
``gbp_price / rate``.
"""
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Mapping, Optional, Union

BASE_CURRENCY = "GBP"

Number = Union[int, float, Decimal]


@dataclass(frozen=True)
class CurrencyInfo:
    code: str
    symbol: str
    name: str
    decimals: int


CURRENCY_INFO = {
    "USD": CurrencyInfo("USD", "$", "US Dollar", 2),
    "GBP": CurrencyInfo("GBP", "£", "British Pound", 2),
    "EUR": CurrencyInfo("EUR", "€", "Euro", 2),
    "CAD": CurrencyInfo("CAD", "C$", "Canadian Dollar", 2),
    "AUD": CurrencyInfo("AUD", "A$", "Australian Dollar", 2),
    "JPY": CurrencyInfo("JPY", "¥", "Japanese Yen", 0),
    "NGN": CurrencyInfo("NGN", "₦", "Nigerian Naira", 2),
    "ZAR": CurrencyInfo("ZAR", "R", "South African Rand", 2),
}


def currency_info(code: Optional[str]) -> CurrencyInfo:
    return CURRENCY_INFO.get((code or BASE_CURRENCY).upper(), CURRENCY_INFO[BASE_CURRENCY])


def is_supported(code: Optional[str]) -> bool:
    return bool(code) and code.upper() in CURRENCY_INFO


def exchange_rate(code: str, rates: Mapping[str, Number]) -> Optional[Decimal]:
    raw = rates.get(code.upper()) if rates else None
    if raw in (None, "", 0):
        return None
    rate = Decimal(str(raw))
    return rate if rate > 0 else None


def convert_price(amount: Number, currency: str, rates: Mapping[str, Number]) -> Decimal:
    """Convert a GBP amount into ``currency``; GBP or an unknown rate returns it unchanged."""
    value = Decimal(str(amount))
    if (currency or BASE_CURRENCY).upper() == BASE_CURRENCY:
        return value
    rate = exchange_rate(currency, rates)
    if rate is None:
        return value
    return value / rate


def quantize(amount: Number, currency: str) -> Decimal:
    places = currency_info(currency).decimals
    exponent = Decimal(1).scaleb(-places)
    return Decimal(str(amount)).quantize(exponent, rounding=ROUND_HALF_UP)


def to_minor_units(amount: Number, currency: str) -> int:
    """Amount in the smallest currency unit; zero-decimal currencies are not scaled."""
    info = currency_info(currency)
    scaled = Decimal(str(amount)).scaleb(info.decimals)
    return int(scaled.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def from_minor_units(amount: int, currency: str) -> Decimal:
    return Decimal(amount).scaleb(-currency_info(currency).decimals)


def format_price(amount: Number, currency: str = BASE_CURRENCY) -> str:
    info = currency_info(currency)
    return f"{info.symbol}{quantize(amount, info.code):,.{info.decimals}f}"
