from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional


@dataclass(frozen=True)
class ShippingRate:
    id: str
    name: str
    description: str
    price: Decimal  # GBP
    estimated_days: str


UK_RATES = (
    ShippingRate("standard-uk", "Standard Shipping", "2-3 business days", Decimal("5.00"), "2-3 business days"),
    ShippingRate("express-uk", "Express Shipping", "Next business day", Decimal("10.00"), "1 business day"),
)

EU_RATES = (
    ShippingRate("standard-eu", "Standard International", "5-7 business days", Decimal("15.00"), "5-7 business days"),
    ShippingRate("express-eu", "Express International", "3-5 business days", Decimal("25.00"), "3-5 business days"),
)

INTERNATIONAL_RATES = (
    ShippingRate(
        "standard-international",
        "Standard International",
        "7-14 business days",
        Decimal("20.00"),
        "7-14 business days",
    ),
    ShippingRate(
        "express-international",
        "Express International",
        "5-10 business days",
        Decimal("35.00"),
        "5-10 business days",
    ),
)

UK_CODES = frozenset({"GB", "UK"})

EU_COUNTRIES = frozenset(
    {
        "AT", "BE", "BG", "HR", "CY", "CZ", "DK", "EE", "FI", "FR", "DE", "GR", "HU", "IE",
        "IT", "LV", "LT", "LU", "MT", "NL", "PL", "PT", "RO", "SK", "SI", "ES", "SE",
    }
)


def shipping_rates(country: str) -> List[ShippingRate]:
    code = (country or "").strip().upper()
    if code in UK_CODES:
        return list(UK_RATES)
    if code in EU_COUNTRIES:
        return list(EU_RATES)
    return list(INTERNATIONAL_RATES)


def shipping_rate_by_id(rate_id: str, country: str) -> Optional[ShippingRate]:
    for rate in shipping_rates(country):
        if rate.id == rate_id:
            return rate
    return None
