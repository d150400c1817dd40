from dataclasses import dataclass
from datetime import date
from decimal import Decimal, ROUND_HALF_UP

from app.core.config import settings

CENT = Decimal("0.01")


@dataclass(frozen=True)
class PriceBreakdown:
    unit_price: Decimal
    days: int
    subtotal: Decimal
    service_fee: Decimal
    taxes: Decimal
    total: Decimal


def _money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def count_nights(check_in: date, check_out: date) -> int:
    return (check_out - check_in).days


def compute_price_breakdown(unit_price: Decimal, days: int,
                            service_fee_rate: Decimal | None = None,
                            tax_rate: Decimal | None = None) -> PriceBreakdown:
    """Price is per night; the guest count does not change it.

    Fee and taxes are rounded individually so the total is their exact sum.
    """
    if days < 1:
        raise ValueError("days must be >= 1")
    fee_rate = Decimal(settings.SERVICE_FEE_RATE) if service_fee_rate is None else service_fee_rate
    tax = Decimal(settings.TAX_RATE) if tax_rate is None else tax_rate

    unit = _money(Decimal(unit_price))
    subtotal = _money(unit * days)
    service_fee = _money(subtotal * fee_rate)
    taxes = _money(subtotal * tax)
    return PriceBreakdown(
        unit_price=unit,
        days=days,
        subtotal=subtotal,
        service_fee=service_fee,
        taxes=taxes,
        total=subtotal + service_fee + taxes,
    )
