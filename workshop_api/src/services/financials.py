"""
Financial aggregation for work orders.

``total = labor + parts + taxes + parking - discount``, every component
rounded to cents (ROUND_HALF_UP) before the total is summed, so the stored
total always equals the sum of the stored components.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Mapping, Optional, Union

Number = Union[Decimal, int, float, str]

CENTS = Decimal("0.01")
ZERO = Decimal("0.00")

FINANCIAL_FIELDS = ("labor_cost", "parts_cost", "taxes", "discount", "parking_charge")


# PUBLIC_INTERFACE
def to_money(value: Optional[Number]) -> Decimal:
    """Round a monetary value to 2 decimals using standard (half-up) rounding."""
    if value is None:
        return ZERO
    if isinstance(value, float):
        value = repr(value)
    return Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class Financials:
    """Stored monetary columns of a work order."""
    labor_cost: Decimal = ZERO
    parts_cost: Decimal = ZERO
    taxes: Decimal = ZERO
    discount: Decimal = ZERO
    parking_charge: Decimal = ZERO
    total_cost: Decimal = ZERO

    @classmethod
    def from_work_order(cls, work_order: Any) -> "Financials":
        return cls(**{name: to_money(getattr(work_order, name)) for name in FINANCIAL_FIELDS + ("total_cost",)})

    def as_columns(self) -> dict:
        return asdict(self)


# PUBLIC_INTERFACE
def aggregate(
    *,
    labor_subtotal: Number,
    parts_subtotal: Number,
    overrides: Mapping[str, Optional[Number]],
    previous: Optional[Financials] = None,
) -> Financials:
    """
    Compute the financial columns of a work order.

    Parameters:
        labor_subtotal: services subtotal from reconciled line items (or the stored
            labor cost when line items were not replaced)
        parts_subtotal: parts subtotal, same rules as labor_subtotal
        overrides: explicit values supplied by the caller, keyed by column name;
            a key mapped to None counts as absent
        previous: stored values of an existing order; taxes, discount and parking
            fall back to these on update and to zero on create
    Returns:
        Financials with every component and the total rounded to cents.
    """
    def pick(name: str, fallback: Number) -> Decimal:
        value = overrides.get(name)
        return to_money(fallback if value is None else value)

    base = previous or Financials()
    labor = pick("labor_cost", labor_subtotal)
    parts = pick("parts_cost", parts_subtotal)
    taxes = pick("taxes", base.taxes)
    discount = pick("discount", base.discount)
    parking = pick("parking_charge", base.parking_charge)
    total = labor + parts + taxes + parking - discount
    return Financials(
        labor_cost=labor,
        parts_cost=parts,
        taxes=taxes,
        discount=discount,
        parking_charge=parking,
        total_cost=to_money(total),
    )
