from decimal import Decimal

from src.services.financials import Financials, aggregate, to_money


def test_to_money_rounds_half_up():
    assert to_money("10.005") == Decimal("10.01")
    assert to_money(2.675) == Decimal("2.68")
    assert to_money(None) == Decimal("0.00")


def test_total_from_subtotals_without_overrides():
    result = aggregate(labor_subtotal=Decimal("200"), parts_subtotal=Decimal("170"), overrides={})
    assert result.labor_cost == Decimal("200.00")
    assert result.parts_cost == Decimal("170.00")
    assert result.total_cost == Decimal("370.00")


def test_overrides_replace_subtotals_and_none_counts_as_absent():
    result = aggregate(
        labor_subtotal=Decimal("200"),
        parts_subtotal=Decimal("170"),
        overrides={"labor_cost": Decimal("150"), "parts_cost": None, "taxes": "12.50", "discount": 20, "parking_charge": 5},
    )
    assert result.labor_cost == Decimal("150.00")
    assert result.parts_cost == Decimal("170.00")
    assert result.total_cost == Decimal("317.50")


def test_update_keeps_previous_taxes_discount_and_parking():
    previous = Financials(
        labor_cost=Decimal("100.00"), parts_cost=Decimal("50.00"), taxes=Decimal("10.00"),
        discount=Decimal("5.00"), parking_charge=Decimal("2.00"), total_cost=Decimal("157.00"),
    )
    result = aggregate(labor_subtotal=Decimal("80"), parts_subtotal=Decimal("50"), overrides={}, previous=previous)
    assert (result.taxes, result.discount, result.parking_charge) == (Decimal("10.00"), Decimal("5.00"), Decimal("2.00"))
    assert result.total_cost == Decimal("137.00")


def test_total_equals_sum_of_rounded_components():
    result = aggregate(
        labor_subtotal=Decimal("0.005"),
        parts_subtotal=Decimal("0.005"),
        overrides={"taxes": Decimal("0.005")},
    )
    components = result.labor_cost + result.parts_cost + result.taxes + result.parking_charge - result.discount
    assert result.total_cost == components == Decimal("0.03")
