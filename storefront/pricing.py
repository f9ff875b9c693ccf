"""
Order and cart totals.

    item total = (price - price * discount% / 100) * quantity
    subtotal   = sum of item totals
    tax        = round2(subtotal * TAX_RATE)
    shipping   = round2(BASE_SHIPPING_RATE + total weight * WEIGHT_SURCHARGE)
    total      = subtotal + tax + shipping   (not rounded)

Weight is counted once per line, not per unit. The raw total is the value
anything downstream (revenue sums, payments) should use; the formatted
strings are for display only.
"""

from .config import BASE_SHIPPING_RATE, DEFAULT_ITEM_WEIGHT, TAX_RATE, WEIGHT_SURCHARGE
from .helpers import format_price, round_to_decimals
from .models import OrderTotals


def apply_discount(price, discount_percent=None):
    if not discount_percent:
        return price
    return price - (price * discount_percent) / 100


def calculate_item_total(item):
    price = item.price or 0
    quantity = item.quantity or 1
    return apply_discount(price, getattr(item, 'discount_percent', None)) * quantity


def calculate_subtotal(items):
    return sum((calculate_item_total(item) for item in items), 0.0)


def calculate_tax(subtotal):
    return round_to_decimals(subtotal * TAX_RATE, 2)


def calculate_total_weight(items):
    total = 0.0
    for item in items:
        weight = getattr(item, 'weight', None)
        total += weight if weight else DEFAULT_ITEM_WEIGHT
    return total


def calculate_shipping_cost(items):
    weight = calculate_total_weight(items)
    return round_to_decimals(BASE_SHIPPING_RATE + weight * WEIGHT_SURCHARGE, 2)


def calculate_totals(items) -> OrderTotals:
    """Totals for a list of line items (OrderItem or anything shaped like it)."""
    subtotal = calculate_subtotal(items)
    tax = calculate_tax(subtotal)
    shipping = calculate_shipping_cost(items)
    total = subtotal + tax + shipping
    return OrderTotals(
        subtotal=format_price(subtotal),
        tax=format_price(tax),
        shipping=format_price(shipping),
        total=format_price(total),
        raw_total=total,
    )
