from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from rest_framework.exceptions import ValidationError

CENT = Decimal('0.01')


def to_decimal(value, field='price', default=Decimal('0')):
    """Parse a submitted amount; blank means ``default``."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return default
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError(f"Invalid {field}: {value}")
    if not amount.is_finite():
        raise ValidationError(f"Invalid {field}: {value}")
    return amount


def compute_final_price(base_price, markup_percentage):
    """Customer price: base plus ``markup_percentage`` percent of base."""
    base = Decimal(base_price or 0)
    markup = Decimal(markup_percentage or 0)
    if not markup:
        return base.quantize(CENT, rounding=ROUND_HALF_UP)
    return (base + base * markup / Decimal(100)).quantize(CENT, rounding=ROUND_HALF_UP)


def markup_amount(base_price, markup_percentage):
    base = Decimal(base_price or 0)
    return (base * Decimal(markup_percentage or 0) / Decimal(100)).quantize(CENT, rounding=ROUND_HALF_UP)


def format_inr(amount):
    """``12345.5`` -> ``₹12,345.50``; whole amounts drop the paise."""
    value = Decimal(amount or 0).quantize(CENT, rounding=ROUND_HALF_UP)
    if value == value.to_integral_value():
        return f"₹{value:,.0f}"
    return f"₹{value:,.2f}"
