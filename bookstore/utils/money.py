from decimal import ROUND_HALF_UP, Decimal


def round_half_up(value: Decimal | int | float) -> int:
    """Round to the nearest whole currency unit, halves away from zero."""
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
