"""Numeric helpers shared by the aggregators"""
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation

def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero (25.5 -> 26, -2.5 -> -3)"""
    try:
        return int(Decimal(str(value)).quantize(Decimal('1'), rounding=ROUND_HALF_UP))
    except (InvalidOperation, ValueError):
        return 0
