"""
Miscellaneous utility helper functions.
Money handling and small formatting helpers shared by the models.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from models.errors import ValidationError

CENTS = Decimal('0.01')


def to_money(value, field: str = 'amount') -> Decimal:
    """
    Convert a stored or submitted amount to a 2-decimal Decimal.

    Args:
        value: str, int, float or Decimal
        field: Field name used in the error message

    Returns:
        Decimal quantized to cents

    Raises:
        ValidationError: If the value is not numeric
    """
    if value is None or value == '':
        return Decimal('0.00')
    if isinstance(value, bool):
        raise ValidationError(f'{field} must be a decimal amount')
    try:
        # str() first so floats keep their printed value
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(f'{field} must be a decimal amount')
    if not amount.is_finite():
        raise ValidationError(f'{field} must be a decimal amount')
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def format_money(value) -> str:
    """Format an amount as stored text (e.g. '5000.00')."""
    return f'{to_money(value):.2f}'


def append_note(existing: str, note: str) -> str:
    """Append a note paragraph, separated by a blank line."""
    if existing:
        return f'{existing}\n\n{note}'
    return note
