"""
Input validation helper functions.
Provides validation and parsing for dates, slots and required fields.
"""

from datetime import date, datetime

from models.errors import ValidationError, InvalidStateError


def validate_date_format(date_str: str) -> bool:
    """
    Validate date is in YYYY-MM-DD format.

    Args:
        date_str: Date string to validate

    Returns:
        True if valid format
    """
    try:
        datetime.strptime(date_str, '%Y-%m-%d')
        return True
    except (ValueError, TypeError):
        return False


def parse_date(value, field: str) -> date:
    """
    Parse a calendar date from a date object or YYYY-MM-DD string.

    Args:
        value: date, datetime or ISO string
        field: Field name used in the error message

    Returns:
        date: Parsed calendar date

    Raises:
        ValidationError: If missing or malformed
    """
    if value is None or value == '':
        raise ValidationError(f'{field} is required')
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not validate_date_format(value):
        raise ValidationError(f'{field} must be a date in YYYY-MM-DD format')
    return date.fromisoformat(value)


def parse_date_range(start_value, end_value,
                     start_field: str = 'start_date',
                     end_field: str = 'end_date') -> tuple:
    """
    Parse and order-check a date range.

    Returns:
        tuple: (start, end) as date objects

    Raises:
        ValidationError: If either date is missing or malformed
        InvalidStateError: If end is before start
    """
    start = parse_date(start_value, start_field)
    end = parse_date(end_value, end_field)
    if end < start:
        raise InvalidStateError(f'{end_field} cannot be before {start_field}')
    return start, end


def parse_optional_int(value, field: str):
    """
    Parse an optional integer (slot numbers, ids from query strings).

    Returns:
        int or None

    Raises:
        ValidationError: If present but not an integer
    """
    if value is None or value == '':
        return None
    if isinstance(value, bool):
        raise ValidationError(f'{field} must be an integer')
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f'{field} must be an integer')


def require_fields(data: dict, fields: list) -> None:
    """
    Ensure every listed key is present and non-empty.

    Raises:
        ValidationError: Naming the missing fields
    """
    missing = [f for f in fields if data.get(f) in (None, '', [])]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")


def sanitize_input(text: str, max_length: int = None) -> str:
    """
    Sanitize text input by trimming and limiting length.

    Args:
        text: Text to sanitize
        max_length: Maximum length (optional)

    Returns:
        Sanitized text
    """
    if not text:
        return ''

    # Strip whitespace
    sanitized = text.strip()

    # Limit length if specified
    if max_length and len(sanitized) > max_length:
        sanitized = sanitized[:max_length]

    return sanitized
