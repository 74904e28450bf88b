"""
Reference code generation.
Year-scoped, prefixed sequential codes such as BK-2024-0007.
"""

from database import get_db
from utils.datetime_helpers import get_today
from .errors import ValidationError


SEQUENCE_PREFIXES = {
    'booking': 'BK',
    'campaign': 'CP',
    'po': 'PO',
    'invoice': 'INV',
}


def format_reference_code(entity_type: str, year: int, value: int) -> str:
    """Format PREFIX-YYYY-NNNN (zero padded to 4, longer once past 9999)."""
    return f'{SEQUENCE_PREFIXES[entity_type]}-{year}-{value:04d}'


def next_sequence(entity_type: str, cursor=None) -> str:
    """
    Issue the next reference code for an entity type.

    The counter row for (entity_type, year) is upserted and read back on the
    same cursor, so inside a caller's transaction the increment commits or
    rolls back with the rows that use the code.

    Args:
        entity_type: 'booking', 'campaign', 'po' or 'invoice'
        cursor: Active transaction cursor (optional)

    Returns:
        str: Reference code, e.g. 'BK-2024-0001'

    Raises:
        ValidationError: If entity_type is unknown
    """
    if entity_type not in SEQUENCE_PREFIXES:
        raise ValidationError(f'Unknown sequence entity type: {entity_type}')

    year = get_today().year
    db = get_db()
    owns_transaction = cursor is None and not db.in_transaction
    cur = cursor or db.cursor()

    cur.execute('''
        INSERT INTO sequences (entity_type, year, current_value)
        VALUES (?, ?, 1)
        ON CONFLICT (entity_type, year)
        DO UPDATE SET current_value = current_value + 1
    ''', (entity_type, year))

    cur.execute('''
        SELECT current_value FROM sequences
        WHERE entity_type = ? AND year = ?
    ''', (entity_type, year))
    value = cur.fetchone()['current_value']

    if owns_transaction:
        db.commit()

    return format_reference_code(entity_type, year, value)


def get_current_sequence(entity_type: str) -> int:
    """
    Get the last issued counter value for this year.

    Returns:
        int: Current value, 0 if nothing issued yet this year
    """
    if entity_type not in SEQUENCE_PREFIXES:
        raise ValidationError(f'Unknown sequence entity type: {entity_type}')

    db = get_db()
    cursor = db.cursor()
    cursor.execute('''
        SELECT current_value FROM sequences
        WHERE entity_type = ? AND year = ?
    ''', (entity_type, get_today().year))
    row = cursor.fetchone()
    return row['current_value'] if row else 0
