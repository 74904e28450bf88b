"""
Billboard inventory data access.
Handles billboard creation and lookups used by availability checks.
"""

from database import get_db
from utils.helpers import format_money
from .errors import ValidationError


BILLBOARD_TYPES = ('static', 'digital')
BILLBOARD_STATUSES = ('active', 'inactive', 'maintenance')
MAX_SLOT_COUNT = 20


def create_billboard(code: str, name: str, billboard_type: str = 'static',
                     rate_per_day='0', slot_count: int = None,
                     status: str = 'active', address: str = None) -> int:
    """
    Create new billboard.

    Args:
        code: Unique inventory code
        name: Display name
        billboard_type: 'static' or 'digital'
        rate_per_day: Daily rate (decimal)
        slot_count: Number of loop slots (digital only, 1..20)
        status: 'active', 'inactive' or 'maintenance'
        address: Site address

    Returns:
        New billboard ID

    Raises:
        ValidationError: If type/status/slot rules are violated
    """
    if not code or not name:
        raise ValidationError('Billboard code and name are required')
    if billboard_type not in BILLBOARD_TYPES:
        raise ValidationError(f"Invalid billboard type. Must be one of: {', '.join(BILLBOARD_TYPES)}")
    if status not in BILLBOARD_STATUSES:
        raise ValidationError(f"Invalid billboard status. Must be one of: {', '.join(BILLBOARD_STATUSES)}")

    if billboard_type == 'digital':
        if not isinstance(slot_count, int) or not 1 <= slot_count <= MAX_SLOT_COUNT:
            raise ValidationError(f'Digital billboards need a slot_count between 1 and {MAX_SLOT_COUNT}')
    else:
        # Static faces have no slot concept
        slot_count = None

    db = get_db()
    cursor = db.cursor()
    cursor.execute('''
        INSERT INTO billboards (code, name, type, status, slot_count, rate_per_day, address)
        VALUES (?, ?, ?, ?, ?, ?, ?)
    ''', (code, name, billboard_type, status, slot_count,
          format_money(rate_per_day), address))
    db.commit()
    return cursor.lastrowid


def get_billboard_by_id(billboard_id: int, cursor=None) -> dict:
    """
    Get billboard by ID.

    Args:
        billboard_id: Billboard ID
        cursor: Active transaction cursor (optional)

    Returns:
        Billboard dict or None if not found
    """
    cur = cursor or get_db().cursor()
    cur.execute('SELECT * FROM billboards WHERE id = ?', (billboard_id,))
    row = cur.fetchone()
    return dict(row) if row else None


def get_billboards_by_ids(billboard_ids: list, cursor=None) -> dict:
    """
    Batch lookup of billboards.

    Returns:
        dict: {billboard_id: billboard dict} for the ids that exist
    """
    ids = list(dict.fromkeys(billboard_ids))
    if not ids:
        return {}

    cur = cursor or get_db().cursor()
    placeholders = ','.join('?' * len(ids))
    cur.execute(f'SELECT * FROM billboards WHERE id IN ({placeholders})', ids)
    return {row['id']: dict(row) for row in cur.fetchall()}


def get_all_billboards(status: str = None, billboard_type: str = None) -> list:
    """
    Get billboards, optionally filtered.

    Args:
        status: Filter by status
        billboard_type: Filter by type

    Returns:
        List of billboard dicts ordered by name
    """
    db = get_db()
    cursor = db.cursor()

    query = 'SELECT * FROM billboards WHERE 1=1'
    params = []

    if status:
        query += ' AND status = ?'
        params.append(status)

    if billboard_type:
        query += ' AND type = ?'
        params.append(billboard_type)

    query += ' ORDER BY name, id'
    cursor.execute(query, params)
    return [dict(row) for row in cursor.fetchall()]


def get_active_billboards() -> list:
    """Get billboards with status 'active'."""
    return get_all_billboards(status='active')
