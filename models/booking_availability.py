"""
Billboard availability checking.
Detects overlapping bookings per billboard, or per slot on digital billboards.
"""

from database import get_db
from utils.messages import get_message
from utils.validators import parse_date, parse_date_range, parse_optional_int
from .billboard import get_billboard_by_id
from .booking_state import RELEASING_STATUSES
from .errors import NotFoundError, ValidationError

# 'auto': slot-level on digital billboards when a slot is given, otherwise
#         every overlapping booking on the billboard conflicts.
# 'billboard': ignore slots, any overlapping booking conflicts.
# 'slot': slot-level; digital billboards require a slot number.
AVAILABILITY_SCOPES = ('auto', 'billboard', 'slot')


# =============================================================================
# SINGLE BILLBOARD CHECK
# =============================================================================

def check_availability(
    billboard_id: int,
    start_date,
    end_date,
    slot_number: int = None,
    exclude_booking_id: int = None,
    scope: str = 'auto',
    cursor=None
) -> dict:
    """
    Check whether a billboard (or one digital slot) is free over a date range.

    Both ranges are inclusive calendar dates; bookings that touch on the same
    day conflict. Cancelled bookings never conflict.

    Args:
        billboard_id: Billboard to check
        start_date: First day requested (date or YYYY-MM-DD)
        end_date: Last day requested (date or YYYY-MM-DD)
        slot_number: Digital slot to check (ignored for static billboards)
        exclude_booking_id: Booking to leave out (re-validating its own dates)
        scope: 'auto', 'billboard' or 'slot'
        cursor: Active transaction cursor (optional)

    Returns:
        dict: {
            'available': bool,
            'conflicts': [
                {'id': int, 'reference_code': str, 'start_date': str,
                 'end_date': str, 'slot_number': int or None, 'status': str}
            ]
        }

    Raises:
        NotFoundError: If the billboard does not exist
        ValidationError: If dates, slot or scope are malformed
    """
    if scope not in AVAILABILITY_SCOPES:
        raise ValidationError(get_message('invalid_scope', scopes=', '.join(AVAILABILITY_SCOPES)))

    start, end = parse_date_range(start_date, end_date)
    slot_number = parse_optional_int(slot_number, 'slot_number')

    cur = cursor or get_db().cursor()

    billboard = get_billboard_by_id(billboard_id, cursor=cur)
    if not billboard:
        raise NotFoundError(get_message('billboard_not_found'))

    # Overlap: existing.start <= requested.end AND existing.end >= requested.start
    query = '''
        SELECT id, reference_code, start_date, end_date, slot_number, status
        FROM bookings
        WHERE billboard_id = ?
          AND start_date <= ?
          AND end_date >= ?
    '''
    params = [billboard_id, end.isoformat(), start.isoformat()]

    placeholders = ','.join('?' * len(RELEASING_STATUSES))
    query += f' AND status NOT IN ({placeholders})'
    params.extend(RELEASING_STATUSES)

    if exclude_booking_id:
        query += ' AND id != ?'
        params.append(exclude_booking_id)

    if billboard['type'] == 'digital' and scope != 'billboard':
        if slot_number is not None:
            query += ' AND slot_number = ?'
            params.append(slot_number)
        elif scope == 'slot':
            raise ValidationError(get_message('slot_required'))

    query += ' ORDER BY start_date, reference_code'

    cur.execute(query, params)
    conflicts = [dict(row) for row in cur.fetchall()]

    return {
        'available': len(conflicts) == 0,
        'conflicts': conflicts
    }


def conflict_codes(availability: dict) -> list:
    """Reference codes of the conflicts in a check_availability result."""
    return [c['reference_code'] for c in availability['conflicts']]


# =============================================================================
# CALENDAR / RANGE QUERIES
# =============================================================================

def get_calendar_bookings(billboard_id: int, year: int, month: int) -> list:
    """
    Get bookings on a billboard that overlap a calendar month.

    Args:
        billboard_id: Billboard ID
        year: Calendar year
        month: Month number (1-12)

    Returns:
        list: Booking dicts with customer_name, ordered by start_date
    """
    if not 1 <= month <= 12:
        raise ValidationError('month must be between 1 and 12')

    month_start = parse_date(f'{year:04d}-{month:02d}-01', 'month')
    if month == 12:
        next_month = month_start.replace(year=year + 1, month=1)
    else:
        next_month = month_start.replace(month=month + 1)

    db = get_db()
    cursor = db.cursor()
    cursor.execute('''
        SELECT b.id, b.reference_code, b.start_date, b.end_date, b.actual_end_date,
               b.slot_number, b.status, c.name as customer_name
        FROM bookings b
        LEFT JOIN customers c ON b.customer_id = c.id
        WHERE b.billboard_id = ?
          AND b.start_date < ?
          AND b.end_date >= ?
        ORDER BY b.start_date
    ''', (billboard_id, next_month.isoformat(), month_start.isoformat()))
    return [dict(row) for row in cursor.fetchall()]


def get_bookings_for_date_range(start_date, end_date, billboard_ids: list = None) -> list:
    """
    Get all bookings overlapping a date range, optionally for some billboards.

    Args:
        start_date: Range start (inclusive)
        end_date: Range end (inclusive)
        billboard_ids: Restrict to these billboards (optional)

    Returns:
        list: Booking dicts with customer and billboard names
    """
    start, end = parse_date_range(start_date, end_date)

    db = get_db()
    cursor = db.cursor()

    query = '''
        SELECT b.id, b.reference_code, b.billboard_id, b.start_date, b.end_date,
               b.slot_number, b.status,
               c.name as customer_name,
               bb.name as billboard_name, bb.code as billboard_code,
               bb.type as billboard_type
        FROM bookings b
        LEFT JOIN customers c ON b.customer_id = c.id
        LEFT JOIN billboards bb ON b.billboard_id = bb.id
        WHERE b.start_date <= ?
          AND b.end_date >= ?
    '''
    params = [end.isoformat(), start.isoformat()]

    if billboard_ids:
        placeholders = ','.join('?' * len(billboard_ids))
        query += f' AND b.billboard_id IN ({placeholders})'
        params.extend(billboard_ids)

    query += ' ORDER BY b.start_date'

    cursor.execute(query, params)
    return [dict(row) for row in cursor.fetchall()]
