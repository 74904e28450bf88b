"""
Purchase order data access and pro-rata settlement.
A purchase order settles exactly one booking at its actual display value.
"""

import logging

from database import get_db, transaction
from utils.datetime_helpers import inclusive_day_count
from utils.helpers import CENTS, format_money, to_money
from utils.messages import get_message
from utils.pagination import paginate_query
from utils.validators import parse_date, parse_date_range, parse_optional_int, require_fields
from .booking_state import PO_ELIGIBLE_STATUSES
from .errors import ConflictError, InvalidStateError, NotFoundError
from .sequence import next_sequence

logger = logging.getLogger(__name__)

PO_SORT_FIELDS = ('po_number', 'actual_start_date', 'actual_end_date', 'created_at')


# =============================================================================
# PRO-RATA
# =============================================================================

def _get_booking_with_rate(cursor, booking_id: int):
    cursor.execute('''
        SELECT b.id, b.reference_code, b.status, b.start_date, b.end_date,
               b.notional_value, bb.rate_per_day
        FROM bookings b
        JOIN billboards bb ON b.billboard_id = bb.id
        WHERE b.id = ?
    ''', (booking_id,))
    return cursor.fetchone()


def calculate_pro_rata(booking_id: int, actual_start_date, actual_end_date,
                       cursor=None) -> dict:
    """
    Compare a booking's notional value with its value over the actual period.

    Args:
        booking_id: Booking ID
        actual_start_date: First day actually displayed
        actual_end_date: Last day actually displayed
        cursor: Active transaction cursor (optional)

    Returns:
        dict: {
            'original_days': int,
            'actual_days': int,
            'rate_per_day': str,
            'notional_value': str,
            'actual_value': str,
            'adjustment': str,
            'adjustment_percentage': str or None (notional value of zero)
        }

    Raises:
        NotFoundError: If the booking or its billboard cannot be resolved
    """
    actual_start, actual_end = parse_date_range(
        actual_start_date, actual_end_date, 'actual_start_date', 'actual_end_date'
    )

    cur = cursor or get_db().cursor()
    booking = _get_booking_with_rate(cur, booking_id)
    if not booking:
        raise NotFoundError(get_message('booking_not_found'))

    original_days = inclusive_day_count(parse_date(booking['start_date'], 'start_date'),
                                        parse_date(booking['end_date'], 'end_date'))
    actual_days = inclusive_day_count(actual_start, actual_end)

    rate = to_money(booking['rate_per_day'])
    notional = to_money(booking['notional_value'])
    actual_value = rate * actual_days
    adjustment = actual_value - notional

    if notional:
        percentage = f'{(adjustment / notional * 100).quantize(CENTS):.2f}'
    else:
        percentage = None

    return {
        'original_days': original_days,
        'actual_days': actual_days,
        'rate_per_day': format_money(rate),
        'notional_value': format_money(notional),
        'actual_value': format_money(actual_value),
        'adjustment': format_money(adjustment),
        'adjustment_percentage': percentage,
    }


# =============================================================================
# CREATE
# =============================================================================

def create_purchase_order(data: dict, created_by: str = None) -> dict:
    """
    Generate the purchase order for a booking.

    The PO insert, the sequence increment and the booking's move to
    'po_generated' commit together.

    Args:
        data: booking_id, actual_start_date, actual_end_date and optionally
              actual_value, adjustment_notes
        created_by: User generating the PO

    Returns:
        dict: {'id', 'po_number', 'booking_id', 'actual_value'}

    Raises:
        ValidationError: Missing or malformed fields
        NotFoundError: Unknown booking
        ConflictError: Booking already has a PO
        InvalidStateError: Booking status not eligible, or bad date ordering
    """
    require_fields(data, ['booking_id', 'actual_start_date', 'actual_end_date'])
    booking_id = parse_optional_int(data['booking_id'], 'booking_id')
    actual_start, actual_end = parse_date_range(
        data['actual_start_date'], data['actual_end_date'],
        'actual_start_date', 'actual_end_date'
    )

    with transaction() as cursor:
        booking = _get_booking_with_rate(cursor, booking_id)
        if not booking:
            raise NotFoundError(get_message('booking_not_found'))

        cursor.execute('SELECT po_number FROM purchase_orders WHERE booking_id = ?', (booking_id,))
        existing = cursor.fetchone()
        if existing:
            raise ConflictError(get_message('po_exists'), conflicts=[existing['po_number']])

        if booking['status'] not in PO_ELIGIBLE_STATUSES:
            raise InvalidStateError(get_message('po_status', status=booking['status']))

        if data.get('actual_value') in (None, ''):
            pro_rata = calculate_pro_rata(booking_id, actual_start, actual_end, cursor=cursor)
            actual_value = pro_rata['actual_value']
        else:
            actual_value = format_money(to_money(data['actual_value'], 'actual_value'))

        po_number = next_sequence('po', cursor)

        cursor.execute('''
            INSERT INTO purchase_orders (
                po_number, booking_id, actual_start_date, actual_end_date,
                actual_value, adjustment_notes, created_by, updated_by
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        ''', (po_number, booking_id, actual_start.isoformat(), actual_end.isoformat(),
              actual_value, data.get('adjustment_notes'), created_by, created_by))
        po_id = cursor.lastrowid

        cursor.execute('''
            UPDATE bookings
            SET status = 'po_generated', updated_by = ?, updated_at = CURRENT_TIMESTAMP
            WHERE id = ?
        ''', (created_by, booking_id))

    logger.info('Purchase order %s created for booking %s (value %s)',
                po_number, booking['reference_code'], actual_value)

    return {
        'id': po_id,
        'po_number': po_number,
        'booking_id': booking_id,
        'actual_value': actual_value,
    }


# =============================================================================
# READ
# =============================================================================

_PO_DETAIL_QUERY = '''
    SELECT po.*,
           b.reference_code as booking_reference,
           b.status as booking_status,
           b.start_date as booking_start_date,
           b.end_date as booking_end_date,
           b.notional_value,
           b.customer_id,
           c.name as customer_name,
           bb.code as billboard_code,
           bb.name as billboard_name
    FROM purchase_orders po
    LEFT JOIN bookings b ON po.booking_id = b.id
    LEFT JOIN customers c ON b.customer_id = c.id
    LEFT JOIN billboards bb ON b.billboard_id = bb.id
'''


def get_purchase_order_by_id(po_id: int) -> dict:
    """
    Get purchase order with booking, customer and billboard details.

    Returns:
        PO dict or None if not found
    """
    db = get_db()
    cursor = db.cursor()
    cursor.execute(_PO_DETAIL_QUERY + ' WHERE po.id = ?', (po_id,))
    row = cursor.fetchone()
    return dict(row) if row else None


def get_purchase_order_by_booking(booking_id: int) -> dict:
    """Get the purchase order of a booking, or None."""
    db = get_db()
    cursor = db.cursor()
    cursor.execute(_PO_DETAIL_QUERY + ' WHERE po.booking_id = ?', (booking_id,))
    row = cursor.fetchone()
    return dict(row) if row else None


def get_purchase_orders_filtered(customer_id: int = None, search: str = None,
                                 sort_by: str = 'created_at', sort_order: str = 'desc',
                                 page: int = 1, per_page: int = 20) -> dict:
    """
    List purchase orders with filters and pagination.

    Args:
        customer_id: Filter by the booking's customer
        search: Match on PO number or booking reference
        sort_by: One of PO_SORT_FIELDS
        sort_order: 'asc' or 'desc'
        page: 1-based page
        per_page: Items per page

    Returns:
        dict: {items, total, page, per_page, pages}
    """
    where = ' WHERE 1=1'
    params = []

    if customer_id:
        where += ' AND b.customer_id = ?'
        params.append(customer_id)
    if search:
        where += ' AND (po.po_number LIKE ? OR b.reference_code LIKE ?)'
        params.extend([f'%{search}%', f'%{search}%'])

    if sort_by not in PO_SORT_FIELDS:
        sort_by = 'created_at'
    direction = 'ASC' if sort_order == 'asc' else 'DESC'

    db = get_db()
    cursor = db.cursor()
    return paginate_query(
        cursor,
        _PO_DETAIL_QUERY + where,
        'SELECT COUNT(*) as total FROM purchase_orders po '
        'LEFT JOIN bookings b ON po.booking_id = b.id' + where,
        params,
        f'po.{sort_by} {direction}, po.id {direction}',
        page, per_page
    )


def get_bookings_eligible_for_po(customer_id: int = None) -> list:
    """
    Bookings in completed/confirmed/active status without a purchase order.

    Returns:
        list: Booking dicts with customer, billboard and campaign details,
              latest end_date first
    """
    placeholders = ','.join('?' * len(PO_ELIGIBLE_STATUSES))
    query = f'''
        SELECT b.id, b.reference_code, b.start_date, b.end_date, b.actual_end_date,
               b.notional_value, b.status, b.slot_number,
               c.id as customer_id, c.name as customer_name,
               bb.id as billboard_id, bb.name as billboard_name, bb.code as billboard_code,
               bb.type as billboard_type, bb.rate_per_day,
               cp.id as campaign_id, cp.name as campaign_name,
               cp.reference_code as campaign_reference
        FROM bookings b
        LEFT JOIN customers c ON b.customer_id = c.id
        LEFT JOIN billboards bb ON b.billboard_id = bb.id
        LEFT JOIN campaigns cp ON b.campaign_id = cp.id
        WHERE b.status IN ({placeholders})
          AND NOT EXISTS (SELECT 1 FROM purchase_orders po WHERE po.booking_id = b.id)
    '''
    params = list(PO_ELIGIBLE_STATUSES)

    if customer_id:
        query += ' AND b.customer_id = ?'
        params.append(customer_id)

    query += ' ORDER BY b.end_date DESC, b.id DESC'

    db = get_db()
    cursor = db.cursor()
    cursor.execute(query, params)
    return [dict(row) for row in cursor.fetchall()]


# =============================================================================
# UPDATE / DELETE
# =============================================================================

def update_purchase_order(po_id: int, data: dict, updated_by: str = None) -> bool:
    """
    Partially update a purchase order's actual period, value or notes.

    Returns:
        bool: True if updated, False if nothing to change

    Raises:
        NotFoundError: Unknown purchase order
        InvalidStateError: Actual end before actual start
    """
    allowed_fields = ['actual_start_date', 'actual_end_date', 'actual_value', 'adjustment_notes']

    with transaction() as cursor:
        cursor.execute('SELECT * FROM purchase_orders WHERE id = ?', (po_id,))
        row = cursor.fetchone()
        if not row:
            raise NotFoundError(get_message('po_not_found'))

        changes = {f: data[f] for f in allowed_fields if f in data}
        if not changes:
            return False

        if 'actual_start_date' in changes or 'actual_end_date' in changes:
            start, end = parse_date_range(
                changes.get('actual_start_date', row['actual_start_date']),
                changes.get('actual_end_date', row['actual_end_date']),
                'actual_start_date', 'actual_end_date'
            )
            changes['actual_start_date'] = start.isoformat()
            changes['actual_end_date'] = end.isoformat()

        if 'actual_value' in changes:
            changes['actual_value'] = format_money(to_money(changes['actual_value'], 'actual_value'))

        updates = [f'{field} = ?' for field in changes]
        values = list(changes.values())
        updates.append('updated_by = ?')
        values.append(updated_by)
        updates.append('updated_at = CURRENT_TIMESTAMP')
        values.append(po_id)

        cursor.execute(f'UPDATE purchase_orders SET {", ".join(updates)} WHERE id = ?', values)
        updated = cursor.rowcount > 0

    logger.info('Purchase order %s updated', row['po_number'])
    return updated


def delete_purchase_order(po_id: int, updated_by: str = None) -> bool:
    """
    Delete a purchase order and return its booking to 'completed'.

    Raises:
        NotFoundError: Unknown purchase order
    """
    with transaction() as cursor:
        cursor.execute('SELECT id, po_number, booking_id FROM purchase_orders WHERE id = ?',
                       (po_id,))
        row = cursor.fetchone()
        if not row:
            raise NotFoundError(get_message('po_not_found'))

        cursor.execute('''
            UPDATE bookings
            SET status = 'completed', updated_by = ?, updated_at = CURRENT_TIMESTAMP
            WHERE id = ?
        ''', (updated_by, row['booking_id']))

        cursor.execute('DELETE FROM purchase_orders WHERE id = ?', (po_id,))
        deleted = cursor.rowcount > 0

    logger.info('Purchase order %s deleted, booking %s reverted to completed',
                row['po_number'], row['booking_id'])
    return deleted
