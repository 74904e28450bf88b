"""
Booking CRUD operations.
Handles booking creation, retrieval, partial updates and deletion.
"""

import logging

from database import get_db, transaction
from utils.datetime_helpers import inclusive_day_count
from utils.helpers import format_money, to_money
from utils.messages import get_message
from utils.pagination import paginate_query
from utils.validators import parse_date, parse_date_range, parse_optional_int, require_fields
from .billboard import get_billboard_by_id
from .booking_availability import check_availability, conflict_codes
from .booking_state import BOOKING_STATUSES, FINALIZED_STATUSES
from .customer import get_customer_by_id
from .errors import ConflictError, InvalidStateError, NotFoundError, ValidationError
from .sequence import next_sequence

logger = logging.getLogger(__name__)

BOOKING_SORT_FIELDS = ('start_date', 'end_date', 'reference_code', 'status', 'created_at')

# Keys that can move a booking onto another billboard/slot/date range
AVAILABILITY_FIELDS = ('start_date', 'end_date', 'billboard_id', 'slot_number')


# =============================================================================
# HELPERS
# =============================================================================

def normalize_slot(billboard: dict, slot_number) -> int:
    """
    Validate a slot number against a billboard.

    Static billboards have no slots, so any submitted value is dropped.

    Returns:
        int or None: Slot to store

    Raises:
        ValidationError: If the slot is outside 1..slot_count
    """
    slot = parse_optional_int(slot_number, 'slot_number')
    if billboard['type'] != 'digital':
        return None
    if slot is not None and not 1 <= slot <= billboard['slot_count']:
        raise ValidationError(get_message('slot_out_of_range', slot_count=billboard['slot_count']))
    return slot


def calculate_notional_value(rate_per_day, start, end) -> str:
    """Rate times inclusive days, as stored money text."""
    return format_money(to_money(rate_per_day, 'rate_per_day') * inclusive_day_count(start, end))


def ensure_available(billboard_id: int, start, end, slot_number, cursor,
                     exclude_booking_id: int = None, message_key: str = 'billboard_unavailable',
                     **message_args) -> None:
    """
    Raise ConflictError when the requested placement overlaps other bookings.

    Raises:
        ConflictError: Carrying the conflicting reference codes
    """
    availability = check_availability(
        billboard_id, start, end,
        slot_number=slot_number,
        exclude_booking_id=exclude_booking_id,
        cursor=cursor
    )
    if availability['available']:
        return

    codes = conflict_codes(availability)
    logger.warning('Availability rejected for billboard %s (%s..%s slot %s): %s',
                   billboard_id, start, end, slot_number, ', '.join(codes))
    raise ConflictError(
        get_message(message_key, codes=', '.join(codes), **message_args),
        conflicts=codes
    )


def require_campaign(cursor, campaign_id: int, customer_id: int = None) -> None:
    """
    Check that campaign_id is None or an existing campaign of customer_id.

    Raises:
        NotFoundError: Unknown campaign
        InvalidStateError: Campaign belongs to another customer
    """
    if campaign_id is None:
        return
    cursor.execute('SELECT id, customer_id FROM campaigns WHERE id = ?', (campaign_id,))
    campaign = cursor.fetchone()
    if not campaign:
        raise NotFoundError(get_message('campaign_not_found'))
    if customer_id is not None and campaign['customer_id'] != customer_id:
        raise InvalidStateError(get_message('campaign_customer_mismatch'))


def sync_campaign_totals(cursor, *campaign_ids) -> None:
    """Recompute totals of each distinct, non-null campaign id."""
    from .campaign import recalculate_campaign_totals

    for campaign_id in dict.fromkeys(campaign_ids):
        if campaign_id:
            recalculate_campaign_totals(cursor, campaign_id)


def insert_booking(cursor, customer_id: int, billboard: dict, start, end,
                   slot_number=None, campaign_id: int = None, notional_value=None,
                   creative_ref: str = None, notes: str = None,
                   created_by: str = None) -> dict:
    """
    Insert one booking row on an open transaction cursor.

    Availability must already have been checked on the same cursor.

    Returns:
        dict: {'id', 'reference_code', 'notional_value'}
    """
    if notional_value in (None, ''):
        notional = calculate_notional_value(billboard['rate_per_day'], start, end)
    else:
        notional = format_money(to_money(notional_value, 'notional_value'))

    reference_code = next_sequence('booking', cursor)

    cursor.execute('''
        INSERT INTO bookings (
            reference_code, customer_id, billboard_id, campaign_id, slot_number,
            start_date, end_date, notional_value, status, creative_ref, notes,
            created_by, updated_by
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, 'created', ?, ?, ?, ?)
    ''', (
        reference_code, customer_id, billboard['id'], campaign_id, slot_number,
        start.isoformat(), end.isoformat(), notional, creative_ref, notes,
        created_by, created_by
    ))

    return {
        'id': cursor.lastrowid,
        'reference_code': reference_code,
        'notional_value': notional,
    }


# =============================================================================
# CREATE
# =============================================================================

def create_booking(data: dict, created_by: str = None) -> dict:
    """
    Create a single booking.

    The availability check and the insert run in one BEGIN IMMEDIATE
    transaction so no other writer can take the slot in between.

    Args:
        data: customer_id, billboard_id, start_date, end_date and optionally
              slot_number, notional_value, campaign_id, creative_ref, notes
        created_by: User creating the booking

    Returns:
        dict: {'id', 'reference_code', 'notional_value'}

    Raises:
        ValidationError: Missing fields, bad slot or malformed values
        InvalidStateError: end_date before start_date
        NotFoundError: Unknown customer or billboard
        ConflictError: Overlapping bookings
    """
    require_fields(data, ['customer_id', 'billboard_id', 'start_date', 'end_date'])
    start, end = parse_date_range(data['start_date'], data['end_date'])

    customer_id = parse_optional_int(data['customer_id'], 'customer_id')
    billboard_id = parse_optional_int(data['billboard_id'], 'billboard_id')

    if not get_customer_by_id(customer_id):
        raise NotFoundError(get_message('customer_not_found'))

    with transaction() as cursor:
        billboard = get_billboard_by_id(billboard_id, cursor=cursor)
        if not billboard:
            raise NotFoundError(get_message('billboard_not_found'))

        campaign_id = parse_optional_int(data.get('campaign_id'), 'campaign_id')
        require_campaign(cursor, campaign_id, customer_id)

        slot = normalize_slot(billboard, data.get('slot_number'))
        ensure_available(billboard_id, start, end, slot, cursor)

        result = insert_booking(
            cursor, customer_id, billboard, start, end,
            slot_number=slot,
            campaign_id=campaign_id,
            notional_value=data.get('notional_value'),
            creative_ref=data.get('creative_ref'),
            notes=data.get('notes'),
            created_by=created_by
        )
        sync_campaign_totals(cursor, campaign_id)

    logger.info('Booking %s created on billboard %s (%s..%s)',
                result['reference_code'], billboard['code'], start, end)
    return result


# =============================================================================
# READ
# =============================================================================

_BOOKING_DETAIL_QUERY = '''
    SELECT b.*,
           c.name as customer_name,
           bb.code as billboard_code,
           bb.name as billboard_name,
           bb.type as billboard_type,
           bb.slot_count,
           bb.rate_per_day,
           cp.name as campaign_name,
           cp.reference_code as campaign_reference
    FROM bookings b
    LEFT JOIN customers c ON b.customer_id = c.id
    LEFT JOIN billboards bb ON b.billboard_id = bb.id
    LEFT JOIN campaigns cp ON b.campaign_id = cp.id
'''


def get_booking_by_id(booking_id: int) -> dict:
    """
    Get booking with customer, billboard and campaign details.

    Args:
        booking_id: Booking ID

    Returns:
        Booking dict or None if not found
    """
    db = get_db()
    cursor = db.cursor()
    cursor.execute(_BOOKING_DETAIL_QUERY + ' WHERE b.id = ?', (booking_id,))
    row = cursor.fetchone()
    return dict(row) if row else None


def get_booking_by_reference(reference_code: str) -> dict:
    """Get booking by reference code (e.g. BK-2024-0001)."""
    db = get_db()
    cursor = db.cursor()
    cursor.execute(_BOOKING_DETAIL_QUERY + ' WHERE b.reference_code = ?', (reference_code,))
    row = cursor.fetchone()
    return dict(row) if row else None


def get_bookings_filtered(customer_id: int = None, billboard_id: int = None,
                          campaign_id: int = None, status: str = None,
                          start_date_from: str = None, start_date_to: str = None,
                          sort_by: str = 'created_at', sort_order: str = 'desc',
                          page: int = 1, per_page: int = 20) -> dict:
    """
    List bookings with filters and pagination.

    Args:
        customer_id: Filter by customer
        billboard_id: Filter by billboard
        campaign_id: Filter by campaign
        status: Filter by status
        start_date_from: Earliest start_date (inclusive)
        start_date_to: Latest start_date (inclusive)
        sort_by: One of BOOKING_SORT_FIELDS
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
    if billboard_id:
        where += ' AND b.billboard_id = ?'
        params.append(billboard_id)
    if campaign_id:
        where += ' AND b.campaign_id = ?'
        params.append(campaign_id)
    if status:
        where += ' AND b.status = ?'
        params.append(status)
    if start_date_from:
        where += ' AND b.start_date >= ?'
        params.append(parse_date(start_date_from, 'start_date_from').isoformat())
    if start_date_to:
        where += ' AND b.start_date <= ?'
        params.append(parse_date(start_date_to, 'start_date_to').isoformat())

    if sort_by not in BOOKING_SORT_FIELDS:
        sort_by = 'created_at'
    direction = 'ASC' if sort_order == 'asc' else 'DESC'

    db = get_db()
    cursor = db.cursor()
    return paginate_query(
        cursor,
        _BOOKING_DETAIL_QUERY + where,
        'SELECT COUNT(*) as total FROM bookings b' + where,
        params,
        f'b.{sort_by} {direction}, b.id {direction}',
        page,
        per_page
    )


# =============================================================================
# UPDATE
# =============================================================================

def update_booking(booking_id: int, data: dict, updated_by: str = None) -> bool:
    """
    Partially update a booking.

    Only the keys present in data change. Moving dates, billboard or slot
    re-checks availability against every other booking.

    Args:
        booking_id: Booking ID
        data: Fields to update
        updated_by: User making the change

    Returns:
        bool: True if a row was updated, False if nothing to change

    Raises:
        NotFoundError: Unknown booking, billboard or customer
        InvalidStateError: Booking is finalized, or bad date ordering
        ValidationError: Malformed values or unknown status
        ConflictError: New placement overlaps other bookings
    """
    allowed_fields = [
        'customer_id', 'billboard_id', 'campaign_id', 'slot_number',
        'start_date', 'end_date', 'notional_value', 'status',
        'creative_ref', 'notes'
    ]

    with transaction() as cursor:
        cursor.execute('SELECT * FROM bookings WHERE id = ?', (booking_id,))
        row = cursor.fetchone()
        if not row:
            raise NotFoundError(get_message('booking_not_found'))
        existing = dict(row)

        if existing['status'] in FINALIZED_STATUSES:
            raise InvalidStateError(get_message('booking_finalized', status=existing['status']))

        changes = {f: data[f] for f in allowed_fields if f in data}
        if not changes:
            return False

        if 'status' in changes and changes['status'] not in BOOKING_STATUSES:
            raise ValidationError(get_message('invalid_status', statuses=', '.join(BOOKING_STATUSES)))

        if 'customer_id' in changes:
            changes['customer_id'] = parse_optional_int(changes['customer_id'], 'customer_id')
            if not get_customer_by_id(changes['customer_id']):
                raise NotFoundError(get_message('customer_not_found'))

        if 'campaign_id' in changes:
            changes['campaign_id'] = parse_optional_int(changes['campaign_id'], 'campaign_id')

        if 'customer_id' in changes or 'campaign_id' in changes:
            require_campaign(cursor,
                             changes.get('campaign_id', existing['campaign_id']),
                             changes.get('customer_id', existing['customer_id']))

        if 'notional_value' in changes:
            changes['notional_value'] = format_money(
                to_money(changes['notional_value'], 'notional_value'))

        if any(f in changes for f in AVAILABILITY_FIELDS):
            billboard_id = parse_optional_int(
                changes.get('billboard_id', existing['billboard_id']), 'billboard_id')
            start, end = parse_date_range(
                changes.get('start_date', existing['start_date']),
                changes.get('end_date', existing['end_date'])
            )

            billboard = get_billboard_by_id(billboard_id, cursor=cursor)
            if not billboard:
                raise NotFoundError(get_message('billboard_not_found'))

            slot = normalize_slot(billboard, changes.get('slot_number', existing['slot_number']))
            ensure_available(billboard_id, start, end, slot, cursor,
                             exclude_booking_id=booking_id)

            changes['billboard_id'] = billboard_id
            changes['slot_number'] = slot
            changes['start_date'] = start.isoformat()
            changes['end_date'] = end.isoformat()

        updates = [f'{field} = ?' for field in changes]
        values = list(changes.values())

        updates.append('updated_by = ?')
        values.append(updated_by)
        updates.append('updated_at = CURRENT_TIMESTAMP')
        values.append(booking_id)

        cursor.execute(f'UPDATE bookings SET {", ".join(updates)} WHERE id = ?', values)
        updated = cursor.rowcount > 0

        sync_campaign_totals(cursor, existing['campaign_id'],
                             changes.get('campaign_id', existing['campaign_id']))

    logger.info('Booking %s updated: %s', existing['reference_code'], ', '.join(changes))
    return updated


# =============================================================================
# DELETE
# =============================================================================

def delete_booking(booking_id: int) -> bool:
    """
    Delete a booking that is still in 'created' status.

    Args:
        booking_id: Booking ID

    Returns:
        bool: True if deleted

    Raises:
        NotFoundError: Unknown booking
        InvalidStateError: Booking has moved past 'created'
    """
    with transaction() as cursor:
        cursor.execute('SELECT reference_code, status, campaign_id FROM bookings WHERE id = ?',
                       (booking_id,))
        row = cursor.fetchone()
        if not row:
            raise NotFoundError(get_message('booking_not_found'))

        if row['status'] != 'created':
            raise InvalidStateError(get_message('booking_delete_not_created'))

        cursor.execute('DELETE FROM bookings WHERE id = ?', (booking_id,))
        deleted = cursor.rowcount > 0

        sync_campaign_totals(cursor, row['campaign_id'])

    logger.info('Booking %s deleted', row['reference_code'])
    return deleted
