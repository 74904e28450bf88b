"""
Campaign data access and orchestration.
Groups bookings for one customer, creates multi-billboard campaigns atomically
and keeps campaign totals in step with member bookings.
"""

import logging
from decimal import Decimal

from database import get_db, transaction
from utils.helpers import format_money, to_money
from utils.messages import get_message
from utils.pagination import paginate_query
from utils.validators import parse_date, parse_date_range, parse_optional_int, require_fields
from .billboard import get_active_billboards, get_billboards_by_ids
from .booking_availability import check_availability
from .booking_crud import ensure_available, insert_booking, normalize_slot
from .customer import get_customer_by_id
from .errors import InvalidStateError, NotFoundError, ValidationError
from .sequence import next_sequence

logger = logging.getLogger(__name__)

CAMPAIGN_SORT_FIELDS = ('name', 'reference_code', 'start_date', 'end_date', 'created_at')


# =============================================================================
# TOTALS
# =============================================================================

def recalculate_campaign_totals(cursor, campaign_id: int) -> dict:
    """
    Recompute total_value and the date span of a campaign on an open cursor.

    Totals are summed as Decimal; an empty campaign gets 0.00 and NULL dates.

    Returns:
        dict: {'total_value', 'start_date', 'end_date', 'booking_count'}
    """
    cursor.execute('''
        SELECT notional_value, start_date, end_date
        FROM bookings WHERE campaign_id = ?
    ''', (campaign_id,))
    rows = cursor.fetchall()

    total = sum((to_money(r['notional_value']) for r in rows), Decimal('0'))
    start_date = min((r['start_date'] for r in rows), default=None)
    end_date = max((r['end_date'] for r in rows), default=None)

    cursor.execute('''
        UPDATE campaigns
        SET total_value = ?, start_date = ?, end_date = ?,
            updated_at = CURRENT_TIMESTAMP
        WHERE id = ?
    ''', (format_money(total), start_date, end_date, campaign_id))

    return {
        'total_value': format_money(total),
        'start_date': start_date,
        'end_date': end_date,
        'booking_count': len(rows),
    }


def update_campaign_totals(campaign_id: int) -> dict:
    """
    Recompute a campaign's totals from its bookings.

    Raises:
        NotFoundError: If the campaign does not exist
    """
    with transaction() as cursor:
        _get_campaign_row(cursor, campaign_id)
        return recalculate_campaign_totals(cursor, campaign_id)


def _get_campaign_row(cursor, campaign_id: int):
    cursor.execute('SELECT * FROM campaigns WHERE id = ?', (campaign_id,))
    row = cursor.fetchone()
    if not row:
        raise NotFoundError(get_message('campaign_not_found'))
    return row


def _parse_selections(billboards: list) -> list:
    """Normalize billboard selections to [(billboard_id, slot_number)]."""
    selections = []
    for item in billboards:
        if isinstance(item, dict):
            billboard_id = parse_optional_int(item.get('billboard_id'), 'billboard_id')
            slot = item.get('slot_number')
        else:
            billboard_id = parse_optional_int(item, 'billboard_id')
            slot = None
        if billboard_id is None:
            raise ValidationError(get_message('selection_billboard_required'))
        selections.append((billboard_id, slot))
    return selections


# =============================================================================
# CREATE
# =============================================================================

def create_campaign(data: dict, created_by: str = None) -> dict:
    """
    Create a campaign with one booking per selected billboard.

    Every selection is checked for the whole campaign period inside a single
    BEGIN IMMEDIATE transaction. The first conflict aborts the request and
    rolls back the campaign row, any bookings already inserted and the
    consumed reference codes.

    Args:
        data: name, customer_id, start_date, end_date, billboards
              ([{'billboard_id', 'slot_number'?}]) and optional description
        created_by: User creating the campaign

    Returns:
        dict: {'id', 'reference_code', 'total_value', 'start_date',
               'end_date', 'bookings': [{'id', 'reference_code',
               'billboard_id', 'slot_number', 'notional_value'}]}

    Raises:
        ValidationError: Missing name/customer/billboards/dates
        InvalidStateError: end_date before start_date
        NotFoundError: Unknown customer or billboards
        ConflictError: A selection overlaps existing bookings
    """
    require_fields(data, ['name', 'customer_id'])

    if not data.get('billboards'):
        raise ValidationError(get_message('campaign_needs_billboards'))
    if not data.get('start_date') or not data.get('end_date'):
        raise ValidationError(get_message('campaign_needs_dates'))

    start, end = parse_date_range(data['start_date'], data['end_date'])
    customer_id = parse_optional_int(data['customer_id'], 'customer_id')
    selections = _parse_selections(data['billboards'])

    if not get_customer_by_id(customer_id):
        raise NotFoundError(get_message('customer_not_found'))

    with transaction() as cursor:
        billboards = get_billboards_by_ids([s[0] for s in selections], cursor=cursor)
        if len(billboards) != len({s[0] for s in selections}):
            raise NotFoundError(get_message('billboards_not_found'))

        reference_code = next_sequence('campaign', cursor)
        cursor.execute('''
            INSERT INTO campaigns (reference_code, name, customer_id, description,
                                   start_date, end_date, created_by, updated_by)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        ''', (reference_code, data['name'], customer_id, data.get('description'),
              start.isoformat(), end.isoformat(), created_by, created_by))
        campaign_id = cursor.lastrowid

        bookings = []
        for billboard_id, slot_value in selections:
            billboard = billboards[billboard_id]
            slot = normalize_slot(billboard, slot_value)

            # Sees rows inserted earlier in this loop, so repeated selections conflict
            ensure_available(billboard_id, start, end, slot, cursor,
                             message_key='campaign_billboard_unavailable',
                             name=billboard['name'])

            booking = insert_booking(cursor, customer_id, billboard, start, end,
                                     slot_number=slot, campaign_id=campaign_id,
                                     created_by=created_by)
            booking['billboard_id'] = billboard_id
            booking['slot_number'] = slot
            bookings.append(booking)

        totals = recalculate_campaign_totals(cursor, campaign_id)

    logger.info('Campaign %s created with %d bookings (total %s)',
                reference_code, len(bookings), totals['total_value'])

    return {
        'id': campaign_id,
        'reference_code': reference_code,
        'total_value': totals['total_value'],
        'start_date': totals['start_date'],
        'end_date': totals['end_date'],
        'bookings': bookings,
    }


# =============================================================================
# READ
# =============================================================================

def get_campaign_by_id(campaign_id: int) -> dict:
    """
    Get campaign with customer name and member bookings.

    Args:
        campaign_id: Campaign ID

    Returns:
        Campaign dict with 'bookings' and 'booking_count', or None
    """
    db = get_db()
    cursor = db.cursor()

    cursor.execute('''
        SELECT cp.*, c.name as customer_name, c.contact_person as customer_contact
        FROM campaigns cp
        LEFT JOIN customers c ON cp.customer_id = c.id
        WHERE cp.id = ?
    ''', (campaign_id,))
    row = cursor.fetchone()
    if not row:
        return None

    campaign = dict(row)

    cursor.execute('''
        SELECT b.id, b.reference_code, b.start_date, b.end_date, b.actual_end_date,
               b.slot_number, b.notional_value, b.status,
               bb.id as billboard_id, bb.code as billboard_code, bb.name as billboard_name
        FROM bookings b
        LEFT JOIN billboards bb ON b.billboard_id = bb.id
        WHERE b.campaign_id = ?
        ORDER BY b.start_date, b.reference_code
    ''', (campaign_id,))
    campaign['bookings'] = [dict(r) for r in cursor.fetchall()]
    campaign['booking_count'] = len(campaign['bookings'])

    return campaign


def get_campaigns_filtered(customer_id: int = None, search: str = None,
                           start_date_from: str = None, start_date_to: str = None,
                           sort_by: str = 'created_at', sort_order: str = 'desc',
                           page: int = 1, per_page: int = 20) -> dict:
    """
    List campaigns with booking counts, filters and pagination.

    Returns:
        dict: {items, total, page, per_page, pages}
    """
    where = ' WHERE 1=1'
    params = []

    if customer_id:
        where += ' AND cp.customer_id = ?'
        params.append(customer_id)
    if search:
        where += ' AND (cp.name LIKE ? OR cp.reference_code LIKE ?)'
        params.extend([f'%{search}%', f'%{search}%'])
    if start_date_from:
        where += ' AND cp.start_date >= ?'
        params.append(parse_date(start_date_from, 'start_date_from').isoformat())
    if start_date_to:
        where += ' AND cp.start_date <= ?'
        params.append(parse_date(start_date_to, 'start_date_to').isoformat())

    if sort_by not in CAMPAIGN_SORT_FIELDS:
        sort_by = 'created_at'
    direction = 'ASC' if sort_order == 'asc' else 'DESC'

    query = '''
        SELECT cp.*, c.name as customer_name,
               (SELECT COUNT(*) FROM bookings b WHERE b.campaign_id = cp.id) as booking_count
        FROM campaigns cp
        LEFT JOIN customers c ON cp.customer_id = c.id
    ''' + where

    db = get_db()
    cursor = db.cursor()
    return paginate_query(
        cursor, query,
        'SELECT COUNT(*) as total FROM campaigns cp' + where,
        params,
        f'cp.{sort_by} {direction}, cp.id {direction}',
        page, per_page
    )


def get_bookings_not_in_campaign(customer_id: int, exclude_campaign_id: int = None) -> list:
    """
    Bookings of a customer that could be added to a campaign.

    Without exclude_campaign_id only unassigned bookings are returned; with it,
    bookings in other campaigns are included as well.
    """
    query = '''
        SELECT b.id, b.reference_code, b.start_date, b.end_date, b.notional_value,
               b.status, b.campaign_id,
               bb.id as billboard_id, bb.name as billboard_name, bb.code as billboard_code
        FROM bookings b
        LEFT JOIN billboards bb ON b.billboard_id = bb.id
        WHERE b.customer_id = ?
    '''
    params = [customer_id]

    if exclude_campaign_id:
        query += ' AND (b.campaign_id IS NULL OR b.campaign_id != ?)'
        params.append(exclude_campaign_id)
    else:
        query += ' AND b.campaign_id IS NULL'

    query += ' ORDER BY b.created_at DESC, b.id DESC'

    db = get_db()
    cursor = db.cursor()
    cursor.execute(query, params)
    return [dict(row) for row in cursor.fetchall()]


def get_available_billboards(start_date, end_date) -> list:
    """
    Availability of every active billboard over a date range.

    Digital billboards are probed slot by slot and are available while any
    slot is free. Each entry also carries the billboard-wide conflicts.

    Returns:
        list: Billboard dicts plus 'is_available', 'available_slots', 'conflicts'
    """
    start, end = parse_date_range(start_date, end_date)

    cursor = get_db().cursor()
    result = []
    for billboard in get_active_billboards():
        availability = check_availability(billboard['id'], start, end,
                                          scope='billboard', cursor=cursor)

        if billboard['type'] == 'digital' and billboard['slot_count']:
            available_slots = [
                slot for slot in range(1, billboard['slot_count'] + 1)
                if check_availability(billboard['id'], start, end,
                                      slot_number=slot, cursor=cursor)['available']
            ]
            is_available = len(available_slots) > 0
        else:
            available_slots = []
            is_available = availability['available']

        result.append({
            **billboard,
            'is_available': is_available,
            'available_slots': available_slots,
            'conflicts': availability['conflicts'],
        })

    return result


# =============================================================================
# UPDATE / DELETE
# =============================================================================

def update_campaign(campaign_id: int, data: dict, updated_by: str = None) -> bool:
    """
    Partially update campaign details.

    Args:
        campaign_id: Campaign ID
        data: Any of name, description, customer_id, start_date, end_date
        updated_by: User making the change

    Returns:
        bool: True if updated, False if nothing to change

    Raises:
        NotFoundError: Unknown campaign or customer
        InvalidStateError: end_date before start_date
    """
    allowed_fields = ['name', 'description', 'customer_id', 'start_date', 'end_date']

    with transaction() as cursor:
        existing = _get_campaign_row(cursor, campaign_id)

        changes = {f: data[f] for f in allowed_fields if f in data}
        if not changes:
            return False

        if 'name' in changes and not changes['name']:
            raise ValidationError(get_message('campaign_name_required'))

        if 'customer_id' in changes:
            changes['customer_id'] = parse_optional_int(changes['customer_id'], 'customer_id')
            if not get_customer_by_id(changes['customer_id']):
                raise NotFoundError(get_message('customer_not_found'))

        for field in ('start_date', 'end_date'):
            if field in changes and changes[field]:
                changes[field] = parse_date(changes[field], field).isoformat()
            elif field in changes:
                changes[field] = None

        start_value = changes.get('start_date', existing['start_date'])
        end_value = changes.get('end_date', existing['end_date'])
        if start_value and end_value and end_value < start_value:
            raise InvalidStateError(get_message('campaign_dates_reversed'))

        updates = [f'{field} = ?' for field in changes]
        values = list(changes.values())
        updates.append('updated_by = ?')
        values.append(updated_by)
        updates.append('updated_at = CURRENT_TIMESTAMP')
        values.append(campaign_id)

        cursor.execute(f'UPDATE campaigns SET {", ".join(updates)} WHERE id = ?', values)
        updated = cursor.rowcount > 0

    logger.info('Campaign %s updated', existing['reference_code'])
    return updated


def delete_campaign(campaign_id: int) -> bool:
    """
    Delete a campaign that owns no bookings.

    Raises:
        NotFoundError: Unknown campaign
        InvalidStateError: Campaign still has bookings
    """
    with transaction() as cursor:
        existing = _get_campaign_row(cursor, campaign_id)

        cursor.execute('SELECT COUNT(*) as total FROM bookings WHERE campaign_id = ?',
                       (campaign_id,))
        if cursor.fetchone()['total'] > 0:
            raise InvalidStateError(get_message('campaign_has_bookings'))

        cursor.execute('DELETE FROM campaigns WHERE id = ?', (campaign_id,))
        deleted = cursor.rowcount > 0

    logger.info('Campaign %s deleted', existing['reference_code'])
    return deleted


# =============================================================================
# MEMBERSHIP
# =============================================================================

def add_booking_to_campaign(campaign_id: int, booking_id: int) -> dict:
    """
    Attach an existing booking to a campaign.

    A booking moved from another campaign updates both campaigns' totals.

    Returns:
        dict: Refreshed totals of the target campaign

    Raises:
        NotFoundError: Unknown campaign or booking
        InvalidStateError: Booking belongs to a different customer
    """
    with transaction() as cursor:
        campaign = _get_campaign_row(cursor, campaign_id)

        cursor.execute('SELECT id, reference_code, customer_id, campaign_id FROM bookings WHERE id = ?',
                       (booking_id,))
        booking = cursor.fetchone()
        if not booking:
            raise NotFoundError(get_message('booking_not_found'))

        if booking['customer_id'] != campaign['customer_id']:
            raise InvalidStateError(get_message('campaign_customer_mismatch'))

        previous_campaign_id = booking['campaign_id']

        cursor.execute('''
            UPDATE bookings SET campaign_id = ?, updated_at = CURRENT_TIMESTAMP
            WHERE id = ?
        ''', (campaign_id, booking_id))

        totals = recalculate_campaign_totals(cursor, campaign_id)
        if previous_campaign_id and previous_campaign_id != campaign_id:
            recalculate_campaign_totals(cursor, previous_campaign_id)

    logger.info('Booking %s added to campaign %s',
                booking['reference_code'], campaign['reference_code'])
    return totals


def remove_booking_from_campaign(campaign_id: int, booking_id: int) -> dict:
    """
    Detach a booking from a campaign.

    Returns:
        dict: Refreshed totals of the campaign

    Raises:
        NotFoundError: Unknown campaign, or booking not in this campaign
    """
    with transaction() as cursor:
        campaign = _get_campaign_row(cursor, campaign_id)

        cursor.execute('''
            SELECT id, reference_code FROM bookings
            WHERE id = ? AND campaign_id = ?
        ''', (booking_id, campaign_id))
        booking = cursor.fetchone()
        if not booking:
            raise NotFoundError(get_message('booking_not_in_campaign'))

        cursor.execute('''
            UPDATE bookings SET campaign_id = NULL, updated_at = CURRENT_TIMESTAMP
            WHERE id = ?
        ''', (booking_id,))

        totals = recalculate_campaign_totals(cursor, campaign_id)

    logger.info('Booking %s removed from campaign %s',
                booking['reference_code'], campaign['reference_code'])
    return totals
