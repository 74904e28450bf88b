"""
Booking status management.
Handles the status enum, status changes, short-close and cancellation.
"""

import logging

from flask import current_app

from database import transaction
from utils.helpers import append_note
from utils.messages import get_message
from utils.validators import parse_date
from .errors import NotFoundError, InvalidStateError, ValidationError

logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

# Lifecycle order: created -> confirmed -> active -> completed -> po_generated -> invoiced
BOOKING_STATUSES = ('created', 'confirmed', 'active', 'completed', 'po_generated', 'invoiced')

# Reached only through cancel_booking; never blocks availability
CANCELLED = 'cancelled'
RELEASING_STATUSES = (CANCELLED,)

# No field edits allowed through update_booking
FINALIZED_STATUSES = ('completed', 'po_generated', 'invoiced', CANCELLED)

SHORT_CLOSABLE_STATUSES = ('created', 'confirmed', 'active')
CANCELLABLE_STATUSES = ('created', 'confirmed', 'active')
PO_ELIGIBLE_STATUSES = ('completed', 'confirmed', 'active')

# Reference transition matrix. Only enforced when ENFORCE_STATUS_TRANSITIONS
# is on; by default any status may be set.
VALID_TRANSITIONS = {
    'created': ('confirmed', 'active', 'completed'),
    'confirmed': ('created', 'active', 'completed'),
    'active': ('completed',),
    'completed': ('po_generated',),
    'po_generated': ('completed', 'invoiced'),
    'invoiced': (),
    CANCELLED: ('created',),
}


# =============================================================================
# VALIDATION
# =============================================================================

def validate_status_transition(current_status: str, new_status: str,
                               bypass_validation: bool = True) -> None:
    """
    Validate a status change against VALID_TRANSITIONS.

    Args:
        current_status: Status the booking is in
        new_status: Requested status
        bypass_validation: Skip the matrix check (default True)

    Raises:
        InvalidStateError: If the jump is not in the matrix and validation is on
    """
    if bypass_validation or current_status == new_status:
        return
    if new_status not in VALID_TRANSITIONS.get(current_status, ()):
        raise InvalidStateError(
            get_message('invalid_transition', current=current_status, new=new_status)
        )


def _enforce_transitions() -> bool:
    return bool(current_app.config.get('ENFORCE_STATUS_TRANSITIONS', False))


def _get_booking_row(cursor, booking_id: int):
    cursor.execute('''
        SELECT id, reference_code, status, billboard_id, slot_number,
               start_date, end_date, notes
        FROM bookings WHERE id = ?
    ''', (booking_id,))
    row = cursor.fetchone()
    if not row:
        raise NotFoundError(get_message('booking_not_found'))
    return row


# =============================================================================
# STATUS CHANGES
# =============================================================================

def update_booking_status(booking_id: int, status: str, updated_by: str = None) -> dict:
    """
    Set a booking's lifecycle status.

    Any of the six lifecycle values is accepted from any current status unless
    ENFORCE_STATUS_TRANSITIONS is configured.

    Args:
        booking_id: Booking ID
        status: New status
        updated_by: User making the change

    Returns:
        dict: {'id', 'reference_code', 'previous_status', 'status'}

    Raises:
        ValidationError: If status is not one of BOOKING_STATUSES
        NotFoundError: If the booking does not exist
        InvalidStateError: If transitions are enforced and the jump is not allowed
        ConflictError: If a cancelled booking's dates were taken in the meantime
    """
    if status not in BOOKING_STATUSES:
        raise ValidationError(get_message('invalid_status', statuses=', '.join(BOOKING_STATUSES)))

    with transaction() as cur:
        row = _get_booking_row(cur, booking_id)
        validate_status_transition(row['status'], status,
                                   bypass_validation=not _enforce_transitions())

        # A cancelled booking released its dates; reclaim them only if still free
        if row['status'] == CANCELLED:
            from .booking_crud import ensure_available

            ensure_available(row['billboard_id'], row['start_date'], row['end_date'],
                             row['slot_number'], cur, exclude_booking_id=booking_id)

        cur.execute('''
            UPDATE bookings
            SET status = ?, updated_by = ?, updated_at = CURRENT_TIMESTAMP
            WHERE id = ?
        ''', (status, updated_by, booking_id))

    logger.info('Booking %s status %s -> %s', row['reference_code'], row['status'], status)

    return {
        'id': booking_id,
        'reference_code': row['reference_code'],
        'previous_status': row['status'],
        'status': status,
    }


def short_close_booking(booking_id: int, actual_end_date, reason: str,
                        updated_by: str = None) -> None:
    """
    End a booking's display period early.

    Keeps the original end_date, records actual_end_date, forces status to
    'completed' and appends the reason to notes.

    Args:
        booking_id: Booking ID
        actual_end_date: Real last display day, start_date <= d < end_date
        reason: Why the booking was cut short
        updated_by: User making the change

    Raises:
        NotFoundError: If the booking does not exist
        InvalidStateError: If status or date rules are violated
    """
    new_end = parse_date(actual_end_date, 'actual_end_date')

    with transaction() as cursor:
        row = _get_booking_row(cursor, booking_id)

        if row['status'] not in SHORT_CLOSABLE_STATUSES:
            raise InvalidStateError(get_message('short_close_status', status=row['status']))

        if new_end.isoformat() >= row['end_date']:
            raise InvalidStateError(get_message('short_close_not_before_end'))

        if new_end.isoformat() < row['start_date']:
            raise InvalidStateError(get_message('short_close_before_start'))

        notes = append_note(row['notes'], f'Short Closed: {reason}')

        cursor.execute('''
            UPDATE bookings
            SET actual_end_date = ?,
                status = 'completed',
                notes = ?,
                updated_by = ?,
                updated_at = CURRENT_TIMESTAMP
            WHERE id = ?
        ''', (new_end.isoformat(), notes, updated_by, booking_id))

    logger.info('Booking %s short closed on %s', row['reference_code'], new_end.isoformat())


def cancel_booking(booking_id: int, reason: str = '', updated_by: str = None) -> None:
    """
    Cancel a booking that has not finished yet.

    Cancelled bookings stop blocking availability and can no longer be edited.

    Args:
        booking_id: Booking ID
        reason: Optional cancellation reason
        updated_by: User making the change

    Raises:
        NotFoundError: If the booking does not exist
        InvalidStateError: If status is not cancellable
    """
    with transaction() as cursor:
        row = _get_booking_row(cursor, booking_id)

        if row['status'] not in CANCELLABLE_STATUSES:
            raise InvalidStateError(get_message('cancel_status', status=row['status']))

        note = f'Cancelled: {reason}' if reason else 'Cancelled'

        cursor.execute('''
            UPDATE bookings
            SET status = ?,
                notes = ?,
                updated_by = ?,
                updated_at = CURRENT_TIMESTAMP
            WHERE id = ?
        ''', (CANCELLED, append_note(row['notes'], note), updated_by, booking_id))

    logger.info('Booking %s cancelled', row['reference_code'])
