"""
Booking data access functions.
Handles booking CRUD, lifecycle status changes and availability checking.

This module re-exports the functions of the split modules:
- booking_state.py: Status enum, status changes, short-close, cancellation
- booking_crud.py: Create, read, update, delete operations
- booking_availability.py: Overlap detection and calendar queries
"""

# State management
from .booking_state import (
    # Constants
    BOOKING_STATUSES,
    CANCELLED,
    FINALIZED_STATUSES,
    PO_ELIGIBLE_STATUSES,
    RELEASING_STATUSES,
    VALID_TRANSITIONS,
    # Transitions
    validate_status_transition,
    update_booking_status,
    short_close_booking,
    cancel_booking,
)

# CRUD operations
from .booking_crud import (
    BOOKING_SORT_FIELDS,
    # Create
    create_booking,
    # Read
    get_booking_by_id,
    get_booking_by_reference,
    get_bookings_filtered,
    # Update
    update_booking,
    # Delete
    delete_booking,
)

# Availability
from .booking_availability import (
    AVAILABILITY_SCOPES,
    check_availability,
    conflict_codes,
    get_calendar_bookings,
    get_bookings_for_date_range,
)

__all__ = [
    'BOOKING_STATUSES',
    'CANCELLED',
    'FINALIZED_STATUSES',
    'PO_ELIGIBLE_STATUSES',
    'RELEASING_STATUSES',
    'VALID_TRANSITIONS',
    'validate_status_transition',
    'update_booking_status',
    'short_close_booking',
    'cancel_booking',
    'BOOKING_SORT_FIELDS',
    'create_booking',
    'get_booking_by_id',
    'get_booking_by_reference',
    'get_bookings_filtered',
    'update_booking',
    'delete_booking',
    'AVAILABILITY_SCOPES',
    'check_availability',
    'conflict_codes',
    'get_calendar_bookings',
    'get_bookings_for_date_range',
]
