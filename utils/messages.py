"""
Centralized user-facing messages.
All API response text kept in one place for consistency.
"""

MESSAGES = {
    # Success messages
    'booking_created': 'Booking created successfully',
    'booking_updated': 'Booking updated successfully',
    'booking_deleted': 'Booking deleted successfully',
    'booking_status_updated': 'Booking status updated successfully',
    'booking_short_closed': 'Booking short closed successfully',
    'booking_cancelled': 'Booking cancelled successfully',
    'campaign_created': 'Campaign created successfully',
    'campaign_updated': 'Campaign updated successfully',
    'campaign_deleted': 'Campaign deleted successfully',
    'campaign_booking_added': 'Booking added to campaign',
    'campaign_booking_removed': 'Booking removed from campaign',
    'po_created': 'Purchase order created successfully',
    'po_updated': 'Purchase order updated successfully',
    'po_deleted': 'Purchase order deleted successfully',
    'billboard_created': 'Billboard created successfully',
    'customer_created': 'Customer created successfully',

    # Error messages
    'booking_not_found': 'Booking not found',
    'campaign_not_found': 'Campaign not found',
    'billboard_not_found': 'Billboard not found',
    'customer_not_found': 'Customer not found',
    'po_not_found': 'Purchase order not found',
    'booking_not_in_campaign': 'Booking not found in this campaign',
    'billboards_not_found': 'One or more billboards not found',
    'billboard_unavailable': 'Billboard is not available for the selected dates. Conflicts with: {codes}',
    'campaign_billboard_unavailable': 'Billboard "{name}" is not available for the selected dates. Conflicts with: {codes}',
    'booking_finalized': 'Cannot edit booking in "{status}" status. Booking is finalized.',
    'booking_delete_not_created': 'Only bookings in "created" status can be deleted',
    'invalid_status': 'Invalid status. Must be one of: {statuses}',
    'invalid_transition': 'Cannot change booking status from "{current}" to "{new}"',
    'short_close_status': 'Cannot short close booking in "{status}" status. Booking must be in created, confirmed, or active status.',
    'short_close_not_before_end': 'Actual end date must be before the original end date for short closing',
    'short_close_before_start': 'Actual end date cannot be before the start date',
    'cancel_status': 'Cannot cancel booking in "{status}" status',
    'campaign_needs_billboards': 'At least one billboard must be selected for the campaign',
    'campaign_needs_dates': 'Start date and end date are required',
    'campaign_name_required': 'Campaign name cannot be empty',
    'campaign_dates_reversed': 'end_date cannot be before start_date',
    'selection_billboard_required': 'billboard_id is required for each selection',
    'campaign_has_bookings': 'Cannot delete campaign with existing bookings. Remove bookings from the campaign first.',
    'campaign_customer_mismatch': 'Booking must belong to the same customer as the campaign',
    'po_exists': 'Purchase order already exists for this booking',
    'po_status': 'Cannot generate PO for booking in "{status}" status. Booking must be completed first.',
    'slot_out_of_range': 'Slot number must be between 1 and {slot_count}',
    'slot_required': 'slot_number is required for slot-level availability on digital billboards',
    'invalid_scope': 'Invalid availability scope. Must be one of: {scopes}',
    'internal_error': 'Internal server error',
    'resource_not_found': 'Resource not found',
}


def get_message(key: str, **kwargs) -> str:
    """
    Get message by key with optional formatting.

    Args:
        key: Message key
        **kwargs: Format arguments

    Returns:
        Formatted message string
    """
    message = MESSAGES.get(key, key)
    if kwargs:
        return message.format(**kwargs)
    return message
