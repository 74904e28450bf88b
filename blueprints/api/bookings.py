"""
Booking API routes.
CRUD, lifecycle actions and availability checks for bookings.
"""

import logging
from flask import request

from models.booking import (
    BOOKING_SORT_FIELDS,
    cancel_booking,
    check_availability,
    create_booking,
    delete_booking,
    get_booking_by_id,
    get_bookings_filtered,
    get_bookings_for_date_range,
    get_calendar_bookings,
    short_close_booking,
    update_booking,
    update_booking_status,
)
from utils.api_response import api_success, api_error, api_paginated
from utils.messages import get_message
from utils.pagination import get_pagination_params, get_sort_params
from utils.validators import parse_optional_int
from blueprints.api import current_actor, get_json_body

logger = logging.getLogger(__name__)


def register_routes(bp):
    """Register booking routes on the blueprint."""

    @bp.route('/bookings', methods=['GET'])
    def list_bookings():
        """
        List bookings.

        Query params:
            customer_id, billboard_id, campaign_id, status,
            start_date_from, start_date_to, sort_by, sort_order, page, per_page
        """
        page, per_page = get_pagination_params()
        sort_by, sort_order = get_sort_params(BOOKING_SORT_FIELDS)

        result = get_bookings_filtered(
            customer_id=request.args.get('customer_id', type=int),
            billboard_id=request.args.get('billboard_id', type=int),
            campaign_id=request.args.get('campaign_id', type=int),
            status=request.args.get('status'),
            start_date_from=request.args.get('start_date_from'),
            start_date_to=request.args.get('start_date_to'),
            sort_by=sort_by,
            sort_order=sort_order,
            page=page,
            per_page=per_page
        )
        return api_paginated(result)

    @bp.route('/bookings', methods=['POST'])
    def create_booking_route():
        """
        Create a booking.

        Request body:
            customer_id, billboard_id, start_date, end_date (required);
            slot_number, notional_value, campaign_id, creative_ref, notes
        """
        result = create_booking(get_json_body(), created_by=current_actor())
        return api_success(data=get_booking_by_id(result['id']),
                           message=get_message('booking_created'), status=201)

    @bp.route('/bookings/check-availability', methods=['GET'])
    def check_availability_route():
        """
        Check a billboard (or slot) for a date range.

        Query params:
            billboard_id, start_date, end_date (required);
            slot_number, exclude_booking_id, scope
        """
        result = check_availability(
            request.args.get('billboard_id', type=int),
            request.args.get('start_date'),
            request.args.get('end_date'),
            slot_number=request.args.get('slot_number'),
            exclude_booking_id=request.args.get('exclude_booking_id', type=int),
            scope=request.args.get('scope', 'auto')
        )
        return api_success(data=result)

    @bp.route('/bookings/calendar/<int:billboard_id>', methods=['GET'])
    def calendar_bookings(billboard_id):
        """
        Bookings on a billboard overlapping one month.

        Query params:
            year, month (required)
        """
        year = request.args.get('year', type=int)
        month = request.args.get('month', type=int)
        if not year or not month:
            return api_error('year and month are required', 400)

        bookings = get_calendar_bookings(billboard_id, year, month)
        return api_success(data=bookings, count=len(bookings))

    @bp.route('/bookings/range', methods=['GET'])
    def bookings_for_range():
        """
        Bookings overlapping a date range.

        Query params:
            start_date, end_date (required); billboard_ids (comma separated)
        """
        raw_ids = request.args.get('billboard_ids', '')
        billboard_ids = [parse_optional_int(v, 'billboard_ids')
                         for v in raw_ids.split(',') if v.strip()]

        bookings = get_bookings_for_date_range(
            request.args.get('start_date'),
            request.args.get('end_date'),
            billboard_ids=billboard_ids or None
        )
        return api_success(data=bookings, count=len(bookings))

    @bp.route('/bookings/<int:booking_id>', methods=['GET'])
    def get_booking(booking_id):
        """Get single booking with details."""
        booking = get_booking_by_id(booking_id)
        if not booking:
            return api_error(get_message('booking_not_found'), 404)
        return api_success(data=booking)

    @bp.route('/bookings/<int:booking_id>', methods=['PUT', 'PATCH'])
    def update_booking_route(booking_id):
        """Partially update a booking; only the keys sent change."""
        update_booking(booking_id, get_json_body(), updated_by=current_actor())
        return api_success(data=get_booking_by_id(booking_id),
                           message=get_message('booking_updated'))

    @bp.route('/bookings/<int:booking_id>', methods=['DELETE'])
    def delete_booking_route(booking_id):
        """Delete a booking still in 'created' status."""
        delete_booking(booking_id)
        return api_success(message=get_message('booking_deleted'))

    @bp.route('/bookings/<int:booking_id>/status', methods=['PATCH', 'POST'])
    def update_status_route(booking_id):
        """
        Change booking status.

        Request body:
            status: One of the lifecycle statuses
        """
        data = get_json_body()
        result = update_booking_status(booking_id, data.get('status'),
                                       updated_by=current_actor())
        return api_success(data=result, message=get_message('booking_status_updated'))

    @bp.route('/bookings/<int:booking_id>/short-close', methods=['POST'])
    def short_close_route(booking_id):
        """
        Short close a booking.

        Request body:
            actual_end_date (required), reason
        """
        data = get_json_body()
        short_close_booking(booking_id, data.get('actual_end_date'),
                            data.get('reason', ''), updated_by=current_actor())
        return api_success(data=get_booking_by_id(booking_id),
                           message=get_message('booking_short_closed'))

    @bp.route('/bookings/<int:booking_id>/cancel', methods=['POST'])
    def cancel_route(booking_id):
        """
        Cancel a booking.

        Request body:
            reason (optional)
        """
        data = get_json_body()
        cancel_booking(booking_id, data.get('reason', ''), updated_by=current_actor())
        logger.info('Booking %s cancelled via API', booking_id)
        return api_success(data=get_booking_by_id(booking_id),
                           message=get_message('booking_cancelled'))
