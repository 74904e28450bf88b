"""
Purchase order API routes.
Settlement of bookings and pro-rata previews.
"""

from flask import request

from models.purchase_order import (
    PO_SORT_FIELDS,
    calculate_pro_rata,
    create_purchase_order,
    delete_purchase_order,
    get_bookings_eligible_for_po,
    get_purchase_order_by_id,
    get_purchase_orders_filtered,
    update_purchase_order,
)
from utils.api_response import api_success, api_error, api_paginated
from utils.messages import get_message
from utils.pagination import get_pagination_params, get_sort_params
from blueprints.api import current_actor, get_json_body


def register_routes(bp):
    """Register purchase order routes on the blueprint."""

    @bp.route('/purchase-orders', methods=['GET'])
    def list_purchase_orders():
        """
        List purchase orders.

        Query params:
            customer_id, search, sort_by, sort_order, page, per_page
        """
        page, per_page = get_pagination_params()
        sort_by, sort_order = get_sort_params(PO_SORT_FIELDS)

        result = get_purchase_orders_filtered(
            customer_id=request.args.get('customer_id', type=int),
            search=request.args.get('search'),
            sort_by=sort_by,
            sort_order=sort_order,
            page=page,
            per_page=per_page
        )
        return api_paginated(result)

    @bp.route('/purchase-orders', methods=['POST'])
    def create_purchase_order_route():
        """
        Generate the purchase order for a booking.

        Request body:
            booking_id, actual_start_date, actual_end_date (required);
            actual_value, adjustment_notes
        """
        result = create_purchase_order(get_json_body(), created_by=current_actor())
        return api_success(data=get_purchase_order_by_id(result['id']),
                           message=get_message('po_created'), status=201)

    @bp.route('/purchase-orders/pro-rata', methods=['GET'])
    def pro_rata_route():
        """
        Preview the pro-rata value of a booking.

        Query params:
            booking_id, actual_start_date, actual_end_date (required)
        """
        booking_id = request.args.get('booking_id', type=int)
        if not booking_id:
            return api_error('booking_id is required', 400)

        result = calculate_pro_rata(
            booking_id,
            request.args.get('actual_start_date'),
            request.args.get('actual_end_date')
        )
        return api_success(data=result)

    @bp.route('/purchase-orders/eligible-bookings', methods=['GET'])
    def eligible_bookings_route():
        """Bookings that can be settled (optional ?customer_id=)."""
        bookings = get_bookings_eligible_for_po(
            customer_id=request.args.get('customer_id', type=int)
        )
        return api_success(data=bookings, count=len(bookings))

    @bp.route('/purchase-orders/<int:po_id>', methods=['GET'])
    def get_purchase_order(po_id):
        """Get single purchase order."""
        purchase_order = get_purchase_order_by_id(po_id)
        if not purchase_order:
            return api_error(get_message('po_not_found'), 404)
        return api_success(data=purchase_order)

    @bp.route('/purchase-orders/<int:po_id>', methods=['PUT', 'PATCH'])
    def update_purchase_order_route(po_id):
        """Partially update actual dates, value or notes."""
        update_purchase_order(po_id, get_json_body(), updated_by=current_actor())
        return api_success(data=get_purchase_order_by_id(po_id),
                           message=get_message('po_updated'))

    @bp.route('/purchase-orders/<int:po_id>', methods=['DELETE'])
    def delete_purchase_order_route(po_id):
        """Delete a purchase order; its booking returns to 'completed'."""
        delete_purchase_order(po_id, updated_by=current_actor())
        return api_success(message=get_message('po_deleted'))
