"""
Campaign API routes.
"""

from flask import request

from models.campaign import (
    CAMPAIGN_SORT_FIELDS,
    add_booking_to_campaign,
    create_campaign,
    delete_campaign,
    get_available_billboards,
    get_bookings_not_in_campaign,
    get_campaign_by_id,
    get_campaigns_filtered,
    remove_booking_from_campaign,
    update_campaign,
)
from utils.api_response import api_success, api_error, api_paginated
from utils.messages import get_message
from utils.pagination import get_pagination_params, get_sort_params
from utils.validators import parse_optional_int
from blueprints.api import current_actor, get_json_body


def register_routes(bp):
    """Register campaign routes on the blueprint."""

    @bp.route('/campaigns', methods=['GET'])
    def list_campaigns():
        """
        List campaigns.

        Query params:
            customer_id, search, start_date_from, start_date_to,
            sort_by, sort_order, page, per_page
        """
        page, per_page = get_pagination_params()
        sort_by, sort_order = get_sort_params(CAMPAIGN_SORT_FIELDS)

        result = get_campaigns_filtered(
            customer_id=request.args.get('customer_id', type=int),
            search=request.args.get('search'),
            start_date_from=request.args.get('start_date_from'),
            start_date_to=request.args.get('start_date_to'),
            sort_by=sort_by,
            sort_order=sort_order,
            page=page,
            per_page=per_page
        )
        return api_paginated(result)

    @bp.route('/campaigns', methods=['POST'])
    def create_campaign_route():
        """
        Create a campaign with one booking per billboard selection.

        Request body:
            name, customer_id, start_date, end_date (required)
            billboards: [{billboard_id, slot_number?}] (required)
            description (optional)
        """
        result = create_campaign(get_json_body(), created_by=current_actor())
        campaign = get_campaign_by_id(result['id'])
        return api_success(data=campaign, message=get_message('campaign_created'), status=201)

    @bp.route('/campaigns/eligible-bookings', methods=['GET'])
    def eligible_bookings():
        """
        Customer bookings that can be added to a campaign.

        Query params:
            customer_id (required), exclude_campaign_id
        """
        customer_id = parse_optional_int(request.args.get('customer_id'), 'customer_id')
        if not customer_id:
            return api_error('customer_id is required', 400)

        bookings = get_bookings_not_in_campaign(
            customer_id,
            exclude_campaign_id=request.args.get('exclude_campaign_id', type=int)
        )
        return api_success(data=bookings, count=len(bookings))

    @bp.route('/campaigns/available-billboards', methods=['GET'])
    def campaign_available_billboards():
        """Billboard availability for a prospective campaign period."""
        billboards = get_available_billboards(
            request.args.get('start_date'),
            request.args.get('end_date')
        )
        return api_success(data=billboards)

    @bp.route('/campaigns/<int:campaign_id>', methods=['GET'])
    def get_campaign(campaign_id):
        """Get campaign with its bookings."""
        campaign = get_campaign_by_id(campaign_id)
        if not campaign:
            return api_error(get_message('campaign_not_found'), 404)
        return api_success(data=campaign)

    @bp.route('/campaigns/<int:campaign_id>', methods=['PUT', 'PATCH'])
    def update_campaign_route(campaign_id):
        """Partially update campaign details."""
        update_campaign(campaign_id, get_json_body(), updated_by=current_actor())
        return api_success(data=get_campaign_by_id(campaign_id),
                           message=get_message('campaign_updated'))

    @bp.route('/campaigns/<int:campaign_id>', methods=['DELETE'])
    def delete_campaign_route(campaign_id):
        """Delete a campaign without bookings."""
        delete_campaign(campaign_id)
        return api_success(message=get_message('campaign_deleted'))

    @bp.route('/campaigns/<int:campaign_id>/bookings', methods=['POST'])
    def add_booking_route(campaign_id):
        """
        Add an existing booking to the campaign.

        Request body:
            booking_id (required)
        """
        booking_id = parse_optional_int(get_json_body().get('booking_id'), 'booking_id')
        if not booking_id:
            return api_error('booking_id is required', 400)

        totals = add_booking_to_campaign(campaign_id, booking_id)
        return api_success(data=totals, message=get_message('campaign_booking_added'))

    @bp.route('/campaigns/<int:campaign_id>/bookings/<int:booking_id>', methods=['DELETE'])
    def remove_booking_route(campaign_id, booking_id):
        """Remove a booking from the campaign."""
        totals = remove_booking_from_campaign(campaign_id, booking_id)
        return api_success(data=totals, message=get_message('campaign_booking_removed'))
