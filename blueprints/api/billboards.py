"""
Billboard API routes.
Inventory listing, creation and range availability.
"""

from flask import request

from models.billboard import create_billboard, get_all_billboards, get_billboard_by_id
from models.campaign import get_available_billboards
from utils.api_response import api_success, api_error
from utils.messages import get_message
from blueprints.api import get_json_body


def register_routes(bp):
    """Register billboard routes on the blueprint."""

    @bp.route('/billboards', methods=['GET'])
    def list_billboards():
        """
        List billboards.

        Query params:
            status: active/inactive/maintenance (optional)
            type: static/digital (optional)
        """
        billboards = get_all_billboards(
            status=request.args.get('status'),
            billboard_type=request.args.get('type')
        )
        return api_success(data=billboards, count=len(billboards))

    @bp.route('/billboards', methods=['POST'])
    def create_billboard_route():
        """
        Create a billboard.

        Request body:
            code, name (required); type, rate_per_day, slot_count, status, address
        """
        data = get_json_body()
        billboard_id = create_billboard(
            code=data.get('code'),
            name=data.get('name'),
            billboard_type=data.get('type', 'static'),
            rate_per_day=data.get('rate_per_day', '0'),
            slot_count=data.get('slot_count'),
            status=data.get('status', 'active'),
            address=data.get('address')
        )
        return api_success(data=get_billboard_by_id(billboard_id),
                           message=get_message('billboard_created'), status=201)

    @bp.route('/billboards/available', methods=['GET'])
    def available_billboards():
        """
        Availability of every active billboard over a range.

        Query params:
            start_date, end_date: YYYY-MM-DD (required)
        """
        billboards = get_available_billboards(
            request.args.get('start_date'),
            request.args.get('end_date')
        )
        return api_success(data=billboards)

    @bp.route('/billboards/<int:billboard_id>', methods=['GET'])
    def get_billboard(billboard_id):
        """Get single billboard."""
        billboard = get_billboard_by_id(billboard_id)
        if not billboard:
            return api_error(get_message('billboard_not_found'), 404)
        return api_success(data=billboard)
