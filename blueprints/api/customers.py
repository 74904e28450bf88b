"""
Customer API routes.
"""

from flask import request

from models.customer import create_customer, get_all_customers, get_customer_by_id
from utils.api_response import api_success, api_error
from utils.messages import get_message
from utils.validators import sanitize_input
from blueprints.api import get_json_body


def register_routes(bp):
    """Register customer routes on the blueprint."""

    @bp.route('/customers', methods=['GET'])
    def list_customers():
        """List customers (active only unless ?all=true)."""
        active_only = request.args.get('all', '').lower() != 'true'
        customers = get_all_customers(active_only=active_only)
        return api_success(data=customers, count=len(customers))

    @bp.route('/customers', methods=['POST'])
    def create_customer_route():
        """
        Create a customer.

        Request body:
            name (required); contact_person, email, phone, address
        """
        data = get_json_body()
        customer_id = create_customer(
            name=sanitize_input(data.get('name'), 200),
            contact_person=data.get('contact_person'),
            email=data.get('email'),
            phone=data.get('phone'),
            address=data.get('address')
        )
        return api_success(data=get_customer_by_id(customer_id),
                           message=get_message('customer_created'), status=201)

    @bp.route('/customers/<int:customer_id>', methods=['GET'])
    def get_customer(customer_id):
        """Get single customer."""
        customer = get_customer_by_id(customer_id)
        if not customer:
            return api_error(get_message('customer_not_found'), 404)
        return api_success(data=customer)
