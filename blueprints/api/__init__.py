"""
JSON API routes package.
Split into smaller modules by entity for maintainability.
"""

from flask import Blueprint, request

# Create the API blueprint
api_bp = Blueprint('api', __name__)


def current_actor():
    """User name recorded in created_by/updated_by (X-User header)."""
    return request.headers.get('X-User') or None


def get_json_body() -> dict:
    """Request JSON body, or an empty dict when absent or not an object."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


# Import and register routes from submodules
from blueprints.api import health
from blueprints.api import billboards
from blueprints.api import customers
from blueprints.api import bookings
from blueprints.api import campaigns
from blueprints.api import purchase_orders

# Register all route functions on the blueprint
health.register_routes(api_bp)
billboards.register_routes(api_bp)
customers.register_routes(api_bp)
bookings.register_routes(api_bp)
campaigns.register_routes(api_bp)
purchase_orders.register_routes(api_bp)
