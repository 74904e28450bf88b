"""
Pytest configuration and fixtures.
Each test runs against its own SQLite file, never the configured database.
"""

import os
import pytest


@pytest.fixture
def app(tmp_path):
    """Create test application with an isolated database."""
    from app import create_app
    from database import init_db

    db_path = str(tmp_path / 'billboard_ops_test.db')
    os.environ['DATABASE_PATH'] = db_path

    app = create_app('test')
    app.config['TESTING'] = True
    app.config['DATABASE_PATH'] = db_path

    with app.app_context():
        init_db()
        yield app


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture
def inventory(app):
    """
    One customer plus a static and a digital billboard.

    Static: rate 1000.00/day. Digital: 3 slots, rate 400.00/day.
    """
    from models.billboard import create_billboard
    from models.customer import create_customer

    customer_id = create_customer('Acme Beverages', contact_person='Priya Nair')
    other_customer_id = create_customer('Northwind Telecom')
    static_id = create_billboard('BB-STA-T01', 'Ring Road Gantry', 'static',
                                 rate_per_day='1000.00')
    digital_id = create_billboard('BB-DIG-T01', 'Central Mall LED', 'digital',
                                  rate_per_day='400.00', slot_count=3)

    return {
        'customer_id': customer_id,
        'other_customer_id': other_customer_id,
        'static_id': static_id,
        'digital_id': digital_id,
    }


@pytest.fixture
def make_booking(inventory):
    """Factory creating bookings for the inventory customer."""
    from models.booking import create_booking

    def _make(start, end, billboard_id=None, **extra):
        data = {
            'customer_id': inventory['customer_id'],
            'billboard_id': billboard_id or inventory['static_id'],
            'start_date': start,
            'end_date': end,
        }
        data.update(extra)
        return create_booking(data)

    return _make
