"""
Database seed data.
Demo inventory for fresh installations (customers and billboards only).
"""


def seed_database(db):
    """Insert demo customers and billboards."""

    # 1. Customers
    customers_data = [
        ('Acme Beverages', 'Priya Nair', 'media@acme.example', '+91 98200 00001'),
        ('Northwind Telecom', 'Rahul Mehta', 'ads@northwind.example', '+91 98200 00002'),
    ]

    for name, contact_person, email, phone in customers_data:
        db.execute('''
            INSERT INTO customers (name, contact_person, email, phone)
            VALUES (?, ?, ?, ?)
        ''', (name, contact_person, email, phone))

    # 2. Billboards (code, name, type, slot_count, rate_per_day, address)
    billboards_data = [
        ('BB-STA-001', 'Ring Road Gantry', 'static', None, '1500.00', 'Ring Road, Sector 4'),
        ('BB-STA-002', 'Airport Expressway', 'static', None, '2500.00', 'Airport Expressway KM 12'),
        ('BB-DIG-001', 'Central Mall LED', 'digital', 6, '4000.00', 'Central Mall Atrium'),
        ('BB-DIG-002', 'Metro Junction Screen', 'digital', 10, '3200.00', 'Metro Junction Exit 2'),
    ]

    for code, name, board_type, slot_count, rate, address in billboards_data:
        db.execute('''
            INSERT INTO billboards (code, name, type, slot_count, rate_per_day, address)
            VALUES (?, ?, ?, ?, ?, ?)
        ''', (code, name, board_type, slot_count, rate, address))
