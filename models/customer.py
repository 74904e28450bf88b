"""
Customer data access functions.
Minimal customer records referenced by bookings and campaigns.
"""

from database import get_db
from .errors import ValidationError


def create_customer(name: str, contact_person: str = None, email: str = None,
                    phone: str = None, address: str = None) -> int:
    """
    Create new customer.

    Args:
        name: Company or person name (required)
        contact_person: Main contact
        email: Contact email
        phone: Contact phone
        address: Postal address

    Returns:
        New customer ID

    Raises:
        ValidationError: If name is missing
    """
    if not name or not name.strip():
        raise ValidationError('Customer name is required')

    db = get_db()
    cursor = db.cursor()
    cursor.execute('''
        INSERT INTO customers (name, contact_person, email, phone, address)
        VALUES (?, ?, ?, ?, ?)
    ''', (name.strip(), contact_person, email, phone, address))
    db.commit()
    return cursor.lastrowid


def get_customer_by_id(customer_id: int) -> dict:
    """
    Get customer by ID.

    Args:
        customer_id: Customer ID

    Returns:
        Customer dict or None if not found
    """
    db = get_db()
    cursor = db.cursor()
    cursor.execute('SELECT * FROM customers WHERE id = ?', (customer_id,))
    row = cursor.fetchone()
    return dict(row) if row else None


def get_all_customers(active_only: bool = True) -> list:
    """Get customers ordered by name."""
    db = get_db()
    cursor = db.cursor()
    query = 'SELECT * FROM customers'
    if active_only:
        query += ' WHERE active = 1'
    query += ' ORDER BY name'
    cursor.execute(query)
    return [dict(row) for row in cursor.fetchall()]
