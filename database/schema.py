"""
Database schema definitions.
Table creation, indexes, and structure management.
"""


def drop_tables(db):
    """Drop all existing tables."""
    # Disable foreign key constraints before dropping
    db.execute('PRAGMA foreign_keys = OFF')

    tables = [
        'purchase_orders',
        'bookings',
        'campaigns',
        'sequences',
        'billboards',
        'customers'
    ]

    for table in tables:
        db.execute(f'DROP TABLE IF EXISTS {table}')

    # Re-enable foreign key constraints
    db.execute('PRAGMA foreign_keys = ON')


def create_tables(db):
    """Create all database tables."""

    # 1. Reference data
    db.execute('''
        CREATE TABLE customers (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            contact_person TEXT,
            email TEXT,
            phone TEXT,
            address TEXT,
            active INTEGER DEFAULT 1,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    ''')

    db.execute('''
        CREATE TABLE billboards (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            code TEXT UNIQUE NOT NULL,
            name TEXT NOT NULL,
            type TEXT NOT NULL DEFAULT 'static'
                CHECK (type IN ('static', 'digital')),
            status TEXT NOT NULL DEFAULT 'active'
                CHECK (status IN ('active', 'inactive', 'maintenance')),
            slot_count INTEGER
                CHECK (slot_count IS NULL OR slot_count BETWEEN 1 AND 20),
            rate_per_day TEXT NOT NULL DEFAULT '0.00',
            address TEXT,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            CHECK (type = 'static' OR slot_count IS NOT NULL)
        )
    ''')

    # 2. Reference code counters
    db.execute('''
        CREATE TABLE sequences (
            entity_type TEXT NOT NULL,
            year INTEGER NOT NULL,
            current_value INTEGER NOT NULL DEFAULT 0,
            PRIMARY KEY (entity_type, year)
        )
    ''')

    # 3. Campaigns
    db.execute('''
        CREATE TABLE campaigns (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            reference_code TEXT UNIQUE NOT NULL,
            name TEXT NOT NULL,
            customer_id INTEGER NOT NULL REFERENCES customers(id) ON DELETE RESTRICT,
            description TEXT,
            total_value TEXT NOT NULL DEFAULT '0.00',
            start_date DATE,
            end_date DATE,
            created_by TEXT,
            updated_by TEXT,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    ''')

    # 4. Bookings
    db.execute('''
        CREATE TABLE bookings (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            reference_code TEXT UNIQUE NOT NULL,
            customer_id INTEGER NOT NULL REFERENCES customers(id) ON DELETE RESTRICT,
            billboard_id INTEGER NOT NULL REFERENCES billboards(id) ON DELETE RESTRICT,
            campaign_id INTEGER REFERENCES campaigns(id) ON DELETE SET NULL,
            slot_number INTEGER,
            start_date DATE NOT NULL,
            end_date DATE NOT NULL,
            actual_end_date DATE,
            notional_value TEXT NOT NULL DEFAULT '0.00',
            status TEXT NOT NULL DEFAULT 'created',
            creative_ref TEXT,
            notes TEXT,
            created_by TEXT,
            updated_by TEXT,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            CHECK (start_date <= end_date)
        )
    ''')

    # 5. Purchase orders (1:1 with bookings)
    db.execute('''
        CREATE TABLE purchase_orders (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            po_number TEXT UNIQUE NOT NULL,
            booking_id INTEGER UNIQUE NOT NULL REFERENCES bookings(id) ON DELETE RESTRICT,
            actual_start_date DATE NOT NULL,
            actual_end_date DATE NOT NULL,
            actual_value TEXT NOT NULL,
            adjustment_notes TEXT,
            created_by TEXT,
            updated_by TEXT,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    ''')


def create_indexes(db):
    """Create indexes for query performance."""
    indexes = [
        'CREATE INDEX idx_billboards_status ON billboards(status)',
        'CREATE INDEX idx_billboards_type ON billboards(type)',
        'CREATE INDEX idx_campaigns_customer ON campaigns(customer_id)',
        'CREATE INDEX idx_bookings_customer ON bookings(customer_id)',
        'CREATE INDEX idx_bookings_campaign ON bookings(campaign_id)',
        'CREATE INDEX idx_bookings_billboard_dates ON bookings(billboard_id, start_date, end_date)',
        'CREATE INDEX idx_bookings_status ON bookings(status)',
        'CREATE INDEX idx_purchase_orders_booking ON purchase_orders(booking_id)',
    ]

    for index_sql in indexes:
        db.execute(index_sql)
