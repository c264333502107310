"""Table and index definitions for the local database (schema version 1)."""

CUSTOMER_COLUMNS = (
    "id",
    "tracking_code",
    "full_name",
    "email",
    "phone",
    "passport_number",
    "consulate",
    "visa_type",
    "created_at",
    "status",
    "appointment_date",
    "appointment_time",
    "invoice_id",
    "notes",
)

INVOICE_COLUMNS = (
    "id",
    "tracking_code",
    "amount",
    "currency",
    "description",
    "created_at",
    "status",
)

PAYMENT_COLUMNS = (
    "id",
    "tracking_code",
    "invoice_id",
    "amount",
    "payment_method",
    "payment_date",
    "notes",
)

TABLE_COLUMNS = {
    "customers": CUSTOMER_COLUMNS,
    "invoices": INVOICE_COLUMNS,
    "payments": PAYMENT_COLUMNS,
}

# Money is kept as decimal text and timestamps as ISO 8601 text so values
# read back compare equal to what was written.
SCHEMA_V1 = (
    """
    CREATE TABLE IF NOT EXISTS store_meta (
        name TEXT NOT NULL,
        version INTEGER NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS customers (
        id TEXT PRIMARY KEY,
        tracking_code TEXT NOT NULL,
        full_name TEXT NOT NULL,
        email TEXT NOT NULL,
        phone TEXT NOT NULL,
        passport_number TEXT NOT NULL,
        consulate TEXT NOT NULL,
        visa_type TEXT NOT NULL,
        created_at TEXT NOT NULL,
        status TEXT NOT NULL,
        appointment_date TEXT,
        appointment_time TEXT,
        invoice_id TEXT,
        notes TEXT
    )
    """,
    "CREATE UNIQUE INDEX IF NOT EXISTS idx_customers_tracking_code ON customers (tracking_code)",
    "CREATE UNIQUE INDEX IF NOT EXISTS idx_customers_email ON customers (email)",
    "CREATE INDEX IF NOT EXISTS idx_customers_created_at ON customers (created_at)",
    """
    CREATE TABLE IF NOT EXISTS invoices (
        id TEXT PRIMARY KEY,
        tracking_code TEXT NOT NULL,
        amount TEXT NOT NULL,
        currency TEXT NOT NULL,
        description TEXT NOT NULL,
        created_at TEXT NOT NULL,
        status TEXT NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_invoices_tracking_code ON invoices (tracking_code)",
    "CREATE INDEX IF NOT EXISTS idx_invoices_created_at ON invoices (created_at)",
    """
    CREATE TABLE IF NOT EXISTS payments (
        id TEXT PRIMARY KEY,
        tracking_code TEXT NOT NULL,
        invoice_id TEXT NOT NULL,
        amount TEXT NOT NULL,
        payment_method TEXT NOT NULL,
        payment_date TEXT NOT NULL,
        notes TEXT
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_payments_tracking_code ON payments (tracking_code)",
    "CREATE INDEX IF NOT EXISTS idx_payments_payment_date ON payments (payment_date)",
)

# Maps the index name reported by a unique violation to the model field.
UNIQUE_FIELDS = {
    "customers.id": "id",
    "customers.tracking_code": "tracking_code",
    "customers.email": "email",
    "invoices.id": "id",
    "payments.id": "id",
}


def insert_sql(table: str) -> str:
    """Build the INSERT statement for ``table``."""
    columns = TABLE_COLUMNS[table]
    placeholders = ", ".join(f":{c}" for c in columns)
    return f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({placeholders})"


def update_sql(table: str) -> str:
    """Build the full-replace UPDATE statement for ``table`` keyed by id."""
    assignments = ", ".join(f"{c} = :{c}" for c in TABLE_COLUMNS[table] if c != "id")
    return f"UPDATE {table} SET {assignments} WHERE id = :id"
