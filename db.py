import os
import duckdb
import logging

DB_FILE = os.getenv("BUDGET_DB_FILE", "budget.duckdb")
LOG_FILE = os.getenv("BUDGET_LOG_FILE", "budget.log")

# -----------------------------
# Logging
# -----------------------------
logging.basicConfig(
    filename=LOG_FILE,
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s"
)

def log_info(msg):
    logging.info(msg)
    print(msg)

def log_error(msg):
    logging.error(msg)
    print(msg)

# -----------------------------
# Get a DB connection
# -----------------------------
def get_db():
    """
    Returns a new DuckDB connection.
    """
    return duckdb.connect(DB_FILE)

# -----------------------------
# Initialize database schema
# -----------------------------
def init_db(conn=None):
    """
    Ensure the rules and occurrences tables exist.

    Args:
        conn: Optional database connection. If not provided, opens a new one
              and closes it afterwards.
    """
    own_conn = False
    if conn is None:
        conn = get_db()
        own_conn = True

    try:
        # Recurring income / expense definitions
        conn.execute("""
        CREATE TABLE IF NOT EXISTS rules (
            id VARCHAR PRIMARY KEY,
            rule_type VARCHAR NOT NULL CHECK(rule_type IN ('income','expense')),
            kind VARCHAR NOT NULL,
            amount DOUBLE NOT NULL,
            periodicity VARCHAR,
            months_csv VARCHAR,
            day_of_month INTEGER,
            end_date DATE,
            complement VARCHAR,
            provider VARCHAR,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        );
        """)
        log_info("Rules table ensured.")

        # Dated ledger entries, generated or manual
        conn.execute("""
        CREATE TABLE IF NOT EXISTS occurrences (
            id VARCHAR PRIMARY KEY,
            date DATE NOT NULL,
            amount DOUBLE NOT NULL,
            kind VARCHAR NOT NULL CHECK(kind IN ('income','expense','balance')),
            title VARCHAR,
            month_key VARCHAR NOT NULL,
            is_manual BOOLEAN NOT NULL DEFAULT FALSE,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        );
        """)
        log_info("Occurrences table ensured.")

        conn.execute("CREATE INDEX IF NOT EXISTS idx_occ_month_kind ON occurrences(month_key, kind);")
        log_info("Indexes created/ensured.")

    except duckdb.Error as e:
        log_error(f"Error initializing DB: {e}")
        raise
    finally:
        if own_conn:
            conn.close()
            log_info("Database setup complete and connection closed.")
