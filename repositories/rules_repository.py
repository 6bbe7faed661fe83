import uuid

from db import get_db
from models.records import Rule

RULE_COLUMNS = """
    id, rule_type, kind, amount, periodicity, months_csv,
    day_of_month, end_date, complement, provider
"""


def _months_from_csv(months_csv):
    # An empty stored CSV means the attribute was never set
    if not months_csv:
        return None
    months = []
    for part in months_csv.split(","):
        part = part.strip()
        if part.isdecimal():
            months.append(int(part))
    return months


def _months_to_csv(months):
    if months is None:
        return None
    return ",".join(str(m) for m in sorted(set(months)))


def _row_to_rule(row):
    return Rule(
        id=row[0],
        rule_type=row[1],
        kind=row[2],
        amount=row[3],
        periodicity=row[4],
        months=_months_from_csv(row[5]),
        day=row[6],
        end_date=row[7],
        complement=row[8],
        provider=row[9],
    )


def insert_rule(conn, rule_type, kind, amount, periodicity=None, months=None,
                day=None, end_date=None, complement=None, provider=None):
    """
    Insert a new income or expense rule.

    Args:
        conn: Database connection.
        rule_type: 'income' or 'expense'.
        months: Optional iterable of month numbers; stored as CSV.

    Returns:
        The stored Rule.
    """
    rule_id = str(uuid.uuid4())
    conn.execute(
        f"INSERT INTO rules ({RULE_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
        (rule_id, rule_type, kind, amount, periodicity, _months_to_csv(months),
         day, end_date, complement, provider)
    )
    return get_rule_by_id(conn, rule_id)


def get_all_rules(conn=None):
    """
    Return every rule, incomes first, in insertion order.

    Args:
        conn: Optional database connection. If not provided, opens a new one.
    """
    own_conn = False
    if conn is None:
        conn = get_db()
        own_conn = True

    try:
        rows = conn.execute(
            f"SELECT {RULE_COLUMNS} FROM rules ORDER BY rule_type DESC, created_at, id"
        ).fetchall()
        return [_row_to_rule(r) for r in rows]
    finally:
        if own_conn:
            conn.close()


def get_rules_by_type(conn, rule_type):
    rows = conn.execute(
        f"SELECT {RULE_COLUMNS} FROM rules WHERE rule_type = ? ORDER BY created_at, id",
        (rule_type,)
    ).fetchall()
    return [_row_to_rule(r) for r in rows]


def get_rule_by_id(conn, rule_id):
    """
    Return a single rule by ID, or None if not found.
    """
    row = conn.execute(
        f"SELECT {RULE_COLUMNS} FROM rules WHERE id = ?",
        (rule_id,)
    ).fetchone()

    if row:
        return _row_to_rule(row)
    return None


def delete_rule(conn, rule_id):
    """
    Delete a rule by ID. Occurrences already generated from it stay until
    the next projection of their month.
    """
    conn.execute(
        "DELETE FROM rules WHERE id = ?",
        (rule_id,)
    )
