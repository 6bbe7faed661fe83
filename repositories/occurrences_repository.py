import uuid

from models.records import Occurrence

# -----------------------------
# Occurrences Repository
# -----------------------------

OCCURRENCE_COLUMNS = "id, date, amount, kind, title, month_key, is_manual"


def _row_to_occurrence(row):
    return Occurrence(
        id=row[0],
        date=row[1],
        amount=row[2],
        kind=row[3],
        title=row[4] or "",
        month_key=row[5],
        is_manual=bool(row[6]),
    )


def get_occurrences(conn, month_key, kind=None, is_manual=None):
    """
    Returns occurrences of a month, sorted by date.
    - conn: DuckDB connection
    - kind: optional, 'income' | 'expense' | 'balance'
    - is_manual: optional, restrict to manual (True) or generated (False) rows
    """
    query = f"SELECT {OCCURRENCE_COLUMNS} FROM occurrences WHERE month_key = ?"
    params = [month_key]

    if kind is not None:
        query += " AND kind = ?"
        params.append(kind)

    if is_manual is not None:
        query += " AND is_manual = ?"
        params.append(is_manual)

    query += " ORDER BY date, id"

    rows = conn.execute(query, params).fetchall()
    return [_row_to_occurrence(r) for r in rows]


def get_occurrence_by_id(conn, occurrence_id):
    row = conn.execute(
        f"SELECT {OCCURRENCE_COLUMNS} FROM occurrences WHERE id = ?",
        (occurrence_id,)
    ).fetchone()
    return _row_to_occurrence(row) if row else None


def insert_occurrence(conn, date, amount, kind, title, month_key, is_manual):
    """
    Inserts an occurrence and returns it.
    """
    occurrence = Occurrence(
        id=str(uuid.uuid4()),
        date=date,
        amount=amount,
        kind=kind,
        title=title,
        month_key=month_key,
        is_manual=is_manual,
    )
    conn.execute(
        f"INSERT INTO occurrences ({OCCURRENCE_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?)",
        (occurrence.id, occurrence.date, occurrence.amount, occurrence.kind,
         occurrence.title, occurrence.month_key, occurrence.is_manual)
    )
    return occurrence


def delete_generated(conn, month_key, kind):
    """
    Deletes every generated (non-manual) occurrence of ``kind`` in a month.
    Returns the number of rows removed.
    """
    existing = conn.execute(
        "SELECT id FROM occurrences WHERE month_key = ? AND kind = ? AND is_manual = FALSE",
        (month_key, kind)
    ).fetchall()

    if existing:
        conn.execute(
            "DELETE FROM occurrences WHERE month_key = ? AND kind = ? AND is_manual = FALSE",
            (month_key, kind)
        )
    return len(existing)


def delete_occurrence(conn, occurrence_id):
    conn.execute(
        "DELETE FROM occurrences WHERE id = ?",
        (occurrence_id,)
    )


def find_balance(conn, month_key, is_manual):
    """
    Returns the first balance occurrence of a month with the given origin,
    or None.
    """
    row = conn.execute(
        f"""
        SELECT {OCCURRENCE_COLUMNS}
        FROM occurrences
        WHERE month_key = ? AND kind = 'balance' AND is_manual = ?
        ORDER BY date, id
        LIMIT 1
        """,
        (month_key, is_manual)
    ).fetchone()
    return _row_to_occurrence(row) if row else None


def update_occurrence_amount(conn, occurrence_id, amount, date, title=None):
    """
    Updates amount and date of an occurrence in place; title only when given.
    """
    if title is None:
        conn.execute(
            "UPDATE occurrences SET amount = ?, date = ? WHERE id = ?",
            (amount, date, occurrence_id)
        )
    else:
        conn.execute(
            "UPDATE occurrences SET amount = ?, date = ?, title = ? WHERE id = ?",
            (amount, date, title, occurrence_id)
        )
