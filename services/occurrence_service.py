from models.records import RULE_TYPES
from repositories.occurrences_repository import (
    get_occurrences,
    get_occurrence_by_id,
    insert_occurrence,
    delete_occurrence,
    find_balance,
    update_occurrence_amount,
)
from utils.dates import month_key as to_month_key, start_of_month

OPENING_BALANCE_TITLE = "Opening balance"


def _with_note(title, note):
    note = (note or "").strip()
    return f"{title} - {note}" if note else title


def add_manual_occurrence(conn, *, kind, amount, on_date, title, note=None):
    """Record a user-entered income or expense on ``on_date``.

    ``amount`` is entered positive; expenses are stored negative. Manual
    occurrences are never touched by projection runs.
    """
    if kind not in RULE_TYPES:
        raise ValueError("Kind must be income or expense.")
    amount = float(amount)
    if amount <= 0:
        raise ValueError("Amount must be positive.")
    if not (title or "").strip():
        raise ValueError("Title cannot be empty.")

    return insert_occurrence(
        conn,
        date=on_date,
        amount=amount if kind == "income" else -amount,
        kind=kind,
        title=_with_note(title.strip(), note),
        month_key=to_month_key(on_date),
        is_manual=True,
    )


def set_opening_balance(conn, month_date, amount, note=None):
    """Upsert the single manual opening balance of a month, dated on the 1st.

    The forecaster's auto balance for the month, if any, is removed: a manual
    opening balance replaces it rather than adding to it.
    """
    first_of_month = start_of_month(month_date)
    month_key = to_month_key(first_of_month)
    title = _with_note(OPENING_BALANCE_TITLE, note)

    auto_balance = find_balance(conn, month_key, is_manual=False)
    if auto_balance:
        delete_occurrence(conn, auto_balance.id)

    existing = find_balance(conn, month_key, is_manual=True)
    if existing:
        update_occurrence_amount(conn, existing.id, float(amount), first_of_month, title=title)
        return get_occurrence_by_id(conn, existing.id)

    return insert_occurrence(
        conn,
        date=first_of_month,
        amount=float(amount),
        kind="balance",
        title=title,
        month_key=month_key,
        is_manual=True,
    )


def list_month_occurrences(conn, month_key, kind=None):
    return get_occurrences(conn, month_key, kind=kind)


def remove_occurrence(conn, occurrence_id):
    """Delete an occurrence; returns False when it does not exist."""
    if get_occurrence_by_id(conn, occurrence_id) is None:
        return False
    delete_occurrence(conn, occurrence_id)
    return True
