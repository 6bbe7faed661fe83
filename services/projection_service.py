import logging
import threading
from datetime import date

from models.records import RULE_TYPES
from repositories.rules_repository import get_rules_by_type
from repositories.occurrences_repository import delete_generated, insert_occurrence
from services.recurrence_descriptor import resolve_months, resolve_day, is_included
from utils.dates import month_key as to_month_key, clamp_day

# Serializes delete-and-recreate runs across request threads. Re-entrant so the
# forecaster can hold it around a whole month materialization.
projection_lock = threading.RLock()


def _occurrence_for(rule, kind, year, month):
    """Date, signed amount and title of ``rule`` in (year, month), or None."""
    if not is_included(rule.periodicity, resolve_months(rule), month):
        return None

    occurrence_date = date(year, month, clamp_day(resolve_day(rule), year, month))

    if kind == "expense":
        if rule.end_date and occurrence_date > rule.end_date:
            return None
        return occurrence_date, -abs(rule.amount), rule.provider or rule.kind

    return occurrence_date, abs(rule.amount), rule.kind


def project_month(conn, target_date: date, kind: str) -> int:
    """Regenerate the rule-driven occurrences of ``kind`` for one month.

    Every generated (``is_manual = FALSE``) occurrence of the month and kind is
    deleted and recreated from the current rules; manual occurrences are never
    touched. Deletions and inserts run in one transaction under
    ``projection_lock``: overlapping runs cannot double-generate and a failed
    run commits nothing. Re-running with unchanged rules yields the same set.
    Store errors propagate to the caller.

    Returns the number of occurrences generated.
    """
    if kind not in RULE_TYPES:
        raise ValueError(f"Cannot project occurrences of kind {kind!r}")

    year, month = target_date.year, target_date.month
    month_key = to_month_key(target_date)

    with projection_lock:
        conn.begin()
        try:
            removed = delete_generated(conn, month_key, kind)

            generated = 0
            for rule in get_rules_by_type(conn, kind):
                occurrence = _occurrence_for(rule, kind, year, month)
                if occurrence is None:
                    continue
                occurrence_date, amount, title = occurrence
                insert_occurrence(
                    conn,
                    date=occurrence_date,
                    amount=amount,
                    kind=kind,
                    title=title,
                    month_key=month_key,
                    is_manual=False,
                )
                generated += 1

            conn.commit()
        except Exception:
            conn.rollback()
            logging.exception(f"Projection of {kind} for {month_key} rolled back")
            raise

    logging.info(f"Projected {kind} for {month_key}: removed {removed}, generated {generated}")
    return generated


def project_incomes(conn, target_date: date) -> int:
    return project_month(conn, target_date, "income")


def project_expenses(conn, target_date: date) -> int:
    return project_month(conn, target_date, "expense")
