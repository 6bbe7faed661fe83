### Forecast service chains month projections over a horizon and builds the daily balance curve of a month.
import os
import logging
from collections import defaultdict
from datetime import date

import duckdb

from models.projection_dto import DailyProjection, MonthProjection
from repositories.occurrences_repository import (
    get_occurrences,
    find_balance,
    insert_occurrence,
    update_occurrence_amount,
)
from services.projection_service import project_incomes, project_expenses, projection_lock
from utils.dates import month_key as to_month_key, start_of_month, add_months, days_in_month

FORECAST_HORIZON = int(os.getenv("FORECAST_HORIZON", "12"))
AUTO_BALANCE_TITLE = "Forecast opening balance"


def fetch_month_occurrences(conn, month_key, kind):
    """Occurrences of a month and kind; a failed fetch counts as an empty month."""
    try:
        return get_occurrences(conn, month_key, kind=kind)
    except duckdb.Error:
        logging.exception(f"Could not fetch {kind} occurrences for {month_key}, treating as empty")
        return []


def upsert_auto_balance(conn, month_key, month_date, amount):
    """Create or update the generated opening-balance occurrence of a month."""
    existing = find_balance(conn, month_key, is_manual=False)
    if existing:
        update_occurrence_amount(conn, existing.id, amount, month_date)
        return existing.id

    created = insert_occurrence(
        conn,
        date=month_date,
        amount=amount,
        kind="balance",
        title=AUTO_BALANCE_TITLE,
        month_key=month_key,
        is_manual=False,
    )
    return created.id


def _materialize_month(conn, month_date, month_key, opening_balance):
    with projection_lock:
        try:
            project_incomes(conn, month_date)
            project_expenses(conn, month_date)
            upsert_auto_balance(conn, month_key, month_date, opening_balance)
        except duckdb.Error:
            logging.exception(f"Could not materialize {month_key}, using stored occurrences as is")


def build_projections(conn, horizon=None, base_initial_balance=0.0, reference_date=None):
    """
    Chain ``horizon`` month summaries starting at the month of ``reference_date``.

    The end balance of each month is the start balance of the next. Month 0 is
    read as stored (its occurrences were materialized explicitly and may
    carry manual edits); every later month is re-projected from the rules
    and gets a generated opening-balance occurrence equal to its start
    balance. The horizon ends early at December 9999.
    """
    if horizon is None:
        horizon = FORECAST_HORIZON
    if reference_date is None:
        reference_date = date.today()

    start_month = start_of_month(reference_date)
    running_start = float(base_initial_balance)
    projections = []

    for offset in range(horizon):
        try:
            month_date = add_months(start_month, offset)
        except ValueError:
            logging.warning(f"Forecast horizon cut to {offset} months, past the last representable date")
            break
        month_key = to_month_key(month_date)

        if offset > 0:
            _materialize_month(conn, month_date, month_key, running_start)

        incomes = fetch_month_occurrences(conn, month_key, "income")
        expenses = fetch_month_occurrences(conn, month_key, "expense")

        incomes_total = sum(o.amount for o in incomes)
        expenses_total = sum(abs(o.amount) for o in expenses)
        end_balance = running_start + incomes_total - expenses_total

        projections.append(MonthProjection(
            month_index=offset,
            month_date=month_date,
            month_key=month_key,
            start_balance=running_start,
            incomes_total=incomes_total,
            expenses_total=expenses_total,
            end_balance=end_balance,
        ))
        running_start = end_balance

    return projections


def compute_forecast_series(month_date, incomes, expenses, start_balance):
    """
    Yield one DailyProjection per calendar day of the month of ``month_date``.

    An occurrence dated on day d is already reflected in day d's balance.
    Occurrences dated outside the month are ignored.
    """
    deltas = defaultdict(float)
    for occ in incomes:
        deltas[occ.date] += occ.amount
    for occ in expenses:
        deltas[occ.date] -= abs(occ.amount)

    first = start_of_month(month_date)
    balance = float(start_balance)

    for day_number in range(1, days_in_month(first.year, first.month) + 1):
        day = first.replace(day=day_number)
        if day in deltas:
            balance += deltas[day]
        yield DailyProjection(date=day, projected_balance=balance)
