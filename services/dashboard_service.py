import logging
from datetime import date

import duckdb

from models.projection_dto import CurrentMonthSnapshot, DashboardFigures
from repositories.occurrences_repository import get_occurrences
from services.forecast_service import (
    build_projections,
    compute_forecast_series,
    fetch_month_occurrences,
)
from utils.dates import month_key as to_month_key, days_in_month


def days_left_in_month(now: date) -> int:
    return max(0, days_in_month(now.year, now.month) - now.day)


def compute_current_month(conn, now: date) -> CurrentMonthSnapshot:
    """Realized and forecast balance for the month containing ``now``.

    Occurrences dated on or before ``now`` count as realized. The opening
    balance is the sum of the month's balance occurrences; once a manual
    opening balance exists, auto balances left from when the month was in
    the future are ignored.
    """
    month_key = to_month_key(now)
    incomes = get_occurrences(conn, month_key, kind="income")
    expenses = get_occurrences(conn, month_key, kind="expense")
    balances = get_occurrences(conn, month_key, kind="balance")

    manual_balances = [o for o in balances if o.is_manual]
    opening_balance = sum(o.amount for o in (manual_balances or balances))
    past_incomes = sum(o.amount for o in incomes if o.date <= now)
    past_expenses = sum(abs(o.amount) for o in expenses if o.date <= now)
    future_incomes = sum(o.amount for o in incomes if o.date > now)
    future_expenses = sum(abs(o.amount) for o in expenses if o.date > now)

    realized = opening_balance + past_incomes - past_expenses

    return CurrentMonthSnapshot(
        month_key=month_key,
        opening_balance=opening_balance,
        fixed_incomes=past_incomes + future_incomes,
        fixed_expenses=past_expenses + future_expenses,
        realized_balance=realized,
        forecast_figure=realized + future_incomes - future_expenses,
        days_left=days_left_in_month(now),
    )


def _empty_snapshot(now: date) -> CurrentMonthSnapshot:
    return CurrentMonthSnapshot(
        month_key=to_month_key(now),
        opening_balance=0.0,
        fixed_incomes=0.0,
        fixed_expenses=0.0,
        realized_balance=0.0,
        forecast_figure=0.0,
        days_left=days_left_in_month(now),
    )


def select_month(conn, projections, month_index, current: CurrentMonthSnapshot):
    """Figures shown when paging to ``month_index`` of the horizon.

    Month 0 shows the live realized/forecast split; later months show their
    chained start and end balances. The index is clamped to the horizon.
    """
    if not projections:
        return None

    month_index = max(0, min(len(projections) - 1, month_index))
    proj = projections[month_index]

    incomes = fetch_month_occurrences(conn, proj.month_key, "income")
    expenses = fetch_month_occurrences(conn, proj.month_key, "expense")
    timeline = list(compute_forecast_series(proj.month_date, incomes, expenses, proj.start_balance))

    if month_index == 0:
        return DashboardFigures(
            month_index=0,
            month_date=proj.month_date,
            month_key=proj.month_key,
            initial_balance=proj.start_balance,
            current_balance=current.realized_balance,
            forecast=current.forecast_figure,
            fixed_incomes=current.fixed_incomes,
            fixed_expenses=current.fixed_expenses,
            days_left=current.days_left,
            timeline=timeline,
        )

    return DashboardFigures(
        month_index=month_index,
        month_date=proj.month_date,
        month_key=proj.month_key,
        initial_balance=proj.start_balance,
        current_balance=proj.start_balance,
        forecast=proj.end_balance,
        fixed_incomes=proj.incomes_total,
        fixed_expenses=proj.expenses_total,
        days_left=days_in_month(proj.month_date.year, proj.month_date.month),
        timeline=timeline,
    )


def refresh_dashboard(conn, now: date, horizon=None, month_index=0):
    """
    Recompute the dashboard for ``now``: live figures for the current month,
    the chained horizon seeded with the current opening balance, and the
    selected month's figures.

    Never raises on store failures; those are logged and zeroed figures are
    returned instead.

    Returns (figures, projections).
    """
    try:
        current = compute_current_month(conn, now)
    except duckdb.Error:
        logging.exception(f"Could not read current month figures for {to_month_key(now)}")
        current = _empty_snapshot(now)

    try:
        projections = build_projections(
            conn,
            horizon=horizon,
            base_initial_balance=current.opening_balance,
            reference_date=now,
        )
    except duckdb.Error:
        logging.exception("Could not build month projections")
        projections = []

    figures = select_month(conn, projections, month_index, current)
    return figures, projections
