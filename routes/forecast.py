from dataclasses import asdict
from fastapi import APIRouter, Query
from typing import Optional
from db import get_db
from services.forecast_service import build_projections
from services.projection_service import project_incomes, project_expenses
from services.forecast_dto import MonthProjectionDTO
from utils.dates import parse_iso_date, parse_month_key

router = APIRouter()


@router.post("/projections/{month_key}")
def run_projection(month_key: str):
    """
    Regenerate rule-driven incomes and expenses for one month (YYYY-MM).
    Manual occurrences of the month are kept.
    """
    try:
        month_date = parse_month_key(month_key)
    except ValueError:
        return {"success": False, "error": "Invalid month format. Use YYYY-MM."}

    conn = get_db()
    try:
        incomes = project_incomes(conn, month_date)
        expenses = project_expenses(conn, month_date)
    finally:
        conn.close()

    return {"success": True, "month_key": month_key, "incomes": incomes, "expenses": expenses}


@router.get("/forecast")
def get_forecast(
    horizon: Optional[int] = Query(None, ge=1, le=120),
    as_of: Optional[str] = Query(None),
    initial_balance: float = Query(0.0),
):
    """
    Return chained month projections starting at the month of ``as_of``.

    Query Parameters:
        horizon (optional): number of months, defaults to FORECAST_HORIZON.
        as_of (optional): reference date in ISO format (YYYY-MM-DD), defaults to today.
        initial_balance (optional): start balance of the first month.
    """
    if as_of:
        try:
            reference = parse_iso_date(as_of)
        except ValueError:
            return {"error": "Invalid date format. Use YYYY-MM-DD."}
    else:
        reference = None

    conn = get_db()
    try:
        projections = build_projections(
            conn,
            horizon=horizon,
            base_initial_balance=initial_balance,
            reference_date=reference,
        )
    finally:
        conn.close()

    return {
        "projections": [
            asdict(MonthProjectionDTO.from_projection(p)) for p in projections
        ]
    }
