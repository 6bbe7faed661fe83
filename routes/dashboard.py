from fastapi import APIRouter, Query
from fastapi.responses import RedirectResponse
from datetime import date
from typing import Optional
from db import get_db
from services.dashboard_service import refresh_dashboard
from services.forecast_dto import DashboardResponseDTO
from utils.dates import parse_iso_date

router = APIRouter()

@router.get("/")
def root():
    return RedirectResponse(url="/dashboard")


@router.get("/dashboard")
def dashboard(
    as_of: Optional[str] = Query(None),
    month_index: int = Query(0, ge=0),
    horizon: Optional[int] = Query(None, ge=1, le=120),
):
    """
    Balance figures for "now" and the selected month of the horizon.

    Month 0 reports the realized balance (occurrences dated up to ``as_of``)
    and the end-of-month estimate; later months report their chained start
    and end balances.
    """
    if as_of:
        try:
            now = parse_iso_date(as_of)
        except ValueError:
            return {"error": "Invalid date format. Use YYYY-MM-DD."}
    else:
        now = date.today()

    conn = get_db()
    try:
        figures, projections = refresh_dashboard(conn, now, horizon=horizon, month_index=month_index)
    finally:
        conn.close()

    if figures is None:
        return {"error": "No month to display"}

    return DashboardResponseDTO.from_figures(figures, projections).to_dict()
