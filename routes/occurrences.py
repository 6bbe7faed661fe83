from fastapi import APIRouter, Form, Query
from db import get_db
from services.occurrence_service import (
    add_manual_occurrence,
    set_opening_balance,
    list_month_occurrences,
    remove_occurrence,
)
from services.forecast_dto import occurrence_to_dict
from utils.dates import parse_iso_date, parse_month_key
from utils.money import parse_money

router = APIRouter()


# -------------------------
# MANUAL ENTRIES
# -------------------------

@router.post("/occurrences/manual")
def add_manual_entry(
    kind: str = Form(...),
    date: str = Form(...),
    amount: str = Form(...),
    title: str = Form(...),
    note: str = Form(""),
):
    """
    Handles the quick-add form: a one-off income or expense on a given date.
    """
    try:
        on_date = parse_iso_date(date)
        value = float(parse_money(amount))
    except ValueError as e:
        return {"success": False, "error": str(e)}

    conn = get_db()
    try:
        occurrence = add_manual_occurrence(
            conn, kind=kind, amount=value, on_date=on_date, title=title, note=note
        )
    except ValueError as e:
        return {"success": False, "error": str(e)}
    finally:
        conn.close()

    return {"success": True, "occurrence": occurrence_to_dict(occurrence)}


@router.post("/occurrences/balance")
def set_month_balance(
    month_key: str = Form(...),
    amount: str = Form(...),
    note: str = Form(""),
):
    """
    Sets the opening balance of a month, replacing a previous manual one.
    """
    try:
        month_date = parse_month_key(month_key)
        value = float(parse_money(amount))
    except ValueError as e:
        return {"success": False, "error": str(e)}

    conn = get_db()
    try:
        occurrence = set_opening_balance(conn, month_date, value, note=note)
    finally:
        conn.close()

    return {"success": True, "occurrence": occurrence_to_dict(occurrence)}


# -------------------------
# READ / DELETE
# -------------------------

@router.get("/occurrences")
def get_occurrences(month_key: str = Query(...), kind: str = Query(None)):
    conn = get_db()
    try:
        occurrences = list_month_occurrences(conn, month_key, kind=kind)
    finally:
        conn.close()

    return {"occurrences": [occurrence_to_dict(o) for o in occurrences]}


@router.delete("/occurrences/{occurrence_id}")
def delete_occurrence(occurrence_id: str):
    conn = get_db()
    try:
        removed = remove_occurrence(conn, occurrence_id)
    finally:
        conn.close()

    if not removed:
        return {"success": False, "error": "Occurrence not found"}
    return {"success": True}
