from datetime import date
from typing import List, Optional

from fastapi import APIRouter
from pydantic import BaseModel

from db import get_db
from services.rule_service import create_rule, list_rules, remove_rule
from services.forecast_dto import rule_to_dict

router = APIRouter()


class RuleCreate(BaseModel):
    rule_type: str
    kind: str
    amount: float
    periodicity: str
    months: Optional[List[int]] = None
    day: Optional[int] = None
    comment: Optional[str] = None
    end_date: Optional[date] = None
    provider: Optional[str] = None


@router.post("/rules")
def add_rule(rule: RuleCreate):
    conn = get_db()
    try:
        created = create_rule(
            conn,
            rule_type=rule.rule_type,
            kind=rule.kind,
            amount=rule.amount,
            periodicity=rule.periodicity,
            months=rule.months,
            day=rule.day,
            comment=rule.comment,
            end_date=rule.end_date,
            provider=rule.provider,
        )
    except ValueError as e:
        return {"success": False, "error": str(e)}
    finally:
        conn.close()

    return {"success": True, "rule": rule_to_dict(created)}


@router.get("/rules")
def get_rules():
    conn = get_db()
    try:
        rules = list_rules(conn)
    finally:
        conn.close()

    return {
        "count": len(rules),
        "rules": [rule_to_dict(r) for r in rules]
    }


@router.delete("/rules/{rule_id}")
def delete_rule(rule_id: str):
    conn = get_db()
    try:
        removed = remove_rule(conn, rule_id)
    finally:
        conn.close()

    if not removed:
        return {"success": False, "error": "Rule not found"}
    return {"success": True}
