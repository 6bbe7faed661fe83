from models.records import RULE_TYPES
from repositories.rules_repository import (
    insert_rule,
    get_all_rules,
    get_rule_by_id,
    delete_rule,
)
from services.recurrence_descriptor import encode_complement, schedule_for


def create_rule(conn, *, rule_type, kind, amount, periodicity, months=None,
                day=None, comment=None, end_date=None, provider=None):
    """
    Validate and store a rule. The complement is encoded from
    ``months``/``day``/``comment`` and kept next to the structured fields.
    """
    if rule_type not in RULE_TYPES:
        raise ValueError("Type must be income or expense.")
    if not (kind or "").strip():
        raise ValueError("Kind cannot be empty.")
    if amount is None or amount <= 0:
        raise ValueError("Amount must be positive.")
    if schedule_for(periodicity) is None:
        raise ValueError(f"Unknown periodicity: {periodicity}")
    if months and any(m < 1 or m > 12 for m in months):
        raise ValueError("Months must be between 1 and 12.")
    if day is not None and not 1 <= day <= 31:
        raise ValueError("Day must be between 1 and 31.")
    if rule_type == "income" and (end_date or provider):
        raise ValueError("End date and provider only apply to expense rules.")

    complement = encode_complement(months, day, comment)
    return insert_rule(
        conn,
        rule_type=rule_type,
        kind=kind.strip(),
        amount=amount,
        periodicity=periodicity.strip().lower(),
        months=sorted(set(months)) if months else None,
        day=day,
        end_date=end_date,
        complement=complement or None,
        provider=provider.strip() if provider else None,
    )


def list_rules(conn):
    return get_all_rules(conn)


def remove_rule(conn, rule_id):
    """Delete a rule; returns False when it does not exist."""
    if get_rule_by_id(conn, rule_id) is None:
        return False
    delete_rule(conn, rule_id)
    return True
