from datetime import date

import pytest

from repositories.occurrences_repository import get_occurrences
from repositories.rules_repository import get_rule_by_id
from services.forecast_service import upsert_auto_balance
from services.occurrence_service import (
    add_manual_occurrence,
    list_month_occurrences,
    remove_occurrence,
    set_opening_balance,
)
from services.rule_service import create_rule, list_rules, remove_rule


def test_manual_expense_is_stored_negative(conn):
    occurrence = add_manual_occurrence(conn, kind="expense", amount=42.5,
                                       on_date=date(2025, 2, 14), title="Fleurs", note="Saint-Valentin")

    assert occurrence.amount == -42.5
    assert occurrence.month_key == "2025-02"
    assert occurrence.is_manual
    assert occurrence.title == "Fleurs - Saint-Valentin"
    assert list_month_occurrences(conn, "2025-02") == [occurrence]


@pytest.mark.parametrize("kwargs", [
    dict(kind="balance", amount=10, title="x"),
    dict(kind="income", amount=0, title="x"),
    dict(kind="expense", amount=-5, title="x"),
    dict(kind="income", amount=5, title="  "),
])
def test_manual_entry_validation(conn, kwargs):
    with pytest.raises(ValueError):
        add_manual_occurrence(conn, on_date=date(2025, 2, 1), **kwargs)


def test_opening_balance_is_upserted_per_month(conn):
    set_opening_balance(conn, date(2025, 6, 18), 300.0)
    updated = set_opening_balance(conn, date(2025, 6, 2), 450.0, note="relevé")

    balances = get_occurrences(conn, "2025-06", kind="balance")
    assert len(balances) == 1
    assert balances[0].id == updated.id
    assert balances[0].amount == 450.0
    assert balances[0].date == date(2025, 6, 1)
    assert balances[0].title == "Opening balance - relevé"


def test_opening_balance_replaces_auto_balance(conn):
    upsert_auto_balance(conn, "2025-06", date(2025, 6, 1), 1200.0)
    upsert_auto_balance(conn, "2025-07", date(2025, 7, 1), 1500.0)
    set_opening_balance(conn, date(2025, 6, 1), 300.0)

    june = get_occurrences(conn, "2025-06", kind="balance")
    assert [(o.is_manual, o.amount) for o in june] == [(True, 300.0)]
    # other months keep their auto balance
    assert [o.amount for o in get_occurrences(conn, "2025-07", kind="balance")] == [1500.0]


def test_remove_occurrence(conn):
    occurrence = add_manual_occurrence(conn, kind="income", amount=5,
                                       on_date=date(2025, 2, 1), title="Cashback")
    assert remove_occurrence(conn, occurrence.id)
    assert not remove_occurrence(conn, occurrence.id)
    assert get_occurrences(conn, "2025-02") == []


def test_create_rule_encodes_complement(conn):
    rule = create_rule(conn, rule_type="expense", kind="Taxe foncière", amount=900.0,
                       periodicity="Annual", months=[10, 10], day=15, comment="Taxe; foncière",
                       provider=" Trésor public ")

    stored = get_rule_by_id(conn, rule.id)
    assert stored.complement == "mois=10;jour=15;comment=Taxe%3B%20fonci%C3%A8re"
    assert stored.months == [10]
    assert stored.day == 15
    assert stored.periodicity == "annual"
    assert stored.provider == "Trésor public"


def test_create_rule_without_months_keeps_attribute_absent(conn):
    rule = create_rule(conn, rule_type="income", kind="Salaire", amount=2000.0,
                       periodicity="monthly", day=1)
    assert rule.months is None
    assert rule.complement == "jour=1"


@pytest.mark.parametrize("kwargs", [
    dict(rule_type="transfer", periodicity="monthly"),
    dict(rule_type="income", periodicity="weekly"),
    dict(rule_type="income", periodicity="monthly", amount=0),
    dict(rule_type="income", periodicity="annual", months=[13]),
    dict(rule_type="income", periodicity="monthly", day=32),
    dict(rule_type="income", periodicity="monthly", end_date=date(2025, 1, 1)),
])
def test_create_rule_validation(conn, kwargs):
    params = dict(kind="Test", amount=10.0)
    params.update(kwargs)
    with pytest.raises(ValueError):
        create_rule(conn, **params)


def test_list_and_remove_rules(conn):
    expense = create_rule(conn, rule_type="expense", kind="Loyer", amount=800.0, periodicity="monthly", day=5)
    income = create_rule(conn, rule_type="income", kind="Salaire", amount=2000.0, periodicity="monthly", day=1)

    assert [r.id for r in list_rules(conn)] == [income.id, expense.id]
    assert remove_rule(conn, expense.id)
    assert not remove_rule(conn, expense.id)
    assert [r.id for r in list_rules(conn)] == [income.id]
