import threading
import time
from datetime import date, timedelta

import duckdb

import db
from models.records import Occurrence
from repositories.occurrences_repository import get_occurrences
from repositories.rules_repository import insert_rule
from services import forecast_service, projection_service
from services.forecast_service import build_projections, compute_forecast_series, upsert_auto_balance
from services.occurrence_service import add_manual_occurrence
from services.projection_service import project_expenses, project_incomes


def _occ(day, amount, kind):
    return Occurrence(id=f"{kind}-{day}", date=day, amount=amount, kind=kind,
                      title=kind, month_key=f"{day.year}-{day.month:02d}", is_manual=True)


def _summary(p):
    return (p.start_balance, p.incomes_total, p.expenses_total, p.end_balance)


def test_zero_activity_keeps_balance_constant(conn):
    projections = build_projections(conn, horizon=3, base_initial_balance=1000,
                                    reference_date=date(2025, 1, 20))

    assert [p.month_key for p in projections] == ["2025-01", "2025-02", "2025-03"]
    assert [p.month_index for p in projections] == [0, 1, 2]
    assert all(p.start_balance == p.end_balance == 1000 for p in projections)


def test_salary_and_rent_scenario(salary_and_rent):
    conn = salary_and_rent
    reference = date(2025, 3, 10)
    project_incomes(conn, reference)
    project_expenses(conn, reference)

    projections = build_projections(conn, horizon=2, base_initial_balance=0,
                                    reference_date=reference)

    assert _summary(projections[0]) == (0, 2000, 800, 1200)
    assert _summary(projections[1]) == (1200, 2000, 800, 2400)
    assert projections[1].month_date == date(2025, 4, 1)


def test_month_zero_is_not_regenerated(salary_and_rent):
    conn = salary_and_rent
    reference = date(2025, 3, 10)

    # Month 0 was never materialized: nothing is generated for it
    projections = build_projections(conn, horizon=2, base_initial_balance=0,
                                    reference_date=reference)

    assert _summary(projections[0]) == (0, 0, 0, 0)
    assert get_occurrences(conn, "2025-03") == []
    assert _summary(projections[1]) == (0, 2000, 800, 1200)


def test_month_zero_keeps_manual_edits(salary_and_rent):
    conn = salary_and_rent
    reference = date(2025, 3, 10)
    project_incomes(conn, reference)
    project_expenses(conn, reference)
    add_manual_occurrence(conn, kind="expense", amount=100, on_date=date(2025, 3, 12), title="Courses")

    projections = build_projections(conn, horizon=1, base_initial_balance=0,
                                    reference_date=reference)

    assert projections[0].expenses_total == 900
    assert len(get_occurrences(conn, "2025-03", kind="expense", is_manual=True)) == 1


def test_future_months_get_a_single_auto_balance(salary_and_rent):
    conn = salary_and_rent
    reference = date(2025, 3, 10)
    project_incomes(conn, reference)
    project_expenses(conn, reference)

    build_projections(conn, horizon=3, base_initial_balance=0, reference_date=reference)
    build_projections(conn, horizon=3, base_initial_balance=0, reference_date=reference)

    assert get_occurrences(conn, "2025-03", kind="balance") == []
    april = get_occurrences(conn, "2025-04", kind="balance")
    may = get_occurrences(conn, "2025-05", kind="balance")
    assert [(o.amount, o.date, o.is_manual) for o in april] == [(1200, date(2025, 4, 1), False)]
    assert [o.amount for o in may] == [2400]


def test_upsert_auto_balance_updates_in_place(conn):
    first = upsert_auto_balance(conn, "2025-07", date(2025, 7, 1), 10.0)
    second = upsert_auto_balance(conn, "2025-07", date(2025, 7, 1), 42.0)

    balances = get_occurrences(conn, "2025-07", kind="balance")
    assert first == second
    assert [o.amount for o in balances] == [42.0]


def test_overlapping_builds_keep_one_projection_per_month(db_file, monkeypatch):
    setup = db.get_db()
    db.init_db(setup)
    insert_rule(setup, "income", "Salaire", 2000.0, periodicity="monthly", day=1)
    insert_rule(setup, "expense", "Loyer + charges", 800.0, periodicity="monthly", day=5)

    real_get_rules_by_type = projection_service.get_rules_by_type

    def slow_rules(conn, kind):
        rules = real_get_rules_by_type(conn, kind)
        time.sleep(0.05)
        return rules

    monkeypatch.setattr(projection_service, "get_rules_by_type", slow_rules)

    start = threading.Barrier(2, timeout=10)
    errors = []

    def run():
        conn = db.get_db()
        try:
            start.wait()
            build_projections(conn, horizon=2, reference_date=date(2025, 3, 1))
        except Exception as exc:
            errors.append(exc)
        finally:
            conn.close()

    threads = [threading.Thread(target=run) for _ in range(2)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    assert len(get_occurrences(setup, "2025-04", kind="income", is_manual=False)) == 1
    assert len(get_occurrences(setup, "2025-04", kind="expense", is_manual=False)) == 1
    assert len(get_occurrences(setup, "2025-04", kind="balance", is_manual=False)) == 1
    setup.close()


def test_horizon_stops_at_last_representable_month(conn):
    projections = build_projections(conn, horizon=3, base_initial_balance=50,
                                    reference_date=date(9999, 11, 15))

    assert [p.month_key for p in projections] == ["9999-11", "9999-12"]
    assert projections[-1].end_balance == 50


def test_failed_month_fetch_counts_as_empty(salary_and_rent, monkeypatch):
    conn = salary_and_rent
    real_get_occurrences = forecast_service.get_occurrences

    def flaky(conn, month_key, kind=None, is_manual=None):
        if month_key == "2025-05":
            raise duckdb.Error("corrupt page")
        return real_get_occurrences(conn, month_key, kind=kind, is_manual=is_manual)

    monkeypatch.setattr(forecast_service, "get_occurrences", flaky)

    projections = build_projections(conn, horizon=4, base_initial_balance=0,
                                    reference_date=date(2025, 3, 1))

    assert _summary(projections[2]) == (1200, 0, 0, 1200)
    assert _summary(projections[3]) == (1200, 2000, 800, 2400)


def test_forecast_series_covers_each_day_of_a_30_day_month():
    month = date(2025, 4, 15)
    incomes = [_occ(date(2025, 4, 1), 2000.0, "income")]
    expenses = [_occ(date(2025, 4, 5), -800.0, "expense"), _occ(date(2025, 4, 5), 50.0, "expense")]

    series = list(compute_forecast_series(month, incomes, expenses, 100.0))

    assert len(series) == 30
    assert series[0].date == date(2025, 4, 1)
    assert all(b.date - a.date == timedelta(days=1) for a, b in zip(series, series[1:]))
    assert series[0].projected_balance == 2100.0
    assert series[3].projected_balance == 2100.0
    # applied on the day itself, not the next one
    assert series[4].projected_balance == 1250.0
    assert series[-1].projected_balance == 1250.0


def test_forecast_series_without_deltas_is_flat():
    series = list(compute_forecast_series(date(2024, 2, 1), [], [], 75.0))

    assert len(series) == 29
    assert {p.projected_balance for p in series} == {75.0}


def test_forecast_series_ignores_other_months():
    stray = [_occ(date(2025, 5, 1), 999.0, "income")]
    series = list(compute_forecast_series(date(2025, 4, 1), stray, [], 0.0))
    assert series[-1].projected_balance == 0.0


def test_forecast_series_is_single_pass():
    series = compute_forecast_series(date(2025, 4, 1), [], [], 0.0)
    assert len(list(series)) == 30
    assert list(series) == []


def test_forecast_series_for_the_last_month_of_the_calendar():
    series = list(compute_forecast_series(date(9999, 12, 20), [_occ(date(9999, 12, 31), 10.0, "income")], [], 0.0))

    assert len(series) == 31
    assert series[-1].date == date(9999, 12, 31)
    assert series[-1].projected_balance == 10.0
