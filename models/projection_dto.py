from dataclasses import dataclass, field
from datetime import date
from typing import List

@dataclass
class DailyProjection:
    date: date
    projected_balance: float

@dataclass
class MonthProjection:
    month_index: int
    month_date: date
    month_key: str
    start_balance: float
    incomes_total: float
    expenses_total: float
    end_balance: float

@dataclass
class CurrentMonthSnapshot:
    """Live figures for the month containing "now"."""
    month_key: str
    opening_balance: float
    fixed_incomes: float
    fixed_expenses: float
    realized_balance: float
    forecast_figure: float
    days_left: int

@dataclass
class DashboardFigures:
    month_index: int
    month_date: date
    month_key: str
    initial_balance: float
    current_balance: float
    forecast: float
    fixed_incomes: float
    fixed_expenses: float
    days_left: int
    timeline: List[DailyProjection] = field(default_factory=list)
