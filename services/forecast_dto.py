from dataclasses import dataclass, asdict
from typing import List


@dataclass
class ForecastDayDTO:
    """Single day in the forecast timeline."""
    date: str  # ISO format YYYY-MM-DD
    projected_balance: float


@dataclass
class MonthProjectionDTO:
    month_index: int
    month_date: str  # ISO format
    month_key: str
    start_balance: float
    incomes_total: float
    expenses_total: float
    end_balance: float

    @classmethod
    def from_projection(cls, projection):
        return cls(
            month_index=projection.month_index,
            month_date=projection.month_date.isoformat(),
            month_key=projection.month_key,
            start_balance=projection.start_balance,
            incomes_total=projection.incomes_total,
            expenses_total=projection.expenses_total,
            end_balance=projection.end_balance,
        )


@dataclass
class DashboardResponseDTO:
    """Dashboard figures for the selected month plus the whole horizon."""
    month_index: int
    month_key: str
    initial_balance: float
    current_balance: float
    forecast: float
    fixed_incomes: float
    fixed_expenses: float
    days_left: int
    timeline: List[ForecastDayDTO]
    projections: List[MonthProjectionDTO]

    @classmethod
    def from_figures(cls, figures, projections):
        """Convert DashboardFigures and MonthProjections to a JSON-serializable DTO."""
        return cls(
            month_index=figures.month_index,
            month_key=figures.month_key,
            initial_balance=figures.initial_balance,
            current_balance=figures.current_balance,
            forecast=figures.forecast,
            fixed_incomes=figures.fixed_incomes,
            fixed_expenses=figures.fixed_expenses,
            days_left=figures.days_left,
            timeline=[
                ForecastDayDTO(
                    date=day.date.isoformat(),
                    projected_balance=day.projected_balance
                )
                for day in figures.timeline
            ],
            projections=[MonthProjectionDTO.from_projection(p) for p in projections],
        )

    def to_dict(self):
        return asdict(self)


def occurrence_to_dict(occurrence):
    return {
        "id": occurrence.id,
        "date": occurrence.date.isoformat(),
        "amount": occurrence.amount,
        "kind": occurrence.kind,
        "title": occurrence.title,
        "month_key": occurrence.month_key,
        "is_manual": occurrence.is_manual,
    }


def rule_to_dict(rule):
    return {
        "id": rule.id,
        "rule_type": rule.rule_type,
        "kind": rule.kind,
        "amount": rule.amount,
        "periodicity": rule.periodicity,
        "months": rule.months,
        "day": rule.day,
        "end_date": rule.end_date.isoformat() if rule.end_date else None,
        "complement": rule.complement,
        "provider": rule.provider,
    }
