from dataclasses import dataclass
from datetime import date
from typing import List, Optional

RULE_TYPES = ("income", "expense")


@dataclass
class Rule:
    """Recurring income or expense definition, as stored in ``rules``."""
    id: str
    rule_type: str                      # 'income' | 'expense'
    kind: str                           # free-text label, e.g. "Loyer + charges"
    amount: float                       # unsigned magnitude
    periodicity: Optional[str] = None
    months: Optional[List[int]] = None  # None = attribute absent, use complement
    day: Optional[int] = None
    end_date: Optional[date] = None     # expense only
    complement: Optional[str] = None
    provider: Optional[str] = None      # expense only


@dataclass
class Occurrence:
    id: str
    date: date
    amount: float           # signed: positive = inflow
    kind: str               # 'income' | 'expense' | 'balance'
    title: str
    month_key: str          # 'YYYY-MM'
    is_manual: bool
