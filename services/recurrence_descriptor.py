"""
Recurrence descriptor: the ``complement`` mini-language carried by rules.

A complement is a ``;``-separated list of ``key=value`` segments::

    mois=1,4,7,10;jour=15;comment=Taxe%20fonci%C3%A8re

``mois``/``months`` give the months a rule may fire in, ``jour``/``day`` the
target day of month, ``comment`` a percent-encoded free text. Older rows only
carry this string; newer ones also have structured ``months``/``day`` columns,
which win when present.

Parsing never raises: unknown keys and malformed values are ignored.
"""
from dataclasses import dataclass
from typing import FrozenSet, Optional, Tuple
from urllib.parse import quote, unquote

MONTHS_KEYS = ("mois", "months")
DAY_KEYS = ("jour", "day")
COMMENT_KEY = "comment"

MONTHLY_TOKENS = {"monthly", "mensuel"}
ENUMERATED_TOKENS = {
    "bimonthly", "bimestriel",
    "quarterly", "trimestriel",
    "semiannual", "semestriel",
    "annual", "annuel",
    "one-off", "ponctuel",
}


@dataclass(frozen=True)
class Complement:
    months: Tuple[int, ...] = ()
    day: Optional[int] = None
    comment: Optional[str] = None


@dataclass(frozen=True)
class Monthly:
    def fires_in(self, month: int) -> bool:
        return True


@dataclass(frozen=True)
class EnumeratedMonths:
    months: FrozenSet[int] = frozenset()

    def fires_in(self, month: int) -> bool:
        return month in self.months


def _parse_months(raw: str) -> Tuple[int, ...]:
    months = set()
    for part in raw.split(","):
        part = part.strip()
        if part.isdecimal() and 1 <= int(part) <= 12:
            months.add(int(part))
    return tuple(sorted(months))


def _parse_day(raw: str) -> Optional[int]:
    raw = raw.strip()
    if raw.isdecimal() and 1 <= int(raw) <= 31:
        return int(raw)
    return None


def decode_complement(complement: Optional[str]) -> Complement:
    if not complement:
        return Complement()

    months: Tuple[int, ...] = ()
    day = None
    comment = None

    for segment in complement.split(";"):
        if "=" not in segment:
            continue
        key, value = segment.split("=", 1)
        key = key.strip().lower()
        value = value.strip()

        if key in MONTHS_KEYS:
            months = _parse_months(value)
        elif key in DAY_KEYS:
            day = _parse_day(value)
        elif key == COMMENT_KEY:
            comment = unquote(value)

    return Complement(months=months, day=day, comment=comment or None)


def encode_complement(months=None, day: Optional[int] = None, comment: Optional[str] = None) -> str:
    """
    Build a complement string, e.g. ``mois=1,3,6;jour=15``.

    Months are sorted and deduplicated; the day segment is dropped when
    ``day`` is unset or <= 0, the months segment when empty.
    """
    parts = []
    normalized = sorted({m for m in (months or ()) if 1 <= m <= 12})
    if normalized:
        parts.append("mois=" + ",".join(str(m) for m in normalized))
    if day is not None and day > 0:
        parts.append(f"jour={day}")
    if comment:
        # safe="" so ';', '&', '=' and '/' are escaped too
        parts.append(f"{COMMENT_KEY}={quote(comment, safe='')}")
    return ";".join(parts)


def resolve_months(rule) -> Tuple[int, ...]:
    """Structured ``months`` if set and non-empty, else decoded from the complement."""
    if rule.months:
        return tuple(sorted({m for m in rule.months if 1 <= m <= 12}))
    return decode_complement(rule.complement).months


def resolve_day(rule) -> int:
    """Structured ``day`` if > 0, else the complement's ``jour``, else 1."""
    if rule.day is not None and rule.day > 0:
        return rule.day
    decoded = decode_complement(rule.complement).day
    return decoded if decoded else 1


def schedule_for(periodicity: Optional[str], months=()):
    """
    Map a periodicity token to ``Monthly()`` or ``EnumeratedMonths(months)``.
    Unknown or missing tokens give None.
    """
    if not periodicity:
        return None
    token = periodicity.strip().lower()
    if token in MONTHLY_TOKENS:
        return Monthly()
    if token in ENUMERATED_TOKENS:
        return EnumeratedMonths(frozenset(months))
    return None


def is_included(periodicity: Optional[str], months, target_month: int) -> bool:
    schedule = schedule_for(periodicity, months)
    if schedule is None:
        return False
    return schedule.fires_in(target_month)
