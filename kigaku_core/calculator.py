"""calculator
================================================================================
Nine Star Ki (Kyusei Kigaku) star calculation.

Public API (stable)
-------------------
compute(birth_instant) -> StarResult
    Year (Honmei), month (Getsumei) and day (Nichimei) stars for an instant,
    using the process-wide solar-term table.
KigakuCalculator(table, ...).compute(birth_instant) -> StarResult
    Same, over an explicit table (tests, alternative data files).
normalize(value) -> int
    1-based floor modulo onto the nine-star ring [1, 9].
honmei_star(year) / getsumei_star(year_star, month) / nichimei_star(date, tz)
    The closed-form formulas on their own.

Key Concepts
------------
"Honmei"   : year star, from the astrological year (Risshun boundary).
"Getsumei" : month star, year star plus an offset cycling with period 3 over
             the twelve astrological months.
"Nichimei" : day star, a plain 9-day cycle anchored at 1995-02-04 (star 9)
             and counting *down* one star per calendar day.

All day and year arithmetic happens in the reference zone (Asia/Tokyo by
default), whatever zone the birth instant was given in. ``compute`` never
raises: a missing table degrades to approximations and an unusable reference
zone yields DEFAULT_STAR for every star.
"""
from __future__ import annotations

import datetime as dt
import logging
from dataclasses import asdict, dataclass
from functools import lru_cache
from typing import Any, Dict, Optional

from .boundaries import MonthBoundaryResolver, YearBoundaryResolver
from .config import KigakuConfig
from .i18n import DEFAULT_LANG, lang_code, star_name
from .normalize import reference_zone, start_of_day, to_reference
from .sekki_table import SekkiTable, get_default_table

logger = logging.getLogger(__name__)

DEFAULT_STAR = 1

# Getsumei offsets for astrological months 1..12
MONTH_OFFSETS = (2, 5, 8, 2, 5, 8, 2, 5, 8, 2, 5, 8)

# Nichimei anchor: midnight of this reference-zone date is star 9, and the
# star decreases by one per day (9, 8, ..., 1, 9, ...).
DAY_STAR_REFERENCE_DATE = dt.date(1995, 2, 4)
DAY_STAR_REFERENCE_STAR = 9
DAY_STAR_DIRECTION = -1


@dataclass(frozen=True)
class StarResult:
    year_star: int
    year_star_name: str
    month_star: int
    month_star_name: str
    day_star: int
    day_star_name: str
    astrological_year: Optional[int] = None
    astrological_month: Optional[int] = None
    language: str = DEFAULT_LANG

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# ---------------- Formulas ----------------
def normalize(value: int) -> int:
    """Map any integer onto the ring 1..9 (0 -> 9, 10 -> 1, -1 -> 8)."""
    return (value - 1) % 9 + 1


def honmei_star(year: int) -> int:
    """Year star for an astrological year.

    1900-1999: 11 - (year % 9); 2000-2099: 9 - (year % 9);
    any other year: 11 - (year % 9).
    """
    if 2000 <= year <= 2099:
        raw = 9 - (year % 9)
    else:
        raw = 11 - (year % 9)
    return normalize(raw)


def getsumei_star(year_star: int, astrological_month: int) -> int:
    offset = MONTH_OFFSETS[(astrological_month - 1) % 12]
    return normalize(year_star + offset)


def days_since_reference(value: dt.datetime, tz: dt.tzinfo) -> int:
    """Whole reference-zone calendar days from the day-star anchor (negative before it)."""
    local_day = start_of_day(to_reference(value, tz)).date()
    return (local_day - DAY_STAR_REFERENCE_DATE).days


def nichimei_star(value: dt.datetime, tz: dt.tzinfo) -> int:
    offset = days_since_reference(value, tz) % 9
    return normalize(DAY_STAR_REFERENCE_STAR + DAY_STAR_DIRECTION * offset)


# ---------------- Calculator ----------------
class KigakuCalculator:
    """Stateless star calculator over a solar-term table."""

    def __init__(
        self,
        table: Optional[SekkiTable] = None,
        *,
        reference_tz: Optional[str] = None,
        language: str = DEFAULT_LANG,
    ):
        self.table = table if table is not None else get_default_table()
        self.language = lang_code(language)
        if reference_tz is None:
            self.tz: Optional[dt.tzinfo] = self.table.tz
        else:
            self.tz = reference_zone(reference_tz)
        if self.tz is not None:
            self.years = YearBoundaryResolver(self.table, tz=self.tz)
            self.months = MonthBoundaryResolver(self.table, tz=self.tz)

    @classmethod
    def from_config(cls, config: KigakuConfig, table: Optional[SekkiTable] = None) -> "KigakuCalculator":
        return cls(
            table if table is not None else SekkiTable.from_config(config),
            reference_tz=config.reference_tz,
            language=config.language,
        )

    def astrological_year(self, instant: dt.datetime) -> Optional[int]:
        if self.tz is None:
            return None
        return self.years.astrological_year(instant)

    def astrological_month(self, instant: dt.datetime) -> Optional[int]:
        if self.tz is None:
            return None
        return self.months.astrological_month(instant)

    def day_star(self, instant: dt.datetime) -> int:
        if self.tz is None:
            return DEFAULT_STAR
        return nichimei_star(instant, self.tz)

    def default_result(self, lang: str) -> StarResult:
        name = star_name(DEFAULT_STAR, lang)
        return StarResult(
            year_star=DEFAULT_STAR,
            year_star_name=name,
            month_star=DEFAULT_STAR,
            month_star_name=name,
            day_star=DEFAULT_STAR,
            day_star_name=name,
            language=lang,
        )

    def compute(self, birth_instant: dt.datetime, lang: Optional[str] = None) -> StarResult:
        lang = lang_code(lang) if lang else self.language
        if self.tz is None:
            return self.default_result(lang)

        try:
            year = self.years.astrological_year(birth_instant)
            month = self.months.astrological_month(birth_instant)
            day_star = nichimei_star(birth_instant, self.tz)
        except (OverflowError, ValueError) as exc:
            # instants at the edge of the datetime range
            logger.warning("star_computation_degraded", extra={"instant": repr(birth_instant), "error": str(exc)})
            return self.default_result(lang)
        year_star = honmei_star(year)
        month_star = getsumei_star(year_star, month)

        logger.debug(
            "stars_computed",
            extra={"astrological_year": year, "astrological_month": month, "year_star": year_star},
        )
        return StarResult(
            year_star=year_star,
            year_star_name=star_name(year_star, lang),
            month_star=month_star,
            month_star_name=star_name(month_star, lang),
            day_star=day_star,
            day_star_name=star_name(day_star, lang),
            astrological_year=year,
            astrological_month=month,
            language=lang,
        )


@lru_cache(maxsize=1)
def get_default_calculator() -> KigakuCalculator:
    config = KigakuConfig.from_env()
    return KigakuCalculator(get_default_table(), reference_tz=config.reference_tz, language=config.language)


def compute(birth_instant: dt.datetime, lang: Optional[str] = None) -> StarResult:
    return get_default_calculator().compute(birth_instant, lang)
