"""Astrological year and month boundaries.

The astrological year starts at Risshun, not January 1st; astrological months
start at each principal Sekki. Both resolvers compare absolute instants, and
an instant equal to a boundary belongs to the period that boundary opens.
"""
from __future__ import annotations

import datetime as dt
import logging
from typing import Dict, List, Optional, Tuple

from .normalize import to_reference
from .sekki import SekkiInstant, SekkiKind, SekkiProvider

logger = logging.getLogger(__name__)

# Gregorian month -> (first day of the next astrological month,
#                     month before that day, month from that day on).
# Used only when the table holds nothing for the relevant years.
FALLBACK_MONTH_TABLE: Dict[int, Tuple[int, int, int]] = {
    1: (6, 11, 12),   # Shoukan
    2: (4, 12, 1),    # Risshun
    3: (6, 1, 2),     # Keichitsu
    4: (5, 2, 3),     # Seimei
    5: (5, 3, 4),     # Rikka
    6: (6, 4, 5),     # Boushu
    7: (7, 5, 6),     # Shousho
    8: (7, 6, 7),     # Risshuu
    9: (8, 7, 8),     # Hakuro
    10: (8, 8, 9),    # Kanro
    11: (7, 9, 10),   # Rittou
    12: (7, 10, 11),  # Taisetsu
}


def fallback_astrological_month(local: dt.datetime) -> int:
    """Approximate astrological month from a reference-zone wall-clock date."""
    boundary_day, before, after = FALLBACK_MONTH_TABLE[local.month]
    return before if local.day < boundary_day else after


def approximate_term_start(month: int, year: int, tz: dt.tzinfo) -> dt.datetime:
    """Fallback-table start (00:00) of astrological month ``month`` in Gregorian ``year``."""
    greg_month = 1 if month == 12 else month + 1
    boundary_day = FALLBACK_MONTH_TABLE[greg_month][0]
    return dt.datetime(year, greg_month, boundary_day, tzinfo=tz)


def _reference_tz(provider: SekkiProvider) -> dt.tzinfo:
    return provider.tz


class YearBoundaryResolver:
    def __init__(self, provider: SekkiProvider, tz: Optional[dt.tzinfo] = None):
        self._provider = provider
        self._tz = tz if tz is not None else _reference_tz(provider)

    def astrological_year(self, instant: dt.datetime) -> int:
        """Calendar year of ``instant``, minus one if it precedes that year's Risshun.

        e.g. with Risshun 1995 at 1995-02-04 16:12 JST:
        16:11 -> 1994, 16:12 -> 1995, 16:13 -> 1995.
        """
        local = to_reference(instant, self._tz)
        year = local.year
        if self.is_before_risshun(local, year):
            return year - 1
        return year

    def is_before_risshun(self, instant: dt.datetime, year: int) -> bool:
        return to_reference(instant, self._tz) < self._provider.year_start_instant(year)

    def risshun_date(self, year: int) -> dt.datetime:
        return self._provider.year_start_instant(year)


class MonthBoundaryResolver:
    """Maps an instant to its astrological month (1 = Risshun ... 12 = Shoukan).

    Months 11 (Taisetsu, December) and 12 (Shoukan, January) straddle the
    Gregorian new year, so the previous calendar year's block is always
    consulted alongside the current one.
    """

    def __init__(self, provider: SekkiProvider, tz: Optional[dt.tzinfo] = None):
        self._provider = provider
        self._tz = tz if tz is not None else _reference_tz(provider)

    def _candidate_terms(self, year: int) -> List[SekkiInstant]:
        terms = self._provider.terms_for_year(year - 1) + self._provider.terms_for_year(year)
        return sorted(terms, key=lambda s: s.instant)

    def current_term(self, instant: dt.datetime) -> Optional[SekkiInstant]:
        """Latest term of the previous or current calendar year at or before ``instant``.

        When the term that should follow is missing from the table, the found
        term only holds until that term's fallback start; past it, None.
        """
        local = to_reference(instant, self._tz)
        current: Optional[SekkiInstant] = None
        following: Optional[SekkiInstant] = None
        for term in self._candidate_terms(local.year):
            if term.instant <= local:
                current = term
            else:
                following = term
                break
        if current is None:
            return None

        next_month = current.month_number % 12 + 1
        if following is None or following.kind is not SekkiKind.from_month_number(next_month):
            if local >= self._approximate_start(next_month, current.instant):
                return None
        return current

    def _approximate_start(self, month: int, after: dt.datetime) -> dt.datetime:
        after = to_reference(after, self._tz)
        start = approximate_term_start(month, after.year, self._tz)
        if start.month < after.month:
            start = approximate_term_start(month, after.year + 1, self._tz)
        if month == 1:
            # Risshun: same boundary the year resolver uses
            return self._provider.year_start_instant(start.year)
        return start

    def astrological_month(self, instant: dt.datetime) -> int:
        term = self.current_term(instant)
        if term is not None:
            return term.month_number
        local = to_reference(instant, self._tz)
        month = fallback_astrological_month(local)
        logger.info(
            "month_fallback_used",
            extra={"date": local.date().isoformat(), "astrological_month": month},
        )
        return month

    def sekki_for_month(self, month: int, year: int) -> Optional[SekkiInstant]:
        """Term opening ``month`` in the block of ``year`` (month 12 lies in January of year + 1)."""
        for term in self._provider.terms_for_year(year):
            if term.month_number == month:
                return term
        return None
