import datetime as dt
import logging
from typing import Optional

import pytz

from kigaku_core.calculator import KigakuCalculator, get_default_calculator
from kigaku_core.i18n import lang_code, star_name
from kigaku_core.normalize import parse_birth_datetime, to_reference

from schemas import (
    BirthPayload,
    StarOut,
    KigakuData,
    DailyStarData,
    SekkiTermOut, SekkiYearData,
)

logger = logging.getLogger(__name__)


class InvalidInput(ValueError):
    """Caller-supplied date/time/zone could not be interpreted."""


def _calculator(calculator: Optional[KigakuCalculator]) -> KigakuCalculator:
    return calculator if calculator is not None else get_default_calculator()


def _birth_instant(payload: BirthPayload) -> dt.datetime:
    try:
        return parse_birth_datetime(payload.dateOfBirth, payload.timeOfBirth, payload.timeZone)
    except pytz.UnknownTimeZoneError:
        raise InvalidInput(f"Unknown timeZone: {payload.timeZone!r}")
    except ValueError as e:
        raise InvalidInput(f"Invalid dateOfBirth/timeOfBirth: {e}")


def calculate_kigaku_data(payload: BirthPayload, calculator: Optional[KigakuCalculator] = None) -> KigakuData:
    calc = _calculator(calculator)
    birth = _birth_instant(payload)
    result = calc.compute(birth, payload.lang_code)

    shown = birth
    if calc.tz is not None:
        try:
            shown = to_reference(birth, calc.tz)
        except OverflowError:
            # instant not representable in the reference zone; echo the input
            logger.info("birth_instant_out_of_range", extra={"birth": birth.isoformat()})
    return KigakuData(
        name=payload.name,
        birthInstant=shown.isoformat(),
        astrologicalYear=result.astrological_year,
        astrologicalMonth=result.astrological_month,
        honmei=StarOut(number=result.year_star, name=result.year_star_name),
        getsumei=StarOut(number=result.month_star, name=result.month_star_name),
        nichimei=StarOut(number=result.day_star, name=result.day_star_name),
        language=result.language,
    )


def daily_star_data(date: Optional[str], lang: Optional[str] = None, calculator: Optional[KigakuCalculator] = None) -> DailyStarData:
    """Day star for a reference-zone calendar date (today when omitted)."""
    calc = _calculator(calculator)
    language = lang_code(lang) if lang else calc.language
    tz = calc.tz or pytz.UTC
    if date:
        try:
            day = dt.date.fromisoformat(date.strip())
        except ValueError as e:
            raise InvalidInput(f"Invalid date: {e}")
    else:
        day = dt.datetime.now(tz).date()

    star = calc.day_star(dt.datetime.combine(day, dt.time(12, 0)).replace(tzinfo=tz))
    return DailyStarData(date=day.isoformat(), star=StarOut(number=star, name=star_name(star, language)), language=language)


def sekki_year_data(year: int, calculator: Optional[KigakuCalculator] = None) -> SekkiYearData:
    table = _calculator(calculator).table
    terms = table.terms_for_year(year)
    if not terms:
        logger.info("sekki_year_fallback", extra={"year": year})
    return SekkiYearData(
        year=year,
        fromTable=bool(terms),
        yearStart=table.year_start_instant(year).isoformat(),
        terms=[
            SekkiTermOut(
                name=t.name,
                romaji=t.kind.romaji,
                english=t.kind.english,
                astrologicalMonth=t.month_number,
                instant=t.instant.isoformat(),
            )
            for t in terms
        ],
    )
