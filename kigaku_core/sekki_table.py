"""sekki_table
================================================================================
Process-wide table of principal solar-term instants.

Purpose
-------
Holds, per calendar year, the chronologically ordered principal Sekki
instants (Risshun of February Y through Shoukan of January Y+1) and answers
point lookups and "latest term at or before" searches over the whole range.

Data source
-----------
A JSON document ``{"version", "timezone", "description", "data_source",
"years": {...}}``. Each year block is either

* an object mapping term name -> ISO-8601 timestamp (naive timestamps are read
  in the reference zone), or
* a list of ``{"name", "month", "day", "hour", "minute"}`` components, where an
  entry dated January belongs to the *following* calendar year.

Term names may be kanji ("立春") or romaji ("risshun").

Failure semantics
-----------------
A missing or unreadable file gives an empty table. Malformed entries are
skipped; a year whose remaining entries break the ordering rules (Risshun
first, strictly increasing, unique kinds) is dropped. Years without data fall
back to February 4th 00:00 in the reference zone for the year start. Nothing
here raises into a query.

Thread Safety
-------------
Loading happens once, lazily, behind a lock. After that the table is
read-only and shared freely.
"""
from __future__ import annotations

import bisect
import datetime as dt
import json
import logging
import threading
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple
from zoneinfo import ZoneInfo

from pydantic import BaseModel, Field, ValidationError

from .config import DEFAULT_REFERENCE_TZ, KigakuConfig
from .normalize import parse_iso_datetime, reference_zone, to_reference
from .sekki import SekkiInstant, SekkiKind

logger = logging.getLogger(__name__)

FALLBACK_YEAR_RANGE: Tuple[int, int] = (1900, 2100)
FALLBACK_RISSHUN_MONTH_DAY: Tuple[int, int] = (2, 4)

YearMap = Dict[int, List[SekkiInstant]]


# ---------------- File schema ----------------
class SekkiDataFile(BaseModel):
    version: Optional[str] = None
    timezone: Optional[str] = None
    description: Optional[str] = None
    data_source: Optional[str] = None
    format: Optional[str] = None
    years: Dict[str, Any] = Field(default_factory=dict)


class SekkiComponentEntry(BaseModel):
    name: str
    month: int = Field(ge=1, le=12)
    day: int = Field(ge=1, le=31)
    hour: int = Field(ge=0, le=23)
    minute: int = Field(ge=0, le=59)


# ---------------- Parsing ----------------
def _parse_iso_block(year: int, block: Mapping[str, Any], tz: dt.tzinfo) -> List[SekkiInstant]:
    out: List[SekkiInstant] = []
    for label, stamp in block.items():
        kind = SekkiKind.parse(label)
        when = parse_iso_datetime(stamp, tz) if isinstance(stamp, str) else None
        if kind is None or when is None:
            logger.warning("sekki_entry_skipped", extra={"year": year, "term": label, "value": stamp})
            continue
        out.append(SekkiInstant(kind, when.astimezone(tz)))
    return out


def _parse_component_block(year: int, entries: List[Any], tz: dt.tzinfo) -> List[SekkiInstant]:
    out: List[SekkiInstant] = []
    for raw in entries:
        try:
            entry = SekkiComponentEntry.model_validate(raw)
        except ValidationError as exc:
            logger.warning("sekki_entry_skipped", extra={"year": year, "value": raw, "error": str(exc)})
            continue
        kind = SekkiKind.parse(entry.name)
        if kind is None:
            logger.warning("sekki_entry_skipped", extra={"year": year, "term": entry.name})
            continue
        # Shoukan (January) sits in the following calendar year
        term_year = year + 1 if entry.month == 1 else year
        try:
            when = dt.datetime(term_year, entry.month, entry.day, entry.hour, entry.minute, tzinfo=tz)
        except ValueError as exc:
            logger.warning("sekki_entry_skipped", extra={"year": year, "term": entry.name, "error": str(exc)})
            continue
        out.append(SekkiInstant(kind, when))
    return out


def _validated_year(year: int, terms: Iterable[SekkiInstant], tz: dt.tzinfo) -> Optional[List[SekkiInstant]]:
    """Sorted terms for ``year`` if they satisfy the block invariants, else None."""
    ordered = sorted(terms, key=lambda s: s.instant)
    if not ordered:
        return None
    reason = None
    if ordered[0].kind is not SekkiKind.RISSHUN:
        reason = "first_term_not_risshun"
    elif to_reference(ordered[0].instant, tz).year != year:
        reason = "risshun_outside_year"
    else:
        for prev, cur in zip(ordered, ordered[1:]):
            if cur.month_number <= prev.month_number or cur.instant <= prev.instant:
                reason = "terms_out_of_order"
                break
    if reason:
        logger.warning("sekki_year_dropped", extra={"year": year, "reason": reason})
        return None
    return ordered


def parse_years(years: Mapping[Any, Any], tz: dt.tzinfo) -> YearMap:
    """Parse the ``years`` object of a data document (either block variant)."""
    table: YearMap = {}
    for key, block in years.items():
        try:
            year = int(key)
        except (TypeError, ValueError):
            logger.warning("sekki_year_dropped", extra={"year": key, "reason": "bad_year_key"})
            continue
        if isinstance(block, Mapping):
            terms = _parse_iso_block(year, block, tz)
        elif isinstance(block, list):
            terms = _parse_component_block(year, block, tz)
        else:
            logger.warning("sekki_year_dropped", extra={"year": year, "reason": "bad_block_type"})
            continue
        valid = _validated_year(year, terms, tz)
        if valid:
            table[year] = valid
    return table


def parse_document(raw: Any, tz: dt.tzinfo) -> YearMap:
    try:
        doc = SekkiDataFile.model_validate(raw)
    except ValidationError as exc:
        logger.warning("sekki_table_malformed", extra={"error": str(exc)})
        return {}
    if doc.timezone and doc.timezone != getattr(tz, "key", doc.timezone):
        logger.warning("sekki_table_timezone_mismatch", extra={"declared": doc.timezone, "reference": str(tz)})
    return parse_years(doc.years, tz)


def load_sekki_file(path: Path, tz: dt.tzinfo) -> YearMap:
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        logger.warning("sekki_table_missing", extra={"path": str(path)})
        return {}
    except OSError as exc:
        logger.warning("sekki_table_unreadable", extra={"path": str(path), "error": str(exc)})
        return {}
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as exc:
        logger.warning("sekki_table_malformed", extra={"path": str(path), "error": str(exc)})
        return {}
    return parse_document(raw, tz)


# ---------------- Table ----------------
class SekkiTable:
    """Immutable-after-load solar-term table implementing ``SekkiProvider``."""

    def __init__(
        self,
        loader: Callable[[dt.tzinfo], YearMap],
        *,
        tz: Optional[dt.tzinfo] = None,
        fallback_year_range: Tuple[int, int] = FALLBACK_YEAR_RANGE,
    ):
        self._loader = loader
        self._tz = tz if tz is not None else ZoneInfo(DEFAULT_REFERENCE_TZ)
        self._fallback_year_range = tuple(fallback_year_range)
        self._lock = threading.Lock()
        self._loaded = False
        self._by_year: Dict[int, Tuple[SekkiInstant, ...]] = {}
        self._flat: List[SekkiInstant] = []
        self._flat_keys: List[dt.datetime] = []
        self._years: List[int] = []

    # --- constructors ---
    @classmethod
    def from_file(cls, path: Path, **kwargs: Any) -> "SekkiTable":
        return cls(lambda tz: load_sekki_file(path, tz), **kwargs)

    @classmethod
    def from_document(cls, raw: Any, **kwargs: Any) -> "SekkiTable":
        return cls(lambda tz: parse_document(raw, tz), **kwargs)

    @classmethod
    def from_years(cls, years: Mapping[int, Iterable[SekkiInstant]], **kwargs: Any) -> "SekkiTable":
        """In-memory table; blocks are validated like file data."""
        def _load(tz: dt.tzinfo) -> YearMap:
            out: YearMap = {}
            for year, terms in years.items():
                valid = _validated_year(int(year), terms, tz)
                if valid:
                    out[int(year)] = valid
            return out
        return cls(_load, **kwargs)

    @classmethod
    def from_config(cls, config: KigakuConfig) -> "SekkiTable":
        return cls.from_file(
            config.data_path,
            tz=reference_zone(config.reference_tz),
            fallback_year_range=config.fallback_year_range,
        )

    # --- loading ---
    def _ensure_loaded(self) -> None:
        if self._loaded:
            return
        with self._lock:
            if self._loaded:
                return
            try:
                by_year = self._loader(self._tz)
            except Exception as exc:
                logger.exception("sekki_table_load_failed", extra={"error": str(exc)})
                by_year = {}
            self._by_year = {year: tuple(terms) for year, terms in by_year.items()}
            self._flat = sorted(
                (term for terms in self._by_year.values() for term in terms),
                key=lambda s: s.instant,
            )
            self._flat_keys = [term.instant for term in self._flat]
            self._years = sorted(self._by_year)
            self._loaded = True
            logger.info("sekki_table_loaded", extra={"years": len(self._years), "terms": len(self._flat)})

    def load(self) -> "SekkiTable":
        """Eager load (idempotent)."""
        self._ensure_loaded()
        return self

    # --- introspection ---
    @property
    def tz(self) -> dt.tzinfo:
        return self._tz

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    @property
    def years(self) -> List[int]:
        self._ensure_loaded()
        return list(self._years)

    def __len__(self) -> int:
        self._ensure_loaded()
        return len(self._years)

    def has_year(self, year: int) -> bool:
        self._ensure_loaded()
        return year in self._by_year

    def supported_year_range(self) -> Tuple[int, int]:
        self._ensure_loaded()
        if not self._years:
            return self._fallback_year_range
        return self._years[0], self._years[-1]

    # --- lookups ---
    def terms_for_year(self, year: int) -> List[SekkiInstant]:
        self._ensure_loaded()
        return list(self._by_year.get(year, ()))

    def fallback_year_start(self, year: int) -> dt.datetime:
        month, day = FALLBACK_RISSHUN_MONTH_DAY
        return dt.datetime(year, month, day, 0, 0, tzinfo=self._tz)

    def year_start_instant(self, year: int) -> dt.datetime:
        terms = self.terms_for_year(year)
        if terms:
            return terms[0].instant
        return self.fallback_year_start(year)

    def risshun_instant(self, year: int) -> Optional[SekkiInstant]:
        return self.sekki_instant(SekkiKind.RISSHUN, year)

    def sekki_instant(self, kind: SekkiKind, year: int) -> Optional[SekkiInstant]:
        for term in self.terms_for_year(year):
            if term.kind is kind:
                return term
        return None

    def sekki_for_month(self, month: int, year: int) -> Optional[SekkiInstant]:
        kind = SekkiKind.from_month_number(month)
        if kind is None:
            return None
        return self.sekki_instant(kind, year)

    def latest_term_at_or_before(self, instant: dt.datetime) -> Optional[SekkiInstant]:
        """Right-most term with ``term.instant <= instant`` (ties inclusive)."""
        self._ensure_loaded()
        if not self._flat_keys:
            return None
        idx = bisect.bisect_right(self._flat_keys, to_reference(instant, self._tz)) - 1
        if idx < 0:
            return None
        return self._flat[idx]


# ---------------- Process-wide default ----------------
_default_table: Optional[SekkiTable] = None
_default_lock = threading.Lock()


def get_default_table() -> SekkiTable:
    """Shared table built from ``KigakuConfig.from_env()`` exactly once per process."""
    global _default_table
    if _default_table is None:
        with _default_lock:
            if _default_table is None:
                _default_table = SekkiTable.from_config(KigakuConfig.from_env())
    return _default_table
