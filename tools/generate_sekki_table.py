#!/usr/bin/env python3
"""
Generate the principal solar-term table (kigaku_core/data/sekki_jst.json).

For every calendar year in range, finds the twelve "setsu" terms (Risshun of
February Y through Shoukan of January Y+1) by bisecting the Sun's apparent
geocentric longitude (Swiss Ephemeris) across 315, 345, 15, ... 285 degrees,
and writes them in the ISO-8601 variant of the data file, truncated to the
minute in the output zone.

Usage (from repo root):
  python tools/generate_sekki_table.py --start 1900 --end 2100 \
      --out kigaku_core/data/sekki_jst.json

Optional args:
  --tz <zone>       # output zone (default Asia/Tokyo)
  --verbose         # print each year as it is computed
"""
from __future__ import annotations
import argparse
import datetime as dt
import json
import os
import sys
from typing import Dict, List
from zoneinfo import ZoneInfo

import swisseph as swe

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from kigaku_core.sekki import SekkiKind  # noqa: E402

swe.set_ephe_path("")  # Moshier fallback unless SE files are shipped

# Approximate (month, day) each term falls on; the true instant is within a few days
APPROX_DATES = {
    SekkiKind.RISSHUN: (2, 4),
    SekkiKind.KEICHITSU: (3, 6),
    SekkiKind.SEIMEI: (4, 5),
    SekkiKind.RIKKA: (5, 6),
    SekkiKind.BOUSHU: (6, 6),
    SekkiKind.SHOUSHO: (7, 7),
    SekkiKind.RISSHUU: (8, 8),
    SekkiKind.HAKURO: (9, 8),
    SekkiKind.KANRO: (10, 8),
    SekkiKind.RITTOU: (11, 7),
    SekkiKind.TAISETSU: (12, 7),
    SekkiKind.SHOUKAN: (1, 6),
}
SEARCH_WINDOW = dt.timedelta(days=4)
PRECISION = dt.timedelta(seconds=1)


# ----------------- Ephemeris -----------------
def _julday_utc(dtu: dt.datetime) -> float:
    if dtu.tzinfo is None:
        raise ValueError("UTC datetime must be timezone-aware")
    dtu_utc = dtu.astimezone(dt.timezone.utc)
    frac_hour = dtu_utc.hour + dtu_utc.minute/60.0 + dtu_utc.second/3600.0 + dtu_utc.microsecond/3_600_000_000.0
    return swe.julday(dtu_utc.year, dtu_utc.month, dtu_utc.day, frac_hour)


def sun_longitude(instant: dt.datetime) -> float:
    """Apparent tropical longitude of the Sun (deg, 0..360)."""
    pos, _ = swe.calc_ut(_julday_utc(instant), swe.SUN, swe.FLG_SWIEPH)
    return pos[0] % 360.0


def _signed_delta(lon: float, target: float) -> float:
    """lon - target wrapped into [-180, 180)."""
    return (lon - target + 180.0) % 360.0 - 180.0


# ----------------- Search -----------------
def find_term_instant(kind: SekkiKind, year: int) -> dt.datetime:
    """UTC instant the Sun reaches ``kind``'s longitude in the block of ``year``."""
    month, day = APPROX_DATES[kind]
    term_year = year + 1 if month == 1 else year
    guess = dt.datetime(term_year, month, day, 12, 0, tzinfo=dt.timezone.utc)
    target = kind.solar_longitude

    lo = guess - SEARCH_WINDOW
    hi = guess + SEARCH_WINDOW
    if not (_signed_delta(sun_longitude(lo), target) < 0 <= _signed_delta(sun_longitude(hi), target)):
        raise RuntimeError(f"{kind.name} {year}: longitude {target} not bracketed by {lo} .. {hi}")

    while hi - lo > PRECISION:
        mid = lo + (hi - lo) / 2
        if _signed_delta(sun_longitude(mid), target) < 0:
            lo = mid
        else:
            hi = mid
    return hi


def year_block(year: int, tz: ZoneInfo) -> Dict[str, str]:
    block: Dict[str, str] = {}
    for kind in SekkiKind:
        local = find_term_instant(kind, year).astimezone(tz).replace(second=0, microsecond=0)
        block[kind.value] = local.isoformat()
    return block


def build_document(start: int, end: int, tz_name: str = "Asia/Tokyo", verbose: bool = False) -> dict:
    tz = ZoneInfo(tz_name)
    years: Dict[str, Dict[str, str]] = {}
    for year in range(start, end + 1):
        years[str(year)] = year_block(year, tz)
        if verbose:
            print(f"{year}: risshun {years[str(year)][SekkiKind.RISSHUN.value]}")
    return {
        "version": "1.0",
        "timezone": tz_name,
        "description": (
            f"Principal solar term (setsu) instants in {tz_name}, minute precision. "
            "Each year block runs from Risshun (February) to Shoukan (January of the following year)."
        ),
        "data_source": f"Swiss Ephemeris {getattr(swe, 'version', '')}, apparent solar longitude, generated by tools/generate_sekki_table.py",
        "format": "iso8601",
        "years": years,
    }


def main(argv: List[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Generate the principal solar-term table")
    parser.add_argument("--start", type=int, default=1900)
    parser.add_argument("--end", type=int, default=2100)
    parser.add_argument("--out", default=os.path.join(ROOT, "kigaku_core", "data", "sekki_jst.json"))
    parser.add_argument("--tz", default="Asia/Tokyo")
    parser.add_argument("--verbose", action="store_true", help="Verbose output")
    args = parser.parse_args(argv)

    if args.end < args.start:
        print(f"[error] --end ({args.end}) before --start ({args.start})")
        return 1

    doc = build_document(args.start, args.end, args.tz, verbose=args.verbose)
    os.makedirs(os.path.dirname(os.path.abspath(args.out)), exist_ok=True)
    with open(args.out, "w", encoding="utf-8") as f:
        json.dump(doc, f, ensure_ascii=False, indent=2)
        f.write("\n")
    print(f"Wrote {len(doc['years'])} years -> {args.out}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
