"""Principal solar terms (Sekki) and the provider protocol the resolvers read.

Only the twelve "setsu" terms that open an astrological month are modelled.
Each kind carries its astrological month number (Risshun = 1 ... Shoukan = 12)
and the apparent solar longitude at which it begins.
"""
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Protocol


class SekkiKind(Enum):
    RISSHUN = "立春"    # Start of Spring, Feb ~4
    KEICHITSU = "啓蟄"  # Awakening of Insects, Mar ~6
    SEIMEI = "清明"     # Pure Brightness, Apr ~5
    RIKKA = "立夏"      # Start of Summer, May ~5
    BOUSHU = "芒種"     # Grain in Ear, Jun ~6
    SHOUSHO = "小暑"    # Lesser Heat, Jul ~7
    RISSHUU = "立秋"    # Start of Autumn, Aug ~7
    HAKURO = "白露"     # White Dew, Sep ~8
    KANRO = "寒露"      # Cold Dew, Oct ~8
    RITTOU = "立冬"     # Start of Winter, Nov ~7
    TAISETSU = "大雪"   # Heavy Snow, Dec ~7
    SHOUKAN = "小寒"    # Lesser Cold, Jan ~6 (following calendar year)

    @property
    def month_number(self) -> int:
        return _ORDER.index(self) + 1

    @property
    def romaji(self) -> str:
        return self.name.capitalize()

    @property
    def english(self) -> str:
        return ENGLISH_NAMES[self]

    @property
    def solar_longitude(self) -> float:
        """Apparent solar longitude (deg) at which the term begins."""
        return (315.0 + 30.0 * (self.month_number - 1)) % 360.0

    @classmethod
    def from_month_number(cls, month: int) -> Optional["SekkiKind"]:
        if 1 <= month <= 12:
            return _ORDER[month - 1]
        return None

    @classmethod
    def parse(cls, label: str) -> Optional["SekkiKind"]:
        """Resolve a kanji ('立春') or romaji ('risshun') label; None if unknown."""
        if not isinstance(label, str):
            return None
        key = label.strip()
        for kind in _ORDER:
            if key == kind.value or key.upper() == kind.name:
                return kind
        return None


_ORDER: List[SekkiKind] = list(SekkiKind)

ENGLISH_NAMES = {
    SekkiKind.RISSHUN: "Start of Spring",
    SekkiKind.KEICHITSU: "Awakening of Insects",
    SekkiKind.SEIMEI: "Pure Brightness",
    SekkiKind.RIKKA: "Start of Summer",
    SekkiKind.BOUSHU: "Grain in Ear",
    SekkiKind.SHOUSHO: "Lesser Heat",
    SekkiKind.RISSHUU: "Start of Autumn",
    SekkiKind.HAKURO: "White Dew",
    SekkiKind.KANRO: "Cold Dew",
    SekkiKind.RITTOU: "Start of Winter",
    SekkiKind.TAISETSU: "Heavy Snow",
    SekkiKind.SHOUKAN: "Lesser Cold",
}


@dataclass(frozen=True)
class SekkiInstant:
    kind: SekkiKind
    instant: dt.datetime   # timezone-aware, reference zone

    @property
    def name(self) -> str:
        return self.kind.value

    @property
    def month_number(self) -> int:
        return self.kind.month_number


class SekkiProvider(Protocol):
    """Read-only source of solar-term instants keyed by calendar year.

    The block for year Y runs from Risshun (February Y) to Shoukan
    (January Y+1), ordered chronologically.
    """

    @property
    def tz(self) -> dt.tzinfo:
        ...

    def terms_for_year(self, year: int) -> List[SekkiInstant]:
        ...

    def year_start_instant(self, year: int) -> dt.datetime:
        ...
