from __future__ import annotations

from typing import Dict, Literal

STAR_NAMES: Dict[str, Dict[int, str]] = {
    "JA": {
        1: "一白水星",
        2: "二黒土星",
        3: "三碧木星",
        4: "四緑木星",
        5: "五黄土星",
        6: "六白金星",
        7: "七赤金星",
        8: "八白土星",
        9: "九紫火星",
    },
    "EN": {
        1: "One White Water Star",
        2: "Two Black Earth Star",
        3: "Three Jade Wood Star",
        4: "Four Green Wood Star",
        5: "Five Yellow Earth Star",
        6: "Six White Metal Star",
        7: "Seven Red Metal Star",
        8: "Eight White Earth Star",
        9: "Nine Purple Fire Star",
    },
}

LABELS: Dict[str, Dict[str, str]] = {
    "JA": {
        "honmei": "本命星",
        "getsumei": "月命星",
        "nichimei": "日命星",
    },
    "EN": {
        "honmei": "Year Star",
        "getsumei": "Month Star",
        "nichimei": "Day Star",
    },
}

DEFAULT_LANG = "JA"


def lang_code(lang: str | None) -> Literal["JA", "EN"]:
    """Normalise 'ja', 'en-US', 'EN' ... onto a supported table; anything else is JA."""
    if lang and str(lang).strip().upper().startswith("EN"):
        return "EN"
    return "JA"


def star_name(star: int, lang: str | None = DEFAULT_LANG) -> str:
    """Display name for a star 1..9; out-of-range stars get star 1's name."""
    names = STAR_NAMES[lang_code(lang)]
    return names.get(star, names[1])


def t(key: str, lang: str | None = DEFAULT_LANG) -> str:
    return LABELS[lang_code(lang)].get(key, key)
