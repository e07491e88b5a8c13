from __future__ import annotations

import datetime as dt
from typing import Dict, List
from zoneinfo import ZoneInfo

import pytest

from kigaku_core.sekki import SekkiInstant, SekkiKind
from kigaku_core.sekki_table import SekkiTable

JST = ZoneInfo("Asia/Tokyo")

# "MM-DD HH:MM" per term, Risshun .. Shoukan (January of the following year).
# 1995 Risshun and 2020 Risshun/Keichitsu are the textbook example instants;
# everything else is ephemeris data. 2021-2024 are left out on purpose.
SAMPLE_BLOCKS: Dict[int, List[str]] = {
    1994: ["02-04 10:30", "03-06 04:37", "04-05 09:31", "05-06 02:54", "06-06 07:04", "07-07 17:19",
           "08-08 03:04", "09-08 05:55", "10-08 21:29", "11-08 00:35", "12-07 17:22", "01-06 04:34"],
    1995: ["02-04 15:21", "03-06 10:16", "04-05 15:08", "05-06 08:30", "06-06 12:42", "07-07 23:00",
           "08-08 08:51", "09-08 11:48", "10-09 03:27", "11-08 06:35", "12-07 23:22", "01-06 10:31"],
    2019: ["02-04 12:14", "03-06 06:09", "04-05 10:51", "05-06 04:02", "06-06 08:06", "07-07 18:20",
           "08-08 04:13", "09-08 07:16", "10-08 23:05", "11-08 02:24", "12-07 19:18", "01-06 06:30"],
    2020: ["02-04 17:03", "03-05 10:57", "04-04 16:38", "05-05 09:51", "06-05 13:58", "07-07 00:14",
           "08-07 10:06", "09-07 13:08", "10-08 04:55", "11-07 08:13", "12-07 01:09", "01-05 12:23"],
    2025: ["02-03 23:10", "03-05 17:07", "04-04 21:48", "05-05 14:57", "06-05 18:56", "07-07 05:05",
           "08-07 14:51", "09-07 17:51", "10-08 09:41", "11-07 13:04", "12-07 06:04", "01-05 17:23"],
}


def sample_block(year: int) -> List[SekkiInstant]:
    out = []
    for kind, stamp in zip(SekkiKind, SAMPLE_BLOCKS[year]):
        when = dt.datetime.strptime(stamp, "%m-%d %H:%M")
        term_year = year + 1 if when.month == 1 else year
        out.append(SekkiInstant(kind, when.replace(year=term_year, tzinfo=JST)))
    return out


@pytest.fixture(scope="session")
def sample_table() -> SekkiTable:
    return SekkiTable.from_years({year: sample_block(year) for year in SAMPLE_BLOCKS}).load()


@pytest.fixture(scope="session")
def empty_table() -> SekkiTable:
    return SekkiTable.from_years({}).load()
