from __future__ import annotations

import datetime as dt
import json
import threading
import time
from pathlib import Path
from zoneinfo import ZoneInfo

from kigaku_core.config import DEFAULT_DATA_PATH
from kigaku_core.sekki import SekkiInstant, SekkiKind
from kigaku_core.sekki_table import SekkiTable

JST = ZoneInfo("Asia/Tokyo")


def _jst(*args: int) -> dt.datetime:
    return dt.datetime(*args, tzinfo=JST)


def test_bundled_file_loads():
    table = SekkiTable.from_file(DEFAULT_DATA_PATH).load()
    assert table.is_loaded
    assert table.has_year(1995)
    assert table.has_year(2020)
    assert len(table) == len(table.years)
    low, high = table.supported_year_range()
    assert (low, high) == (1900, 2100)


def test_year_block_is_ordered_risshun_to_shoukan():
    table = SekkiTable.from_file(DEFAULT_DATA_PATH)
    terms = table.terms_for_year(2019)
    assert [t.kind for t in terms] == list(SekkiKind)
    assert terms[0].instant == _jst(2019, 2, 4, 12, 14)
    assert terms[-1].instant == _jst(2020, 1, 6, 6, 30)
    assert all(a.instant < b.instant for a, b in zip(terms, terms[1:]))


def test_point_lookups():
    table = SekkiTable.from_file(DEFAULT_DATA_PATH)
    assert table.risshun_instant(1995).instant == _jst(1995, 2, 4, 16, 12)
    assert table.sekki_instant(SekkiKind.KEICHITSU, 2020).instant == _jst(2020, 3, 5, 11, 56)
    assert table.sekki_for_month(3, 2020).kind is SekkiKind.SEIMEI
    assert table.sekki_for_month(13, 2020) is None
    assert table.sekki_for_month(0, 2020) is None


def test_year_start_falls_back_to_feb_4():
    table = SekkiTable.from_file(DEFAULT_DATA_PATH)
    assert not table.has_year(1850)
    assert table.year_start_instant(1850) == _jst(1850, 2, 4, 0, 0)
    assert table.year_start_instant(2025) == _jst(2025, 2, 3, 23, 10)


def test_latest_term_at_or_before_is_inclusive():
    table = SekkiTable.from_file(DEFAULT_DATA_PATH)
    keichitsu = _jst(2020, 3, 5, 11, 56)
    assert table.latest_term_at_or_before(keichitsu).kind is SekkiKind.KEICHITSU
    assert table.latest_term_at_or_before(keichitsu - dt.timedelta(minutes=1)).kind is SekkiKind.RISSHUN
    # same instant expressed in UTC
    as_utc = keichitsu.astimezone(dt.timezone.utc)
    assert table.latest_term_at_or_before(as_utc).kind is SekkiKind.KEICHITSU


def test_latest_term_before_first_entry_is_none():
    table = SekkiTable.from_file(DEFAULT_DATA_PATH)
    assert table.latest_term_at_or_before(_jst(1800, 1, 1)) is None


def test_missing_file_gives_empty_table(tmp_path: Path):
    table = SekkiTable.from_file(tmp_path / "nope.json")
    assert len(table) == 0
    assert table.terms_for_year(2020) == []
    assert table.supported_year_range() == (1900, 2100)
    assert table.year_start_instant(2020) == _jst(2020, 2, 4)
    assert table.latest_term_at_or_before(_jst(2020, 5, 1)) is None


def test_malformed_json_gives_empty_table(tmp_path: Path):
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    assert len(SekkiTable.from_file(path)) == 0


def test_fallback_range_is_configurable(tmp_path: Path):
    table = SekkiTable.from_file(tmp_path / "nope.json", fallback_year_range=(1950, 2050))
    assert table.supported_year_range() == (1950, 2050)


def test_component_variant_and_january_rollover():
    doc = {
        "timezone": "Asia/Tokyo",
        "years": {
            "2020": [
                {"name": "立春", "month": 2, "day": 4, "hour": 17, "minute": 3},
                {"name": "keichitsu", "month": 3, "day": 5, "hour": 10, "minute": 57},
                {"name": "小寒", "month": 1, "day": 5, "hour": 12, "minute": 23},
            ]
        },
    }
    table = SekkiTable.from_document(doc)
    terms = table.terms_for_year(2020)
    assert [t.kind for t in terms] == [SekkiKind.RISSHUN, SekkiKind.KEICHITSU, SekkiKind.SHOUKAN]
    assert terms[-1].instant == _jst(2021, 1, 5, 12, 23)


def test_malformed_entries_are_skipped():
    doc = {
        "years": {
            "2020": [
                {"name": "立春", "month": 2, "day": 4, "hour": 17, "minute": 3},
                {"name": "啓蟄", "month": 13, "day": 5, "hour": 10, "minute": 57},
                {"name": "清明", "month": 2, "day": 30, "hour": 9, "minute": 38},
                {"name": "unknown", "month": 5, "day": 5, "hour": 9, "minute": 51},
                {"name": "立夏", "month": 5, "day": 5, "hour": 9, "minute": 51},
            ],
            "2019": {
                "立春": "2019-02-04T12:14:00+09:00",
                "啓蟄": "not a timestamp",
                "清明": "2019-04-05T10:51:00",
            },
        }
    }
    table = SekkiTable.from_document(doc)
    assert [t.kind for t in table.terms_for_year(2020)] == [SekkiKind.RISSHUN, SekkiKind.RIKKA]
    terms_2019 = table.terms_for_year(2019)
    assert [t.kind for t in terms_2019] == [SekkiKind.RISSHUN, SekkiKind.SEIMEI]
    # naive timestamps are read in the reference zone
    assert terms_2019[1].instant == _jst(2019, 4, 5, 10, 51)


def test_years_breaking_ordering_rules_are_dropped():
    doc = {
        "years": {
            # does not start with Risshun
            "2020": {"啓蟄": "2020-03-05T10:57:00+09:00", "清明": "2020-04-04T09:38:00+09:00"},
            # Keichitsu before Risshun
            "2021": {"立春": "2021-02-03T23:59:00+09:00", "啓蟄": "2021-01-20T10:00:00+09:00"},
            # Risshun in the wrong calendar year
            "2022": {"立春": "2023-02-04T05:43:00+09:00"},
            "bogus": {"立春": "2023-02-04T05:43:00+09:00"},
            "2023": {"立春": "2023-02-04T05:43:00+09:00"},
        }
    }
    table = SekkiTable.from_document(doc)
    assert table.years == [2023]
    assert table.year_start_instant(2020) == _jst(2020, 2, 4)


def test_from_years_validates_blocks():
    good = [SekkiInstant(SekkiKind.RISSHUN, _jst(2020, 2, 4, 17, 3))]
    bad = [SekkiInstant(SekkiKind.SEIMEI, _jst(2021, 4, 4, 15, 35))]
    table = SekkiTable.from_years({2020: good, 2021: bad})
    assert table.years == [2020]


def test_loader_failure_is_contained():
    def _boom(tz):
        raise RuntimeError("disk on fire")

    table = SekkiTable(_boom)
    assert len(table) == 0
    assert table.is_loaded


def test_concurrent_first_access_loads_once():
    calls = []

    def _slow_loader(tz):
        calls.append(1)
        time.sleep(0.05)
        return {2020: [SekkiInstant(SekkiKind.RISSHUN, dt.datetime(2020, 2, 4, 17, 3, tzinfo=tz))]}

    table = SekkiTable(_slow_loader)
    barrier = threading.Barrier(8)
    seen = []

    def _worker():
        barrier.wait()
        seen.append(len(table))

    threads = [threading.Thread(target=_worker) for _ in range(8)]
    for th in threads:
        th.start()
    for th in threads:
        th.join()

    assert len(calls) == 1
    assert seen == [1] * 8


def test_bundled_file_matches_declared_envelope():
    raw = json.loads(DEFAULT_DATA_PATH.read_text(encoding="utf-8"))
    assert raw["timezone"] == "Asia/Tokyo"
    assert "years" in raw


def test_bundled_file_covers_1900_to_2100_without_gaps():
    table = SekkiTable.from_file(DEFAULT_DATA_PATH)
    assert table.years == list(range(1900, 2101))
    for year in table.years:
        terms = table.terms_for_year(year)
        assert [t.kind for t in terms] == list(SekkiKind), year
        assert terms[-1].instant.year == year + 1


def test_bundled_file_keeps_summer_time_offsets():
    # Japan observed daylight saving time 1948-1951
    table = SekkiTable.from_file(DEFAULT_DATA_PATH)
    seimei = table.sekki_instant(SekkiKind.SEIMEI, 1949)
    assert seimei.instant.utcoffset() == dt.timedelta(hours=10)
    assert seimei.instant == dt.datetime(1949, 4, 5, 2, 51, tzinfo=dt.timezone.utc)
