from __future__ import annotations

import json
from pathlib import Path

from kigaku_core.cli import main


def test_cli_prints_stars(capsys):
    rc = main(["--birth", "1995-02-04T16:12"])
    assert rc == 0
    out = json.loads(capsys.readouterr().out)
    assert out["astrological_year"] == 1995
    assert out["year_star"] == 5
    assert out["year_star_name"] == "五黄土星"
    assert out["day_star"] == 9


def test_cli_input_zone_and_language(capsys):
    rc = main(["--birth", "1995-02-04T06:20", "--tz", "UTC", "--language", "EN"])
    assert rc == 0
    out = json.loads(capsys.readouterr().out)
    assert out["astrological_year"] == 1994
    assert out["year_star_name"] == "Six White Metal Star"
    assert out["language"] == "EN"


def test_cli_yaml_config(capsys, tmp_path: Path):
    cfg = tmp_path / "kigaku.yaml"
    cfg.write_text("language: EN\n", encoding="utf-8")
    rc = main(["--birth", "2020-03-05T11:56", "--config", str(cfg)])
    assert rc == 0
    out = json.loads(capsys.readouterr().out)
    assert out["astrological_month"] == 2
    assert out["language"] == "EN"


def test_cli_missing_data_file_falls_back(capsys, tmp_path: Path):
    rc = main(["--birth", "1995-02-04T15:21", "--data", str(tmp_path / "none.json")])
    assert rc == 0
    out = json.loads(capsys.readouterr().out)
    # fallback year start is Feb 4 00:00
    assert out["astrological_year"] == 1995


def test_cli_rejects_bad_birth(capsys):
    assert main(["--birth", "not-a-date"]) == 1
    assert "cannot parse" in capsys.readouterr().err


def test_cli_rejects_unknown_zone(capsys):
    assert main(["--birth", "1995-02-04", "--tz", "Mars/Olympus"]) == 1
    assert "unknown time zone" in capsys.readouterr().err


def test_cli_text_format(capsys):
    rc = main(["--birth", "1995-02-04T16:12", "--language", "EN", "--format", "text"])
    assert rc == 0
    out = capsys.readouterr().out
    assert "Year Star: Five Yellow Earth Star (5)" in out
    assert "Day Star: Nine Purple Fire Star (9)" in out
