from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from .calculator import KigakuCalculator
from .config import KigakuConfig, load_config_from_yaml
from .i18n import t
from .normalize import parse_iso_datetime, reference_zone


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Compute Nine Star Ki year/month/day stars for a birth instant.")
    parser.add_argument("--birth", required=True, help="Birth date or timestamp, e.g. 1995-02-04T16:12 or 1995-02-04")
    parser.add_argument("--tz", default=None, help="IANA zone of a naive --birth value (defaults to the reference zone)")
    parser.add_argument("--language", choices=["JA", "EN"], default=None)
    parser.add_argument("--data", type=Path, default=None, help="Solar-term JSON file (overrides config.data_path)")
    parser.add_argument("--config", type=Path, default=None, help="Optional YAML config file")
    parser.add_argument("--format", choices=["json", "text"], default="json")
    parser.add_argument("--log-level", default="WARNING")

    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format="[%(levelname)s] %(name)s: %(message)s")

    cfg = load_config_from_yaml(args.config) if args.config else KigakuConfig.from_env()
    if args.data is not None:
        cfg.data_path = args.data
    if args.language is not None:
        cfg.language = args.language

    input_tz = reference_zone(args.tz or cfg.reference_tz)
    if input_tz is None:
        print(f"error: unknown time zone {args.tz or cfg.reference_tz!r}", file=sys.stderr)
        return 1
    birth = parse_iso_datetime(args.birth, input_tz)
    if birth is None:
        print(f"error: cannot parse --birth {args.birth!r}", file=sys.stderr)
        return 1

    calculator = KigakuCalculator.from_config(cfg)
    result = calculator.compute(birth)
    if args.format == "text":
        lang = result.language
        print(f"{birth.isoformat()}  ({result.astrological_year}/{result.astrological_month})")
        print(f"{t('honmei', lang)}: {result.year_star_name} ({result.year_star})")
        print(f"{t('getsumei', lang)}: {result.month_star_name} ({result.month_star})")
        print(f"{t('nichimei', lang)}: {result.day_star_name} ({result.day_star})")
        return 0

    out = {"birth": birth.isoformat(), **result.to_dict()}
    print(json.dumps(out, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
