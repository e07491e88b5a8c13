"""Nine Star Ki (Kyusei Kigaku) star engine driven by solar-term boundaries."""

from .boundaries import MonthBoundaryResolver, YearBoundaryResolver
from .calculator import KigakuCalculator, StarResult, compute, get_default_calculator, normalize
from .config import KigakuConfig
from .i18n import star_name
from .sekki import SekkiInstant, SekkiKind, SekkiProvider
from .sekki_table import SekkiTable, get_default_table

__all__ = [
    "KigakuCalculator",
    "KigakuConfig",
    "MonthBoundaryResolver",
    "SekkiInstant",
    "SekkiKind",
    "SekkiProvider",
    "SekkiTable",
    "StarResult",
    "YearBoundaryResolver",
    "compute",
    "get_default_calculator",
    "get_default_table",
    "normalize",
    "star_name",
]
