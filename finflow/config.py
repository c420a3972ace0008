"""
Application configuration read from the environment (and an optional .env).
"""

import os
from pathlib import Path
from typing import Final

from dotenv import load_dotenv

load_dotenv()


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return int(raw)


class Config:
    DATA_DIR: Final[Path] = Path(os.getenv("FINFLOW_DATA_DIR", "data"))
    STORAGE_PREFIX: Final[str] = os.getenv("FINFLOW_STORAGE_PREFIX", "financeflow")
    LOG_LEVEL: Final[str] = os.getenv("FINFLOW_LOG_LEVEL", "INFO")
    CURRENCY: Final[str] = os.getenv("FINFLOW_CURRENCY", "GBP")

    # view sizes
    DASHBOARD_BUDGETS: Final[int] = _int_env("FINFLOW_DASHBOARD_BUDGETS", 3)
    RECENT_LIMIT: Final[int] = _int_env("FINFLOW_RECENT_LIMIT", 5)
    TOP_CATEGORIES: Final[int] = _int_env("FINFLOW_TOP_CATEGORIES", 8)
    SERIES_MONTHS: Final[int] = _int_env("FINFLOW_SERIES_MONTHS", 6)

    @classmethod
    def validate(cls) -> None:
        """Reject view sizes that would render nothing."""
        sizes = {
            "FINFLOW_DASHBOARD_BUDGETS": cls.DASHBOARD_BUDGETS,
            "FINFLOW_RECENT_LIMIT": cls.RECENT_LIMIT,
            "FINFLOW_TOP_CATEGORIES": cls.TOP_CATEGORIES,
            "FINFLOW_SERIES_MONTHS": cls.SERIES_MONTHS,
        }
        for name, value in sizes.items():
            if value <= 0:
                raise ValueError(f"{name} must be positive, got {value}")
