# src/supply_tracking/utils/config.py
"""
Environment-driven settings for the project analytics backend.

Values come from a `.env` file at the project root (if present) and fall back
to safe defaults so imports never fail on a fresh checkout.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load .env from project root
BASE_DIR = Path(__file__).resolve().parents[3]
load_dotenv(BASE_DIR / ".env")

MERGE_STRATEGIES = ("first", "max")


class Config:
    DB_DRIVER = os.getenv("DB_DRIVER", "{ODBC Driver 17 for SQL Server}")
    DB_SERVER = os.getenv("DB_SERVER", "localhost").strip()
    DB_DATABASE = os.getenv("DB_DATABASE", "SupplyTracking")
    DB_TRUSTED_CONNECTION = os.getenv("DB_TRUSTED_CONNECTION", "yes")

    # Only used when trusted connection is disabled
    DB_UID = os.getenv("DB_UID", "")
    DB_PWD = os.getenv("DB_PWD", "")

    ANALYTICS_VIEW = os.getenv("ANALYTICS_VIEW", "dbo.mv_project_analytics_complete")
    ANALYTICS_REFRESH_PROC = os.getenv(
        "ANALYTICS_REFRESH_PROC", "dbo.refresh_project_analytics_views"
    )

    EXPORT_DIR = Path(os.getenv("EXPORT_DIR", BASE_DIR / "exports"))

    PART_MERGE_STRATEGY = os.getenv("PART_MERGE_STRATEGY", "first").strip().lower()

    @property
    def merge_strategy(self) -> str:
        """Configured cross-machine merge strategy, 'first' when unrecognised."""
        if self.PART_MERGE_STRATEGY in MERGE_STRATEGIES:
            return self.PART_MERGE_STRATEGY
        return "first"

    @property
    def DATABASE_CONNECTION_STRING(self) -> str:
        conn_str = (
            f"DRIVER={self.DB_DRIVER};"
            f"SERVER={self.DB_SERVER};"
            f"DATABASE={self.DB_DATABASE};"
        )
        if self.DB_TRUSTED_CONNECTION.lower() in ("yes", "true", "1"):
            return conn_str + "Trusted_Connection=yes;"
        return conn_str + f"UID={self.DB_UID};PWD={self.DB_PWD};"

    def __repr__(self):
        return f"<Config server={self.DB_SERVER} db={self.DB_DATABASE}>"


# Singleton
config = Config()
