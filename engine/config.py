"""Runtime configuration for the finance tracker.

Paths and the log level can be overridden through environment variables.
Budget and insight thresholds are fixed policy and live next to the code that
applies them, not here.
"""
import logging
import os
from pathlib import Path

_PROJECT_ROOT = Path(__file__).parent.parent.resolve()

DATA_DIR = Path(os.getenv("FINANCE_DATA_DIR", _PROJECT_ROOT / "data"))
STORE_PATH = Path(os.getenv("FINANCE_STORE_PATH", DATA_DIR / "store.json"))

TRANSACTIONS_KEY = "finance-transactions"
BUDGETS_KEY = "finance-budgets"

LOG_LEVEL = os.getenv("FINANCE_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# Dashboard defaults
MONTHLY_CHART_WINDOW = 6
CATEGORY_PIE_LIMIT = 8
TOP_CATEGORY_LIMIT = 3


def configure_logging(level: str = LOG_LEVEL) -> None:
    logging.basicConfig(level=getattr(logging, level, logging.INFO), format=LOG_FORMAT)
