"""Configuration for the expense tracker.

Values come from environment variables with defaults relative to the
project root.
"""

import logging
import os
from pathlib import Path

_PROJECT_ROOT = Path(__file__).parent.parent.resolve()

DATA_DIR = Path(os.getenv("SMART_EXPENSE_DATA_DIR", _PROJECT_ROOT / "data"))
SEED_PATH = Path(os.getenv("SMART_EXPENSE_SEED_PATH", DATA_DIR / "seed.json"))

DEFAULT_LOCALE = os.getenv("SMART_EXPENSE_LOCALE", "en")
TREND_MONTHS = int(os.getenv("SMART_EXPENSE_TREND_MONTHS", "6"))
ADVICE_TIMEOUT = float(os.getenv("SMART_EXPENSE_ADVICE_TIMEOUT", "10.0"))
LOG_LEVEL = os.getenv("SMART_EXPENSE_LOG_LEVEL", "INFO")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = LOG_LEVEL) -> None:
    """Install a root handler once; later calls only adjust the level."""
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(format=LOG_FORMAT)
    root.setLevel(level.upper())


def get_seed_path() -> str:
    return str(SEED_PATH)
