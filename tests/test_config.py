import logging
from pathlib import Path

from core import config


def test_seed_path_points_at_existing_file():
    assert Path(config.get_seed_path()).is_file()


def test_defaults_are_typed():
    assert isinstance(config.TREND_MONTHS, int)
    assert isinstance(config.ADVICE_TIMEOUT, float)


def test_configure_logging_sets_root_level():
    root = logging.getLogger()
    before = root.level
    try:
        config.configure_logging("debug")
        assert root.level == logging.DEBUG
    finally:
        root.setLevel(before)


def test_core_defaults_come_from_config():
    from core import charts, i18n

    assert charts.TREND_MONTHS == config.TREND_MONTHS
    assert i18n.DEFAULT_LOCALE in i18n.SUPPORTED_LOCALES
    if config.DEFAULT_LOCALE in i18n.SUPPORTED_LOCALES:
        assert i18n.DEFAULT_LOCALE == config.DEFAULT_LOCALE
