import logging

import pytest

from finflow.config import Config
from finflow.logger import setup_logger


def test_defaults_validate():
    Config.validate()
    assert Config.STORAGE_PREFIX
    assert Config.DASHBOARD_BUDGETS > 0


def test_validate_rejects_non_positive_sizes(monkeypatch):
    monkeypatch.setattr(Config, "DASHBOARD_BUDGETS", 0)
    with pytest.raises(ValueError, match="FINFLOW_DASHBOARD_BUDGETS"):
        Config.validate()


def test_setup_logger_levels():
    logger = setup_logger("finflow.test", "debug")
    assert logger.name == "finflow.test"
    assert logging.getLogger().level == logging.DEBUG

    setup_logger("finflow.test", "nonsense")
    assert logging.getLogger().level == logging.INFO
