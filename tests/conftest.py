"""
Pytest configuration and shared fixtures.
"""

import logging

import pytest

from graph_analysis.core.config_manager import ConfigurationManager, reset_config
from graph_analysis.core.logging_config import LOGGER_NAMESPACE
from graph_fixtures import make_table, reference_table as build_reference_table


def _reset_package_logger():
    logger = logging.getLogger(LOGGER_NAMESPACE)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture(autouse=True)
def isolated_configuration(monkeypatch):
    """Every test starts from the built-in defaults and propagating loggers."""
    for name in list(ConfigurationManager.ENV_MAPPINGS) + ["GRAPH_ANALYSIS_CONFIG"]:
        monkeypatch.delenv(name, raising=False)
    reset_config()
    _reset_package_logger()
    yield
    reset_config()
    _reset_package_logger()


@pytest.fixture
def reference_table():
    return build_reference_table()


@pytest.fixture
def path_table():
    """Simple path 1 - 2 - 3 - 4."""
    return make_table([(1, 2), (2, 3), (3, 4)])
