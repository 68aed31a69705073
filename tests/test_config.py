"""
Settings and logging helper tests.
"""

import inspect
import logging

import config
from utils.logger import get_logger


def test_pool_settings_are_typed_constants():
    assert isinstance(config.DB_PORT, int)
    assert isinstance(config.DB_POOL_MAX, int)
    assert config.DB_POOL_MIN <= config.DB_POOL_MAX
    assert config.LOG_LEVEL == config.LOG_LEVEL.upper()


def test_connection_settings_are_separate_parts():
    # The pool is built from keyword arguments; no DSN string is kept around.
    assert not hasattr(config, "DATABASE_URL")


def test_get_logger_takes_only_a_name():
    assert list(inspect.signature(get_logger).parameters) == ["name"]


def test_get_logger_installs_the_root_handler_once():
    first = get_logger("shopdata.test")
    handlers = len(logging.getLogger().handlers)
    get_logger("shopdata.test.other")

    assert first.name == "shopdata.test"
    assert len(logging.getLogger().handlers) == handlers
