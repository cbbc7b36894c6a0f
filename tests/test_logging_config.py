"""Tests for logging_config.py."""

import logging
import sys

import pytest

from image_variants.core.logging_config import (
    DEFAULT_LOGGER_NAME,
    LOG_FORMATS,
    enable_debug_logging,
    get_logger,
    setup_logger,
)


@pytest.fixture
def clean_env(monkeypatch):
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    monkeypatch.delenv("LOG_FORMAT", raising=False)
    return monkeypatch


def test_package_logger_has_one_stdout_handler(clean_env):
    logger = setup_logger()
    assert logger.name == DEFAULT_LOGGER_NAME == "image-variants"
    assert len(logger.handlers) == 1
    assert logger.handlers[0].stream is sys.stdout
    assert logger.propagate is False


@pytest.mark.parametrize(
    "env_level,expected",
    [(None, logging.INFO), ("warning", logging.WARNING), ("DEBUG", logging.DEBUG), ("LOUD", logging.INFO)],
)
def test_level_seeded_from_environment(clean_env, env_level, expected):
    if env_level is not None:
        clean_env.setenv("LOG_LEVEL", env_level)
    logger = setup_logger(name=f"test-env-level-{env_level}")
    assert logger.level == expected


def test_explicit_level_wins_over_environment(clean_env):
    clean_env.setenv("LOG_LEVEL", "ERROR")
    assert setup_logger(name="test-explicit-level", level="debug").level == logging.DEBUG


def test_existing_logger_keeps_its_level(clean_env):
    logger = setup_logger(name="test-keeps-level", level="DEBUG")
    clean_env.setenv("LOG_LEVEL", "ERROR")
    assert get_logger("test-keeps-level") is logger
    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 1


def test_structured_format_includes_call_site(clean_env):
    fmt = setup_logger(name="test-structured-format").handlers[0].formatter._fmt
    assert fmt == LOG_FORMATS["structured"]
    assert "%(funcName)s" in fmt and "%(lineno)d" in fmt


def test_log_format_environment_override(clean_env):
    clean_env.setenv("LOG_FORMAT", "simple")
    fmt = setup_logger(name="test-simple-format", format_type="structured").handlers[0].formatter._fmt
    assert fmt == LOG_FORMATS["simple"]


def test_unknown_format_falls_back_to_simple(clean_env):
    fmt = setup_logger(name="test-unknown-format", format_type="fancy").handlers[0].formatter._fmt
    assert fmt == LOG_FORMATS["simple"]


def test_enable_debug_logging_reaches_children():
    root = logging.getLogger()
    previous_root_level = root.level
    try:
        enable_debug_logging("test-debug-parent")
        assert get_logger("test-debug-parent").level == logging.DEBUG
        assert root.level == logging.DEBUG
        assert logging.getLogger("test-debug-parent.staging").getEffectiveLevel() == logging.DEBUG
    finally:
        root.setLevel(previous_root_level)
