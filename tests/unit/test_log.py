"""Tests for configure_logging()."""

from __future__ import annotations

import logging

import pytest

from notefuse.log import configure_logging


@pytest.fixture(autouse=True)
def _restore_logger():
    logger = logging.getLogger("notefuse")
    saved = (logger.handlers[:], logger.level, logger.propagate)
    yield
    logger.handlers[:], logger.level, logger.propagate = saved[0], saved[1], saved[2]


def test_configure_sets_level_and_single_handler():
    logger = configure_logging("debug")
    assert logger.name == "notefuse"
    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 1


def test_configure_twice_does_not_stack_handlers():
    configure_logging()
    logger = configure_logging(logging.WARNING)
    assert len(logger.handlers) == 1
    assert logger.level == logging.WARNING


def test_noisy_loggers_quieted():
    configure_logging()
    assert logging.getLogger("litellm").level == logging.WARNING
    assert logging.getLogger("httpx").level == logging.WARNING


def test_pipeline_loggers_are_children():
    configure_logging()
    child = logging.getLogger("notefuse.rag.retriever")
    assert child.getEffectiveLevel() == logging.INFO
