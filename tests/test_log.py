from __future__ import annotations

import io
import sys

import pytest
from loguru import logger

from ecgplot.log import configure_logging, get_logger


@pytest.fixture
def stream():
    buffer = io.StringIO()
    yield buffer
    logger.remove()
    logger.configure(extra={})
    logger.add(sys.stderr)


def test_messages_carry_component(stream):
    configure_logging("DEBUG", sink=stream)

    get_logger("decoder").info("decoded 12 channels")

    output = stream.getvalue()
    assert "decoder" in output
    assert "decoded 12 channels" in output
    assert "INFO" in output


def test_unbound_logger_uses_package_name(stream):
    configure_logging("INFO", sink=stream)

    logger.info("plain message")

    assert "ecgplot" in stream.getvalue()


def test_level_filters_and_is_case_insensitive(stream):
    configure_logging("warning", sink=stream)
    log = get_logger("grid")

    log.info("not shown")
    log.warning("shown")

    output = stream.getvalue()
    assert "not shown" not in output
    assert "shown" in output
