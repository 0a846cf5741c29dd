import json
import logging
import sys

import pytest

from bsc_mcp.config import BscConfig, default_config
from bsc_mcp.logging_config import JsonFormatter, configure_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    root.handlers = handlers
    root.setLevel(level)


def test_logging_level_config():
    level = getattr(logging, default_config.log_level.upper(), logging.INFO)
    assert level in (
        logging.DEBUG,
        logging.INFO,
        logging.WARNING,
        logging.ERROR,
        logging.CRITICAL,
    )


def test_json_formatter_includes_extras():
    record = logging.LogRecord("bsc_mcp.mcp", logging.WARNING, __file__, 1, "tool=%s failed", ("get-block",), None)
    record.tool = "get-block"
    record.request_id = "req-1"
    payload = json.loads(JsonFormatter().format(record))
    assert payload == {
        "level": "WARNING",
        "message": "tool=get-block failed",
        "name": "bsc_mcp.mcp",
        "tool": "get-block",
        "request_id": "req-1",
    }


def test_json_formatter_includes_exception():
    try:
        raise ValueError("bad")
    except ValueError:
        record = logging.LogRecord("x", logging.ERROR, __file__, 1, "oops", (), sys.exc_info())
    payload = json.loads(JsonFormatter().format(record))
    assert "ValueError: bad" in payload["exc_info"]


def test_configure_logging_writes_to_stderr(restore_root_logger):
    configure_logging(BscConfig(private_key=None, log_level="debug", log_format="plain"))
    root = restore_root_logger
    assert root.level == logging.DEBUG
    assert len(root.handlers) == 1
    handler = root.handlers[0]
    assert handler.stream is sys.stderr
    assert not isinstance(handler.formatter, JsonFormatter)


def test_configure_logging_json(restore_root_logger):
    configure_logging(BscConfig(private_key=None, log_level="nonsense", log_format="JSON"))
    root = restore_root_logger
    assert root.level == logging.INFO
    assert isinstance(root.handlers[0].formatter, JsonFormatter)
