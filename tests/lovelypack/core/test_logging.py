# tests/lovelypack/core/test_logging.py
from __future__ import annotations

import json
import sys
import logging

import pytest

from lovelypack.core.logging import clearLogContext, configureLogging, getLogContext, setLogContext
from lovelypack.core.logging.formatters import DevFormatter, JsonFormatter



@pytest.fixture(autouse=True)
def _resetContext():
    clearLogContext()
    yield
    clearLogContext()



def _record(msg: str = "hello %s", *args) -> logging.LogRecord:
    return logging.LogRecord("lovelypack.test", logging.WARNING, __file__, 1, msg, args or ("world",), None)



def test_context_merges_and_ignores_none():
    setLogContext(step="scan", file=None)
    setLogContext(file="game.ts")
    assert getLogContext() == {"step": "scan", "file": "game.ts"}
    clearLogContext()
    assert getLogContext() is None



def test_dev_formatter_appends_step_and_file():
    formatter = DevFormatter()
    assert formatter.format(_record()) == "WARNING: [lovelypack.test] hello world"
    setLogContext(step="auxiliary", file="shader.ts")
    assert formatter.format(_record()) == "WARNING: [lovelypack.test] hello world [auxiliary/shader.ts]"



def test_json_formatter_carries_context_and_exception():
    setLogContext(modId="my-mod")
    try:
        raise ValueError("bad")
    except ValueError:
        record = logging.LogRecord("x", logging.ERROR, __file__, 1, "failed", (), exc_info=sys.exc_info())

    data = json.loads(JsonFormatter().format(record))
    assert data["level"] == "error"
    assert data["msg"] == "failed"
    assert data["ctx"] == {"modId": "my-mod"}
    assert data["exc"]["type"] == "ValueError"
    assert data["exc"]["message"] == "bad"



def test_configure_logging_installs_console_and_file_handlers(tmp_path):
    root = logging.getLogger()
    saved = (root.level, list(root.handlers))
    try:
        configureLogging("debug", tmp_path / "build.log")
        assert root.level == logging.DEBUG
        assert [type(handler.formatter) for handler in root.handlers] == [DevFormatter, JsonFormatter]

        configureLogging("no-such-level")
        assert root.level == logging.INFO
        assert len(root.handlers) == 1
    finally:
        for handler in root.handlers:
            handler.close()
        root.handlers[:] = saved[1]
        root.setLevel(saved[0])
