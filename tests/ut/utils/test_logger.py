"""日志配置单元测试"""

from __future__ import annotations

import json
import logging

import pytest

from mkbuild.utils.logger import JSONFormatter, reset_logging, setup_logging_from_env


@pytest.fixture(autouse=True)
def _reset():
    yield
    reset_logging()


class TestJSONFormatter:
    def test_context_from_extra(self) -> None:
        record = logging.makeLogRecord({
            "name": "mkbuild.cmake.emitter", "levelname": "INFO",
            "msg": "已写入 %s", "args": ("CMakeLists.txt",),
            "artifact": "CMakeLists.txt", "lines": 3,
        })
        entry = json.loads(JSONFormatter().format(record))
        assert entry["message"] == "已写入 CMakeLists.txt"
        assert entry["logger"] == "mkbuild.cmake.emitter"
        assert entry["context"] == {"artifact": "CMakeLists.txt", "lines": 3}

    def test_no_context_key_without_extra(self) -> None:
        record = logging.makeLogRecord({"name": "x", "levelname": "WARNING", "msg": "m"})
        assert "context" not in json.loads(JSONFormatter().format(record))


class TestSetupFromEnv:
    def test_json_and_level(self, monkeypatch) -> None:
        monkeypatch.setenv("MKBUILD_LOG_LEVEL", "debug")
        monkeypatch.setenv("MKBUILD_LOG_JSON", "1")
        setup_logging_from_env()
        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JSONFormatter)

    def test_repeated_setup_keeps_one_handler(self, monkeypatch) -> None:
        monkeypatch.delenv("MKBUILD_LOG_JSON", raising=False)
        setup_logging_from_env()
        setup_logging_from_env()
        handlers = logging.getLogger().handlers
        assert len(handlers) == 1
        assert not isinstance(handlers[0].formatter, JSONFormatter)
