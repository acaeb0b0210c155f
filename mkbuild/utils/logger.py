"""mkbuild 日志配置

日志统一输出到 stderr，stdout 只留给命令本身的结果（生成的文件路径、依赖列表）。
两种格式:
- 文本: 终端交互使用，只带时间、级别和消息
- JSON: CI 流水线使用，额外带出调用方通过 extra= 传入的上下文字段

    logger.info("已写入 %s", path, extra={"artifact": str(path)})
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone

ENV_LOG_LEVEL = "MKBUILD_LOG_LEVEL"
ENV_LOG_JSON = "MKBUILD_LOG_JSON"

_TEXT_FORMAT = "%(asctime)s %(levelname)-7s %(message)s"
_TEXT_DATEFMT = "%H:%M:%S"

# LogRecord 自带的属性，其余属性都来自 extra=
_RESERVED = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {
    "message", "asctime", "taskName",
}


class JSONFormatter(logging.Formatter):
    """结构化 JSON 日志格式器

    输出示例:
        {"timestamp": "...", "level": "INFO", "logger": "mkbuild.cmake.emitter",
         "message": "已写入 CMakeLists.txt (120 行)",
         "context": {"artifact": "CMakeLists.txt", "lines": 120}}
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, object] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        context = {k: v for k, v in vars(record).items() if k not in _RESERVED}
        if context:
            entry["context"] = context
        if record.exc_info and record.exc_info[1]:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO", json_output: bool = False) -> None:
    """配置根日志器；重复调用会替换之前的 handler"""
    reset_logging()
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    handler = logging.StreamHandler(sys.stderr)
    if json_output:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(_TEXT_FORMAT, datefmt=_TEXT_DATEFMT))
    root.addHandler(handler)


def setup_logging_from_env() -> None:
    """按 MKBUILD_LOG_LEVEL / MKBUILD_LOG_JSON=1 配置日志"""
    setup_logging(
        level=os.getenv(ENV_LOG_LEVEL, "INFO"),
        json_output=os.getenv(ENV_LOG_JSON, "") == "1",
    )


def reset_logging() -> None:
    """清理根日志器上所有已注册的 handlers（测试中重新配置时使用）"""
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()
