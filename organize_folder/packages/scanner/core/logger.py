"""日志配置：控制台彩色输出、按天滚动的文件日志，以及可选的 JSON 结构化格式。

所有日志挂在 ``organize_folder`` 命名空间下。目录遍历产生的逐条警告
（权限不足、无法解码的文件名）使用子记录器 ``organize_folder.scanner``，
可通过 ``SCAN_LOG_LEVEL`` 单独调高或调低，而不影响请求日志。
"""

import json
import logging
import logging.config
import sys
from contextvars import ContextVar
from datetime import datetime
from typing import Any, Dict, Optional

from .config import Settings, get_settings

LOGGER_NAME = "organize_folder"
SCAN_LOGGER_NAME = f"{LOGGER_NAME}.scanner"
LOG_FORMAT = "%(asctime)s %(levelname)-8s [%(request_id)s] %(name)s: %(message)s"
_FORMATTER_MODULE = "organize_folder.packages.scanner.core.logger"

_request_id_ctx: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


def set_request_id(request_id: Optional[str]) -> None:
    _request_id_ctx.set(request_id)


class RequestIdFilter(logging.Filter):
    """把当前请求的 X-Request-ID 写入日志记录；请求之外记为 ``-``。"""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = _request_id_ctx.get() or "-"
        return True


class ColorFormatter(logging.Formatter):
    """按级别着色的文本格式化器，时间戳使用 ``TIMEZONE`` 配置的时区。"""

    RESET = "\033[0m"
    COLORS = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[41m",
    }

    def __init__(self, fmt: str = LOG_FORMAT, use_colors: Optional[bool] = None) -> None:
        super().__init__(fmt=fmt)
        self.use_colors = sys.stderr.isatty() if use_colors is None else use_colors

    def formatTime(self, record: logging.LogRecord, datefmt: Optional[str] = None) -> str:
        dt = datetime.fromtimestamp(record.created, get_settings().timezone_info)
        if datefmt:
            return dt.strftime(datefmt)
        return dt.isoformat(sep=" ", timespec="milliseconds")

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        color = self.COLORS.get(record.levelno) if self.use_colors else None
        return f"{color}{message}{self.RESET}" if color else message


class JsonFormatter(ColorFormatter):
    """每条记录一行 JSON；扫描警告额外带上出错目录 ``scan_path``。"""

    def __init__(self) -> None:
        super().__init__(use_colors=False)

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "ts": self.formatTime(record),
            "logger": record.name,
            "level": record.levelname,
            "msg": record.getMessage(),
            "request_id": getattr(record, "request_id", "-"),
        }
        scan_path = getattr(record, "scan_path", None)
        if scan_path is not None:
            payload["scan_path"] = scan_path
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def build_logging_config(settings: Settings) -> Dict[str, Any]:
    """根据配置生成 ``dictConfig`` 字典；单独拆出便于测试。"""
    handlers = ["console", "file"]
    if settings.log_json:
        console_formatter = file_formatter = "json"
    else:
        console_formatter, file_formatter = "console", "file"

    loggers: Dict[str, Any] = {
        name: {"handlers": handlers, "level": settings.log_level, "propagate": False}
        for name in (LOGGER_NAME, "uvicorn", "uvicorn.error", "uvicorn.access")
    }
    # 子记录器只调整级别，输出仍交给 organize_folder 的处理器
    loggers[SCAN_LOGGER_NAME] = {"level": settings.scan_log_level or "NOTSET"}

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {"request_id": {"()": f"{_FORMATTER_MODULE}.RequestIdFilter"}},
        "formatters": {
            "console": {"()": f"{_FORMATTER_MODULE}.ColorFormatter"},
            "file": {"()": f"{_FORMATTER_MODULE}.ColorFormatter", "use_colors": False},
            "json": {"()": f"{_FORMATTER_MODULE}.JsonFormatter"},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": console_formatter,
                "filters": ["request_id"],
            },
            "file": {
                "class": "logging.handlers.TimedRotatingFileHandler",
                "formatter": file_formatter,
                "filters": ["request_id"],
                "filename": str(settings.log_file_path),
                "when": "midnight",
                "backupCount": 14,
                "encoding": "utf-8",
                "delay": True,
            },
        },
        "loggers": loggers,
        "root": {"handlers": handlers, "level": settings.log_level},
    }


def setup_logging() -> None:
    settings = get_settings()
    settings.log_directory.mkdir(parents=True, exist_ok=True)
    logging.config.dictConfig(build_logging_config(settings))


logger = logging.getLogger(LOGGER_NAME)
scan_logger = logging.getLogger(SCAN_LOGGER_NAME)
