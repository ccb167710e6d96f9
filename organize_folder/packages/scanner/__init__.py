"""目录扫描业务包：扫描目录树、持久化层级条目并提供查询接口。

主应用只通过本模块导出的名称装配路由、日志与异常处理。
"""

from .api.v1 import api_router
from .core.config import get_settings
from .core.exceptions import generic_exception_handler, http_exception_handler
from .core.logger import logger, setup_logging
from .core.responses import create_response
from .db.init_db import init_db

__all__ = [
    "api_router",
    "create_response",
    "generic_exception_handler",
    "get_settings",
    "http_exception_handler",
    "init_db",
    "logger",
    "setup_logging",
]
