"""异常处理模块：定义统一的业务异常、扫描/存储异常与响应格式。"""

from typing import Optional

from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse


class AppException(HTTPException):
    """携带统一响应结构的业务异常，方便在全局处理中转换响应体。"""

    def __init__(self, msg: str, code: int = status.HTTP_400_BAD_REQUEST, data=None) -> None:
        super().__init__(status_code=code, detail=msg)
        self.data = data


class StoreIntegrityError(Exception):
    """条目表完整性被破坏时抛出的基类异常。"""


class DuplicatePathError(StoreIntegrityError):
    """写入的 path 已存在。"""

    def __init__(self, path: str) -> None:
        super().__init__(f"路径已存在: {path}")
        self.path = path


class ReferentialIntegrityError(StoreIntegrityError):
    """parent_id 无法指向一个合法的父目录。"""

    def __init__(self, message: str, parent_id: Optional[int]) -> None:
        super().__init__(message)
        self.parent_id = parent_id


class DanglingParentError(ReferentialIntegrityError):
    def __init__(self, parent_id: Optional[int]) -> None:
        super().__init__(f"父条目不存在: {parent_id}", parent_id)


class InvalidParentError(ReferentialIntegrityError):
    def __init__(self, parent_id: Optional[int]) -> None:
        super().__init__(f"父条目不是目录: {parent_id}", parent_id)


class ScanAbortedError(Exception):
    """扫描过程中无法读取节点元数据（stat 失败），整个扫描终止。"""

    def __init__(self, path: str, reason: OSError) -> None:
        detail = reason.strerror or str(reason)
        super().__init__(f"无法读取路径元数据: {path} ({detail})")
        self.path = path
        self.reason = reason


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:  # pragma: no cover - framework glue
    """将 FastAPI 的 ``HTTPException`` 转换为统一响应格式。"""
    payload = {"msg": exc.detail, "data": getattr(exc, "data", None), "code": exc.status_code}
    return JSONResponse(status_code=exc.status_code, content=payload)


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:  # pragma: no cover - framework glue
    """兜底处理：将未捕获异常转换为标准的 500 响应结构。"""
    payload = {
        "msg": "服务器内部错误",
        "data": None,
        "code": status.HTTP_500_INTERNAL_SERVER_ERROR,
    }
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=payload)
