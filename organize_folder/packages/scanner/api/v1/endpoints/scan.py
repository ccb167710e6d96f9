"""扫描相关路由：发起扫描、订阅与查询扫描进度。"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from organize_folder.packages.scanner.api.v1.schemas.entries import (
    ScanProgressResponse,
    ScanRequest,
    ScanResponse,
)
from organize_folder.packages.scanner.core.dependencies import get_db
from organize_folder.packages.scanner.core.logger import logger
from organize_folder.packages.scanner.services.progress import iter_sse
from organize_folder.packages.scanner.services.scan_service import scan_service

router = APIRouter(prefix="/scan", tags=["scan"])


@router.post("", response_model=ScanResponse)
def scan_folder(payload: ScanRequest, db: Session = Depends(get_db)):
    # 同步执行：FastAPI 在线程池中运行该函数，扫描期间事件循环仍可推送进度
    logger.info("Scan requested for %s", payload.path)
    return scan_service.scan_folder(db, path=payload.path)


@router.get("/progress")
def stream_progress():
    """以 ``text/event-stream`` 推送进度事件，直到扫描完成或失败。"""
    channel = scan_service.channel
    subscriber = channel.subscribe()
    return StreamingResponse(
        iter_sse(channel, subscriber),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache"},
    )


@router.get("/progress/latest", response_model=ScanProgressResponse)
def latest_progress():
    return scan_service.latest_progress()
