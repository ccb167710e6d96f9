"""应用状态路由：读取与清除最近一次扫描的目录信息。"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from organize_folder.packages.scanner.api.v1.schemas.entries import AppStateResponse
from organize_folder.packages.scanner.core.dependencies import get_db
from organize_folder.packages.scanner.services.scan_service import scan_service

router = APIRouter(prefix="/app-state", tags=["app-state"])


@router.get("", response_model=AppStateResponse)
def get_app_state(db: Session = Depends(get_db)):
    return scan_service.get_app_state(db)


@router.delete("", response_model=AppStateResponse)
def clear_app_state(db: Session = Depends(get_db)):
    return scan_service.clear_app_state(db)
