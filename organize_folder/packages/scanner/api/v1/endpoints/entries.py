"""条目查询路由：整树、子条目、按路径查找与级联删除。"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.orm import Session

from organize_folder.packages.scanner.api.v1.schemas.entries import (
    EntryListResponse,
    EntryResponse,
)
from organize_folder.packages.scanner.core.dependencies import get_db
from organize_folder.packages.scanner.services.scan_service import scan_service

router = APIRouter(prefix="/entries", tags=["entries"])


@router.get("/hierarchy", response_model=EntryListResponse)
def get_hierarchy(db: Session = Depends(get_db)):
    return scan_service.get_hierarchy(db)


@router.get("/children", response_model=EntryListResponse)
def get_children(
    parent_id: Optional[int] = Query(None, ge=1, description="为空时返回根条目"),
    db: Session = Depends(get_db),
):
    return scan_service.get_children(db, parent_id=parent_id)


@router.get("/lookup", response_model=EntryResponse)
def find_by_path(path: str = Query(..., min_length=1), db: Session = Depends(get_db)):
    return scan_service.find_by_path(db, path=path)


@router.delete("/{entry_id}", response_model=EntryResponse)
def delete_entry(entry_id: int = Path(..., ge=1), db: Session = Depends(get_db)):
    return scan_service.delete_entry(db, id=entry_id)
