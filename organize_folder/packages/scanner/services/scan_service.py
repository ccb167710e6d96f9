"""扫描协调服务：驱动扫描器、转发进度事件，并提供层级查询与应用状态接口。

所有方法返回 ``create_response`` 统一结构；扫描失败不抛出 HTTP 异常，
而是以 ``success=False`` 与可读原因返回，由展示层决定如何提示。
"""

from __future__ import annotations

import os
import threading
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from organize_folder.packages.scanner.core.constants import (
    HTTP_STATUS_BAD_REQUEST,
    HTTP_STATUS_CONFLICT,
    HTTP_STATUS_NOT_FOUND,
    HTTP_STATUS_OK,
)
from organize_folder.packages.scanner.core.enums import ScanEventKindEnum
from organize_folder.packages.scanner.core.exceptions import (
    AppException,
    ScanAbortedError,
    StoreIntegrityError,
)
from organize_folder.packages.scanner.core.logger import logger
from organize_folder.packages.scanner.core.responses import create_response
from organize_folder.packages.scanner.core.timezone import to_iso_utc, utc_now
from organize_folder.packages.scanner.crud.app_state import app_state_crud
from organize_folder.packages.scanner.models.app_state import AppState
from organize_folder.packages.scanner.models.entry import Entry
from organize_folder.packages.scanner.services.entry_store import EntryStore
from organize_folder.packages.scanner.services.file_scanner import FileScanner
from organize_folder.packages.scanner.services.progress import ScanProgressChannel, progress_channel


class ScanService:
    def __init__(self, channel: ScanProgressChannel) -> None:
        self.channel = channel
        # 同一时刻只允许一个扫描；查询接口不加锁
        self._scan_lock = threading.Lock()

    # ----------------------------
    # 扫描
    # ----------------------------
    def scan_folder(self, db: Session, *, path: str) -> Dict[str, Any]:
        raw = (path or "").strip()
        if not raw:
            raise AppException("扫描路径不能为空", HTTP_STATUS_BAD_REQUEST)
        root = os.path.abspath(os.path.expanduser(raw))

        if not self._scan_lock.acquire(blocking=False):
            raise AppException("已有扫描正在进行，请稍后再试", HTTP_STATUS_CONFLICT)
        try:
            return self._run_scan(db, root)
        finally:
            self._scan_lock.release()

    def _run_scan(self, db: Session, root: str) -> Dict[str, Any]:
        scanner = FileScanner(EntryStore(db))
        self.channel.publish(ScanEventKindEnum.STARTED, root_path=root)
        try:
            summary = scanner.scan(root, self.channel.progress_sink(root))
        except (ScanAbortedError, StoreIntegrityError, OSError) as exc:
            return self._scan_failed(db, scanner, root, str(exc) or exc.__class__.__name__)
        except Exception as exc:
            # 数据库驱动等意外错误同样以失败结果结束，保证订阅者收到终止事件
            return self._scan_failed(db, scanner, root, f"{exc.__class__.__name__}: {exc}")

        self._save_app_state(db, root)
        message = "Folder scanned successfully"
        self.channel.publish(
            ScanEventKindEnum.COMPLETED,
            folder_count=summary.folder_count,
            file_count=summary.file_count,
            root_path=root,
            message=message,
        )
        data = {
            "success": True,
            "message": message,
            "folder_count": summary.folder_count,
            "file_count": summary.file_count,
        }
        return create_response("扫描完成", data, HTTP_STATUS_OK)

    def _scan_failed(self, db: Session, scanner: FileScanner, root: str, message: str) -> Dict[str, Any]:
        # 已提交的条目保留，只丢弃失败写入留下的事务
        db.rollback()
        self.channel.publish(
            ScanEventKindEnum.FAILED,
            folder_count=scanner.folder_count,
            file_count=scanner.file_count,
            root_path=root,
            message=message,
        )
        data = {
            "success": False,
            "message": message,
            "folder_count": scanner.folder_count,
            "file_count": scanner.file_count,
        }
        return create_response("扫描失败：" + message, data, HTTP_STATUS_OK)

    def latest_progress(self) -> Dict[str, Any]:
        event = self.channel.latest
        return create_response("获取扫描进度成功", event.to_dict() if event else None, HTTP_STATUS_OK)

    # ----------------------------
    # 条目查询
    # ----------------------------
    def get_hierarchy(self, db: Session) -> Dict[str, Any]:
        entries = EntryStore(db).full_hierarchy()
        return create_response("获取目录层级成功", [self._serialize_entry(e) for e in entries], HTTP_STATUS_OK)

    def get_children(self, db: Session, *, parent_id: Optional[int]) -> Dict[str, Any]:
        entries = EntryStore(db).children_of(parent_id)
        return create_response("获取子条目成功", [self._serialize_entry(e) for e in entries], HTTP_STATUS_OK)

    def find_by_path(self, db: Session, *, path: str) -> Dict[str, Any]:
        entry = EntryStore(db).find_by_path(path)
        if entry is None:
            raise AppException("条目不存在", HTTP_STATUS_NOT_FOUND)
        return create_response("获取条目成功", self._serialize_entry(entry), HTTP_STATUS_OK)

    def delete_entry(self, db: Session, *, id: int) -> Dict[str, Any]:
        if not EntryStore(db).delete(id):
            raise AppException("条目不存在", HTTP_STATUS_NOT_FOUND)
        return create_response("删除条目成功", None, HTTP_STATUS_OK)

    # ----------------------------
    # 应用状态
    # ----------------------------
    def get_app_state(self, db: Session) -> Dict[str, Any]:
        state = app_state_crud.get_current(db)
        return create_response("获取应用状态成功", self._serialize_state(state), HTTP_STATUS_OK)

    def clear_app_state(self, db: Session) -> Dict[str, Any]:
        deleted = app_state_crud.delete_all(db)
        if deleted:
            logger.info("App state cleared")
        return create_response("App state cleared successfully", None, HTTP_STATUS_OK)

    def _save_app_state(self, db: Session, root: str) -> None:
        state = app_state_crud.get_current(db)
        if state is None:
            state = AppState(selected_folder_path=root)
        state.selected_folder_path = root
        state.is_scanned = True
        state.last_scan_time = to_iso_utc(utc_now())
        app_state_crud.save(db, state)

    # ----------------------------
    # 工具方法
    # ----------------------------
    @staticmethod
    def _serialize_entry(entry: Entry) -> Dict[str, Any]:
        return {
            "id": entry.id,
            "name": entry.name,
            "path": entry.path,
            "parent_id": entry.parent_id,
            "type": entry.type,
            "size": entry.size,
            "created_at": entry.created_at,
            "modified_at": entry.modified_at,
        }

    @staticmethod
    def _serialize_state(state: Optional[AppState]) -> Optional[Dict[str, Any]]:
        if state is None:
            return None
        return {
            "selected_folder_path": state.selected_folder_path,
            "is_scanned": state.is_scanned,
            "last_scan_time": state.last_scan_time,
        }


scan_service = ScanService(progress_channel)
