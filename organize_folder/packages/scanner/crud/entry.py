"""文件系统条目 CRUD。"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from organize_folder.packages.scanner.crud.base import CRUDBase
from organize_folder.packages.scanner.models.entry import Entry


class CRUDEntry(CRUDBase[Entry]):
    def get_by_path(self, db: Session, *, path: str) -> Entry | None:
        return db.scalars(select(Entry).where(Entry.path == path)).first()

    def list_by_parent(self, db: Session, *, parent_id: Optional[int]) -> list[Entry]:
        stmt = select(Entry)
        if parent_id is None:
            stmt = stmt.where(Entry.parent_id.is_(None))
        else:
            stmt = stmt.where(Entry.parent_id == parent_id)
        return list(db.scalars(stmt))

    def delete_by_id(self, db: Session, *, id: int, auto_commit: bool = True) -> bool:
        """按主键删除；使用 SQL 级 DELETE 以便数据库执行级联删除。"""
        result = db.execute(delete(Entry).where(Entry.id == id))
        if auto_commit:
            try:
                db.commit()
            except Exception:
                db.rollback()
                raise
        return bool(result.rowcount)


entry_crud = CRUDEntry(Entry)
