"""层级条目存储：在 `file_objects` 表之上提供按父节点/路径查询与整树重建。

存储对象由调用方显式构造并传递（扫描器、查询接口各自持有），
不存在全局单例。一个 ``EntryStore`` 绑定一个数据库会话，写入采用单写者纪律。

排序约定：目录在前、文件在后，同类按名称升序；名称比较区分大小写，
按 Unicode 码点顺序（与 SQLite BINARY 排序规则一致），不受系统区域设置影响。
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import asdict, dataclass
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from organize_folder.packages.scanner.core.enums import EntryTypeEnum
from organize_folder.packages.scanner.core.exceptions import (
    DanglingParentError,
    DuplicatePathError,
    InvalidParentError,
    ReferentialIntegrityError,
)
from organize_folder.packages.scanner.core.logger import logger
from organize_folder.packages.scanner.crud.entry import entry_crud
from organize_folder.packages.scanner.models.entry import Entry


@dataclass(frozen=True)
class NewEntry:
    """待写入的条目；id 由存储生成。"""

    name: str
    path: str
    parent_id: Optional[int]
    type: EntryTypeEnum
    created_at: str
    modified_at: str
    size: Optional[int] = None


def entry_sort_key(entry: Entry) -> tuple[int, str]:
    """目录优先，其次按名称码点升序。"""
    return (0 if entry.type == EntryTypeEnum.DIRECTORY.value else 1, entry.name)


class EntryStore:
    def __init__(self, db: Session) -> None:
        self.db = db

    def insert(self, entry: NewEntry) -> int:
        """写入新条目并返回生成的 id。

        path 重复时抛出 ``DuplicatePathError``；parent_id 指向不存在的条目时抛出
        ``DanglingParentError``，指向文件时抛出 ``InvalidParentError``。
        """
        entry_type = EntryTypeEnum(entry.type)
        if (entry_type is EntryTypeEnum.FILE) != (entry.size is not None):
            raise ValueError(f"size 仅在文件条目上存在: {entry.path}")

        if entry_crud.get_by_path(self.db, path=entry.path) is not None:
            raise DuplicatePathError(entry.path)
        if entry.parent_id is not None:
            parent = entry_crud.get(self.db, entry.parent_id)
            if parent is None:
                raise DanglingParentError(entry.parent_id)
            if not parent.is_dir:
                raise InvalidParentError(entry.parent_id)

        payload = asdict(entry)
        payload["type"] = entry_type.value
        try:
            created = entry_crud.create(self.db, payload)
        except IntegrityError as exc:
            self.db.rollback()
            raise self._translate_integrity_error(entry) from exc
        return created.id

    def _translate_integrity_error(self, entry: NewEntry) -> Exception:
        # 预检查与写入之间存在并发修改时才会走到这里
        if entry_crud.get_by_path(self.db, path=entry.path) is not None:
            return DuplicatePathError(entry.path)
        if entry.parent_id is not None and entry_crud.get(self.db, entry.parent_id) is None:
            return DanglingParentError(entry.parent_id)
        return ReferentialIntegrityError(f"条目写入违反约束: {entry.path}", entry.parent_id)

    def get(self, entry_id: int) -> Optional[Entry]:
        return entry_crud.get(self.db, entry_id)

    def children_of(self, parent_id: Optional[int]) -> list[Entry]:
        """返回直接子条目；``None`` 表示返回所有根条目。"""
        return sorted(entry_crud.list_by_parent(self.db, parent_id=parent_id), key=entry_sort_key)

    def find_by_path(self, path: str) -> Optional[Entry]:
        return entry_crud.get_by_path(self.db, path=path)

    def full_hierarchy(self) -> list[Entry]:
        """从所有根条目出发逐层展开整棵树。

        一次性读取全部条目并按 parent_id 建立索引，再做迭代式广度优先展开；
        每一层整体按 ``entry_sort_key`` 排序后输出。
        """
        by_parent: dict[Optional[int], list[Entry]] = defaultdict(list)
        for entry in entry_crud.list_all(self.db):
            by_parent[entry.parent_id].append(entry)

        result: list[Entry] = []
        visited: set[int] = set()
        level = by_parent.get(None, [])
        while level:
            level = sorted((e for e in level if e.id not in visited), key=entry_sort_key)
            visited.update(e.id for e in level)
            result.extend(level)
            level = [child for e in level for child in by_parent.get(e.id, ())]
        return result

    def delete(self, entry_id: int) -> bool:
        """删除单个条目，其子孙由外键级联删除。"""
        return entry_crud.delete_by_id(self.db, id=entry_id)

    def clear_all(self) -> int:
        """删除全部条目，可重复调用。"""
        deleted = entry_crud.delete_all(self.db)
        logger.debug("Cleared %s entries", deleted)
        return deleted

    def count(self) -> int:
        return entry_crud.count(self.db)
