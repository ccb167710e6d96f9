"""目录扫描器：深度优先遍历目录树，将每个节点写入条目存储。

遍历规则：
- 扫描开始前清空存储中的全部条目；
- 每个节点先 stat、再写入，拿到生成的 id 之后才遍历其子节点；
- 同一目录下先递归全部子目录，再处理文件；同类按名称码点顺序；
- 目录列举中的符号链接与特殊文件（socket、FIFO、设备）既不是文件也不是目录，直接跳过；
- 每写入一个节点就调用一次 ``on_progress(目录数, 文件数)``，计数只增不减。

失败策略：
- 列举目录内容失败（权限等）只记录警告，目录条目保留，扫描继续；
- 名称不是合法 UTF-8 的子条目无法存储，记录警告后跳过；
- 节点本身 stat 失败抛出 ``ScanAbortedError``，整个扫描终止，已写入的数据不回滚；
- 存储完整性异常原样向上抛出。
"""

from __future__ import annotations

import os
import stat
from dataclasses import dataclass
from typing import Callable, Optional

from organize_folder.packages.scanner.core.enums import EntryTypeEnum
from organize_folder.packages.scanner.core.exceptions import ScanAbortedError
from organize_folder.packages.scanner.core.logger import scan_logger
from organize_folder.packages.scanner.core.timezone import timestamp_to_iso
from organize_folder.packages.scanner.services.entry_store import EntryStore, NewEntry

ProgressCallback = Callable[[int, int], None]


def _is_storable_name(name: str) -> bool:
    # 非 UTF-8 字节会被 os 解码为代理字符，无法写入数据库
    try:
        name.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


@dataclass(frozen=True)
class ScanSummary:
    root_id: int
    folder_count: int
    file_count: int


class FileScanner:
    def __init__(self, store: EntryStore) -> None:
        self.store = store
        self.folder_count = 0
        self.file_count = 0
        self._on_progress: Optional[ProgressCallback] = None

    def scan(self, root_path: str | os.PathLike, on_progress: Optional[ProgressCallback] = None) -> ScanSummary:
        """清空存储后从 ``root_path`` 开始扫描，返回扫描统计。"""
        root = os.path.abspath(os.fspath(root_path))
        self.store.clear_all()
        self.folder_count = 0
        self.file_count = 0
        self._on_progress = on_progress
        try:
            root_id = self._scan_node(root, None)
        except Exception:
            scan_logger.exception("Error scanning folder %s", root)
            raise
        finally:
            self._on_progress = None

        scan_logger.info(
            "Scanned %s: %s directories, %s files",
            root,
            self.folder_count,
            self.file_count,
        )
        return ScanSummary(root_id=root_id, folder_count=self.folder_count, file_count=self.file_count)

    def _scan_node(self, path: str, parent_id: Optional[int]) -> int:
        try:
            st = os.stat(path)
        except OSError as exc:
            raise ScanAbortedError(path, exc) from exc

        is_dir = stat.S_ISDIR(st.st_mode)
        entry_id = self.store.insert(
            NewEntry(
                name=os.path.basename(path) or path,
                path=path,
                parent_id=parent_id,
                type=EntryTypeEnum.DIRECTORY if is_dir else EntryTypeEnum.FILE,
                size=None if is_dir else st.st_size,
                created_at=timestamp_to_iso(getattr(st, "st_birthtime", st.st_ctime)),
                modified_at=timestamp_to_iso(st.st_mtime),
            )
        )

        if is_dir:
            self.folder_count += 1
        else:
            self.file_count += 1
        if self._on_progress is not None:
            self._on_progress(self.folder_count, self.file_count)

        if is_dir:
            directories, files = self._list_children(path)
            for child in directories:
                self._scan_node(child, entry_id)
            for child in files:
                self._scan_node(child, entry_id)
        return entry_id

    def _list_children(self, path: str) -> tuple[list[str], list[str]]:
        """列举目录，返回 (子目录路径, 文件路径)；读取失败时返回空列表。"""
        directories: list[str] = []
        files: list[str] = []
        try:
            with os.scandir(path) as entries:
                for child in entries:
                    if not _is_storable_name(child.name):
                        scan_logger.warning(
                            "Skipping entry with undecodable name: %r",
                            os.path.join(path, child.name),
                            extra={"scan_path": path},
                        )
                        continue
                    if child.is_dir(follow_symlinks=False):
                        directories.append(child.name)
                    elif child.is_file(follow_symlinks=False):
                        files.append(child.name)
        except OSError as exc:
            scan_logger.warning("Could not read directory contents: %s (%s)", path, exc, extra={"scan_path": path})
            return [], []
        return (
            [os.path.join(path, name) for name in sorted(directories)],
            [os.path.join(path, name) for name in sorted(files)],
        )
