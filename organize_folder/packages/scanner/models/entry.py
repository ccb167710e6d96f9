"""文件系统条目模型：一次扫描中发现的文件或目录。

存储规则：
- path：绝对路径，全局唯一；
- parent_id：仅扫描根为 NULL，其余指向类型为 directory 的条目；
- type：'file' 或 'directory'，创建后不变；
- size：仅文件有值（字节数），目录为 NULL；
- created_at/modified_at：UTC 的 ISO-8601 字符串，如 "2025-01-02T03:04:05.678Z"。

删除目录条目时通过外键 ON DELETE CASCADE 级联删除全部子孙条目。
"""

from typing import Optional

from sqlalchemy import BigInteger, CheckConstraint, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from organize_folder.packages.scanner.core.constants import (
    ENTRY_TABLE_NAME,
    NAME_MAX_LENGTH,
    PATH_MAX_LENGTH,
)
from organize_folder.packages.scanner.core.enums import EntryTypeEnum
from organize_folder.packages.scanner.models.base import Base


class Entry(Base):
    __tablename__ = ENTRY_TABLE_NAME

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(NAME_MAX_LENGTH), nullable=False)
    path: Mapped[str] = mapped_column(String(PATH_MAX_LENGTH), nullable=False, unique=True, index=True)
    parent_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey(f"{ENTRY_TABLE_NAME}.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    type: Mapped[str] = mapped_column(String(16), nullable=False, index=True)
    size: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)
    created_at: Mapped[str] = mapped_column(String(32), nullable=False)
    modified_at: Mapped[str] = mapped_column(String(32), nullable=False)

    __table_args__ = (
        CheckConstraint("type IN ('file', 'directory')", name="type_allowed"),
        CheckConstraint(
            "(type = 'file' AND size IS NOT NULL) OR (type = 'directory' AND size IS NULL)",
            name="size_matches_type",
        ),
    )

    @property
    def is_dir(self) -> bool:
        return self.type == EntryTypeEnum.DIRECTORY.value

    def __repr__(self) -> str:  # pragma: no cover - 调试辅助
        return f"<Entry id={self.id} type={self.type} path={self.path!r}>"
