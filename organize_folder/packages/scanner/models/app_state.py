"""应用状态模型：记录最近一次成功扫描的目录，至多一行。"""

from typing import Optional

from sqlalchemy import Boolean, Integer, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import expression

from organize_folder.packages.scanner.core.constants import APP_STATE_TABLE_NAME, PATH_MAX_LENGTH
from organize_folder.packages.scanner.models.base import Base, TimestampMixin


class AppState(TimestampMixin, Base):
    __tablename__ = APP_STATE_TABLE_NAME

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    selected_folder_path: Mapped[str] = mapped_column(String(PATH_MAX_LENGTH), nullable=False)
    is_scanned: Mapped[bool] = mapped_column(
        Boolean,
        server_default=expression.false(),
        nullable=False,
    )
    # UTC ISO-8601，与条目的时间字段格式一致
    last_scan_time: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
