"""枚举定义：约束条目类型与扫描进度事件的可选值。"""

from enum import Enum


class EntryTypeEnum(str, Enum):
    FILE = "file"
    DIRECTORY = "directory"


class ScanEventKindEnum(str, Enum):
    """扫描进度事件类型；COMPLETED 与 FAILED 为终止事件。"""

    STARTED = "started"
    PROGRESS = "progress"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (ScanEventKindEnum.COMPLETED, ScanEventKindEnum.FAILED)
