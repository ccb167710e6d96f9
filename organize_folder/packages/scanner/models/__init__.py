"""模型包初始化，便于统一导入 ORM 实体并触发模型注册。"""

from organize_folder.packages.scanner.models.app_state import AppState
from organize_folder.packages.scanner.models.entry import Entry

__all__ = [
    "AppState",
    "Entry",
]
