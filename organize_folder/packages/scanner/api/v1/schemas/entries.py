"""扫描与条目查询配套的请求/响应模型。"""

from typing import Literal, Optional

from pydantic import BaseModel, Field

from organize_folder.packages.scanner.api.v1.schemas.common import ResponseEnvelope


class ScanRequest(BaseModel):
    path: str = Field(..., min_length=1)


class ScanResultData(BaseModel):
    success: bool
    message: str
    folder_count: int = 0
    file_count: int = 0


class EntryData(BaseModel):
    id: int
    name: str
    path: str
    parent_id: Optional[int] = None
    type: Literal["file", "directory"]
    size: Optional[int] = None
    created_at: str
    modified_at: str


class ScanProgressData(BaseModel):
    sequence: int
    kind: Literal["started", "progress", "completed", "failed"]
    folder_count: int
    file_count: int
    root_path: Optional[str] = None
    message: Optional[str] = None


class AppStateData(BaseModel):
    selected_folder_path: str
    is_scanned: bool
    last_scan_time: Optional[str] = None


ScanResponse = ResponseEnvelope[ScanResultData]
ScanProgressResponse = ResponseEnvelope[Optional[ScanProgressData]]
EntryListResponse = ResponseEnvelope[list[EntryData]]
EntryResponse = ResponseEnvelope[Optional[EntryData]]
AppStateResponse = ResponseEnvelope[Optional[AppStateData]]
