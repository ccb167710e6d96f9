"""扫描进度事件通道：扫描线程发布有序事件，展示层按需订阅。

- 每个事件携带单调递增的序号，订阅者可据此判断顺序与丢失；
- 每个订阅者独享一个队列，发布时复制分发，互不影响；
- 通道保留最近一次事件，便于轮询式客户端读取当前进度。
"""

from __future__ import annotations

import json
import queue
import threading
from dataclasses import asdict, dataclass
from typing import Any, Callable, Iterator, Optional

from organize_folder.packages.scanner.core.constants import (
    PROGRESS_STREAM_HEARTBEAT_SECONDS,
    PROGRESS_SUBSCRIBER_QUEUE_SIZE,
)
from organize_folder.packages.scanner.core.enums import ScanEventKindEnum


@dataclass(frozen=True)
class ScanProgressEvent:
    sequence: int
    kind: ScanEventKindEnum
    folder_count: int
    file_count: int
    root_path: Optional[str] = None
    message: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["kind"] = self.kind.value
        return payload


class ScanProgressChannel:
    def __init__(self, *, maxsize: int = PROGRESS_SUBSCRIBER_QUEUE_SIZE) -> None:
        self._lock = threading.Lock()
        self._subscribers: list[queue.Queue] = []
        self._sequence = 0
        self._latest: Optional[ScanProgressEvent] = None
        self._maxsize = maxsize

    def publish(
        self,
        kind: ScanEventKindEnum,
        *,
        folder_count: int = 0,
        file_count: int = 0,
        root_path: Optional[str] = None,
        message: Optional[str] = None,
    ) -> ScanProgressEvent:
        with self._lock:
            self._sequence += 1
            event = ScanProgressEvent(
                sequence=self._sequence,
                kind=kind,
                folder_count=folder_count,
                file_count=file_count,
                root_path=root_path,
                message=message,
            )
            self._latest = event
            for subscriber in self._subscribers:
                self._offer(subscriber, event)
        return event

    def _offer(self, subscriber: queue.Queue, event: ScanProgressEvent) -> None:
        # 慢订阅者丢弃最旧事件，扫描线程永不阻塞
        while True:
            try:
                subscriber.put_nowait(event)
                return
            except queue.Full:
                try:
                    subscriber.get_nowait()
                except queue.Empty:
                    pass

    def progress_sink(self, root_path: str) -> Callable[[int, int], None]:
        """返回可直接传给扫描器的 ``on_progress`` 回调。"""

        def _sink(folder_count: int, file_count: int) -> None:
            self.publish(
                ScanEventKindEnum.PROGRESS,
                folder_count=folder_count,
                file_count=file_count,
                root_path=root_path,
            )

        return _sink

    def subscribe(self) -> queue.Queue:
        subscriber: queue.Queue = queue.Queue(maxsize=self._maxsize)
        with self._lock:
            self._subscribers.append(subscriber)
        return subscriber

    def unsubscribe(self, subscriber: queue.Queue) -> None:
        with self._lock:
            try:
                self._subscribers.remove(subscriber)
            except ValueError:
                pass

    @property
    def latest(self) -> Optional[ScanProgressEvent]:
        return self._latest

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)


progress_channel = ScanProgressChannel()


def format_sse(event: ScanProgressEvent) -> str:
    """将事件编码为一条 Server-Sent Events 消息。"""
    data = json.dumps(event.to_dict(), ensure_ascii=False)
    return f"id: {event.sequence}\nevent: {event.kind.value}\ndata: {data}\n\n"


def iter_sse(
    channel: ScanProgressChannel,
    subscriber: queue.Queue,
    *,
    heartbeat_seconds: float = PROGRESS_STREAM_HEARTBEAT_SECONDS,
) -> Iterator[str]:
    """持续输出订阅队列中的事件，遇到终止事件后结束并退订。"""
    try:
        while True:
            try:
                event = subscriber.get(timeout=heartbeat_seconds)
            except queue.Empty:
                yield ": keep-alive\n\n"
                continue
            yield format_sse(event)
            if event.kind.is_terminal:
                return
    finally:
        channel.unsubscribe(subscriber)
