"""트랜스포트 인터페이스

엔진은 이 Protocol만 알고, 슬랙 연결 방식(Socket Mode 등)은 구현체가 담당합니다.
"""

from dataclasses import dataclass
from typing import Callable, Optional, Protocol


@dataclass(frozen=True)
class InboundMessage:
    """트랜스포트가 엔진에 전달하는 수신 메시지"""

    sender_id: str
    channel_id: str
    text: str = ""
    thread_id: Optional[str] = None
    ts: Optional[str] = None

    @classmethod
    def from_slack_event(cls, event: dict) -> "InboundMessage":
        """슬랙 message 이벤트 페이로드에서 생성"""
        return cls(
            sender_id=event.get("user", ""),
            channel_id=event.get("channel", ""),
            text=event.get("text") or "",
            thread_id=event.get("thread_ts"),
            ts=event.get("ts"),
        )


MessageHandler = Callable[[InboundMessage], None]


class Transport(Protocol):
    """채팅 백엔드와의 양방향 채널"""

    @property
    def is_connected(self) -> bool: ...

    async def connect(self) -> None: ...

    async def disconnect(self) -> None: ...

    async def publish(
        self, channel: str, text: str, thread_id: Optional[str] = None
    ) -> str:
        """메시지를 게시하고 메시지 ts를 반환"""
        ...

    def subscribe(self, handler: MessageHandler) -> None:
        """수신 메시지 핸들러 등록 (기존 핸들러를 대체)"""
        ...
