"""답변 대기 중인 질문 테이블

thread_ts → PendingRequest 매핑을 관리합니다.
스레드 하나에는 대기 중인 질문이 최대 하나만 존재할 수 있습니다.
"""

import asyncio
import time
from dataclasses import dataclass, field
from typing import Iterator, Optional

from hitlslack.bridge.errors import ConflictError


def _new_outcome() -> asyncio.Future:
    return asyncio.get_running_loop().create_future()


@dataclass
class PendingRequest:
    """답변을 기다리는 질문 하나

    outcome은 한 번만 확정됩니다. 타임아웃 콜백과 답글 이벤트가 경합해도
    먼저 settle_*()을 호출한 쪽이 결과를 결정하고, 이후 호출은 무시됩니다.
    이벤트 루프 안에서 생성해야 합니다.
    """

    question: str
    thread_id: str
    message_id: Optional[str] = None
    deadline: Optional[asyncio.TimerHandle] = None
    outcome: asyncio.Future = field(default_factory=_new_outcome)
    created_at: float = field(default_factory=time.monotonic)

    @property
    def is_posted(self) -> bool:
        """질문 메시지가 슬랙에 게시되었는지"""
        return self.message_id is not None

    @property
    def is_settled(self) -> bool:
        return self.outcome.done()

    def elapsed(self) -> float:
        """생성 후 경과 시간 (초)"""
        return time.monotonic() - self.created_at

    def cancel_deadline(self) -> None:
        if self.deadline is not None:
            self.deadline.cancel()
            self.deadline = None

    def settle_answer(self, answer: str) -> bool:
        """답변으로 확정. 이미 확정된 경우 False"""
        if self.outcome.done():
            return False
        self.cancel_deadline()
        self.outcome.set_result(answer)
        return True

    def settle_error(self, error: BaseException) -> bool:
        """실패로 확정. 이미 확정된 경우 False"""
        if self.outcome.done():
            return False
        self.cancel_deadline()
        self.outcome.set_exception(error)
        return True


class PendingTable:
    """thread_ts 기준 대기 질문 테이블"""

    def __init__(self):
        self._requests: dict[str, PendingRequest] = {}

    def __len__(self) -> int:
        return len(self._requests)

    def __contains__(self, thread_id: str) -> bool:
        return thread_id in self._requests

    def __iter__(self) -> Iterator[PendingRequest]:
        return iter(list(self._requests.values()))

    def get(self, thread_id: str) -> Optional[PendingRequest]:
        return self._requests.get(thread_id)

    def add(self, request: PendingRequest) -> None:
        """요청 등록

        Raises:
            ConflictError: 같은 스레드에 대기 중인 요청이 이미 있을 때
        """
        if request.thread_id in self._requests:
            raise ConflictError(request.thread_id)
        self._requests[request.thread_id] = request

    def discard(self, request: PendingRequest) -> bool:
        """테이블에 등록된 것이 바로 이 요청일 때만 제거. 제거했으면 True"""
        if self._requests.get(request.thread_id) is request:
            del self._requests[request.thread_id]
            return True
        return False

    def clear(self) -> list[PendingRequest]:
        """모든 요청을 제거하고 제거된 요청 목록 반환"""
        requests = list(self._requests.values())
        self._requests.clear()
        return requests
