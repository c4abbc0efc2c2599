"""질문-답변 상관 엔진

에이전트의 질문을 슬랙 채널에 게시하고, 지정 응답자의 스레드 답글 하나와
짝지어 돌려줍니다.

## 흐름
ask() → 게시 → PendingTable 등록 + 타임아웃 예약 → (디스패치 루프) 답글 수신 → 확정 → 정리

## 스레드
- 현재 대화 스레드가 없으면 질문이 새 최상위 메시지가 되고, 그 ts가 대화 스레드가 됨
- 현재 대화 스레드가 있으면 그 스레드에 답글로 게시하며, 상관 키도 그 스레드 ts
- reset_conversation() 이후 첫 질문은 다시 새 스레드를 엶

## 동시성
하나의 이벤트 루프 위에서 MCP 도구 호출, 디스패치 루프, 타임아웃 콜백이 모두 실행됩니다.
새 스레드를 여는 게시는 _open_lock으로 직렬화하고, 이미 열린 스레드에 대한 질문은
게시 전에 테이블 슬롯을 먼저 예약해서 같은 스레드의 두 번째 질문을 ConflictError로 거절합니다.
"""

import asyncio
import contextlib
import logging
from typing import Optional

from hitlslack.bridge.conversation import ConversationState
from hitlslack.bridge.errors import (
    NotConnectedError,
    PublishError,
    ResponseTimeoutError,
)
from hitlslack.bridge.pending import PendingRequest, PendingTable
from hitlslack.transport.base import InboundMessage, Transport

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_MS = 300_000


class CorrelationEngine:
    """질문 하나를 답글 하나와 짝짓는 엔진

    ConversationState와 PendingTable은 엔진 인스턴스가 독점 소유합니다.
    인스턴스마다 상태가 분리되므로 에이전트 세션별로 엔진을 따로 둘 수 있습니다.
    """

    def __init__(
        self,
        transport: Transport,
        channel_id: str,
        responder_id: str,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        conversation: Optional[ConversationState] = None,
        pending: Optional[PendingTable] = None,
    ):
        if timeout_ms <= 0:
            raise ValueError(f"timeout_ms must be positive: {timeout_ms}")

        self._transport = transport
        self.channel_id = channel_id
        self.responder_id = responder_id
        self.timeout_ms = timeout_ms
        self.conversation = conversation if conversation is not None else ConversationState()
        self.pending = pending if pending is not None else PendingTable()

        self._inbox: asyncio.Queue[InboundMessage] = asyncio.Queue()
        self._open_lock = asyncio.Lock()
        self._dispatch_task: Optional[asyncio.Task] = None

    @property
    def active_thread_id(self) -> Optional[str]:
        return self.conversation.active_thread_id

    @property
    def pending_count(self) -> int:
        return len(self.pending)

    # -------------------------------------------------------------------------
    # 수명 주기
    # -------------------------------------------------------------------------

    def start(self) -> None:
        """트랜스포트를 구독하고 디스패치 루프를 시작 (실행 중인 이벤트 루프 필요)"""
        if self._dispatch_task is not None and not self._dispatch_task.done():
            return
        self._transport.subscribe(self.deliver)
        self._dispatch_task = asyncio.get_running_loop().create_task(
            self._dispatch_loop(), name="hitlslack-dispatch"
        )
        logger.debug("디스패치 루프 시작")

    async def close(self) -> None:
        """디스패치 루프를 멈추고 대기 중인 질문을 모두 포기

        대기 중이던 ask 호출자는 NotConnectedError를 받습니다.
        """
        task, self._dispatch_task = self._dispatch_task, None
        if task is not None:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task

        abandoned = self.pending.clear()
        for request in abandoned:
            request.settle_error(
                NotConnectedError("Server is shutting down; question abandoned")
            )
        if abandoned:
            logger.warning(f"종료로 대기 중인 질문 {len(abandoned)}건 포기")

        self.conversation.reset()

    # -------------------------------------------------------------------------
    # 질문
    # -------------------------------------------------------------------------

    async def ask(self, question: str) -> str:
        """질문을 게시하고 응답자의 답글 텍스트를 반환

        Raises:
            NotConnectedError: 트랜스포트가 연결되어 있지 않은 경우
            PublishError: 질문 게시에 실패한 경우
            ConflictError: 같은 스레드에 이미 대기 중인 질문이 있는 경우
            ResponseTimeoutError: timeout_ms 안에 답글이 오지 않은 경우
        """
        if not self._transport.is_connected:
            raise NotConnectedError("Not connected to Slack")

        logger.info(f"질문 전송: {question[:100]}")

        request = await self._post_question(question)
        self._arm_deadline(request)

        logger.debug(
            f"질문 게시 완료: message_ts={request.message_id}, thread_ts={request.thread_id}"
        )

        try:
            return await request.outcome
        finally:
            # 호출자가 취소된 경우에도 항목과 타이머를 남기지 않음
            request.cancel_deadline()
            self.pending.discard(request)

    def reset_conversation(self) -> None:
        """현재 대화 스레드를 비움. 대기 중인 질문은 원래 스레드로 계속 상관됨"""
        self.conversation.reset()

    async def _post_question(self, question: str) -> PendingRequest:
        text = f"<@{self.responder_id}> {question}"

        thread_id = self.conversation.active_thread_id
        if thread_id is None:
            async with self._open_lock:
                # 락 대기 중에 다른 질문이 스레드를 열었을 수 있음
                thread_id = self.conversation.active_thread_id
                if thread_id is None:
                    return await self._open_thread(question, text)

        return await self._reply_in_thread(question, text, thread_id)

    async def _open_thread(self, question: str, text: str) -> PendingRequest:
        """새 최상위 메시지로 게시하고 그 ts를 대화 스레드로 지정"""
        message_id = await self._publish(text)
        self.conversation.activate(message_id)

        request = PendingRequest(question=question, thread_id=message_id)
        request.message_id = message_id
        self.pending.add(request)
        return request

    async def _reply_in_thread(
        self, question: str, text: str, thread_id: str
    ) -> PendingRequest:
        """기존 대화 스레드에 답글로 게시"""
        request = PendingRequest(question=question, thread_id=thread_id)
        self.pending.add(request)

        try:
            request.message_id = await self._publish(text, thread_id)
        except BaseException:
            self.pending.discard(request)
            raise
        return request

    async def _publish(self, text: str, thread_id: Optional[str] = None) -> str:
        message_id = await self._transport.publish(self.channel_id, text, thread_id)
        if not message_id:
            raise PublishError("Failed to post message to Slack: no message id")
        return message_id

    # -------------------------------------------------------------------------
    # 타임아웃
    # -------------------------------------------------------------------------

    def _arm_deadline(self, request: PendingRequest) -> None:
        loop = asyncio.get_running_loop()
        request.deadline = loop.call_later(
            self.timeout_ms / 1000, self._expire, request
        )

    def _expire(self, request: PendingRequest) -> None:
        """타임아웃 콜백. 이미 확정된 요청이면 아무 일도 하지 않음"""
        request.deadline = None
        self.pending.discard(request)
        if request.settle_error(ResponseTimeoutError(self.timeout_ms)):
            logger.warning(
                f"응답 타임아웃: thread_ts={request.thread_id}, "
                f"timeout={self.timeout_ms}ms, question={request.question[:100]}"
            )

    # -------------------------------------------------------------------------
    # 수신 이벤트
    # -------------------------------------------------------------------------

    def deliver(self, message: InboundMessage) -> None:
        """트랜스포트 구독 콜백. 수신 순서대로 큐에 적재"""
        self._inbox.put_nowait(message)

    async def _dispatch_loop(self) -> None:
        while True:
            message = await self._inbox.get()
            try:
                self.handle_event(message)
            except Exception:
                logger.exception(f"수신 메시지 처리 실패: ts={message.ts}")
            finally:
                self._inbox.task_done()

    def handle_event(self, message: InboundMessage) -> bool:
        """수신 메시지 하나를 대기 중인 질문과 대조. 질문을 확정했으면 True

        먼저 도착한 답글이 이깁니다. 이후 같은 스레드의 답글은 테이블에
        항목이 없으므로 버려집니다.
        """
        if message.sender_id != self.responder_id:
            return False

        if message.channel_id != self.channel_id:
            return False

        # 스레드 답글만 처리
        if not message.thread_id:
            logger.debug(f"스레드 밖 메시지 무시: ts={message.ts}")
            return False

        request = self.pending.get(message.thread_id)
        if request is None or not request.is_posted:
            logger.debug(f"대기 중인 질문 없음, 답글 무시: thread_ts={message.thread_id}")
            return False

        answer = message.text or ""
        self.pending.discard(request)
        if not request.settle_answer(answer):
            return False

        logger.info(
            f"응답 수신 ({request.elapsed():.1f}s): "
            f"question={request.question[:100]}, answer={answer[:100]}"
        )
        return True
