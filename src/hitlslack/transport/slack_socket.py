"""슬랙 Socket Mode 트랜스포트

- 발신: Web API chat.postMessage
- 수신: Socket Mode message 이벤트 → 구독 핸들러로 전달
- 연결 상태: 소켓이 닫히면 is_connected=False, 재연결 후 첫 메시지에서 다시 True
"""

import logging
from typing import Optional

import aiohttp
from slack_bolt.adapter.socket_mode.async_handler import AsyncSocketModeHandler
from slack_bolt.async_app import AsyncApp
from slack_sdk.errors import SlackApiError

from hitlslack.bridge.errors import AuthError, PublishError
from hitlslack.transport.base import InboundMessage, MessageHandler

logger = logging.getLogger(__name__)

# 작성자 정보가 없는 메시지 변경 알림. 답글로 취급하지 않음
IGNORED_SUBTYPES = {"message_changed", "message_deleted"}


class SlackTransport:
    """지정 채널 하나만 바라보는 슬랙 트랜스포트"""

    def __init__(
        self,
        bot_token: str,
        app_token: str,
        channel_id: str,
        app: Optional[AsyncApp] = None,
    ):
        self.channel_id = channel_id
        self._app_token = app_token
        self._app = app if app is not None else AsyncApp(token=bot_token, logger=logger)
        self._handler: Optional[AsyncSocketModeHandler] = None
        self._subscriber: Optional[MessageHandler] = None
        self._connected = False

        # 봇 사용자 ID (connect 시 auth.test()로 설정). 자기 메시지 무시에 사용
        self.bot_user_id: Optional[str] = None

        @self._app.event("message")
        async def _on_message(event):
            self.handle_event(event)

        @self._app.error
        async def _on_error(error, body):
            logger.error(f"슬랙 이벤트 처리 오류: {error}, body={body}")

    @property
    def is_connected(self) -> bool:
        return self._connected

    def subscribe(self, handler: MessageHandler) -> None:
        self._subscriber = handler

    def handle_event(self, event: dict) -> None:
        """슬랙 message 이벤트를 InboundMessage로 변환해 구독자에게 전달

        file_share, thread_broadcast 등 작성자가 있는 subtype은 일반 답글과 같이 전달합니다.
        """
        if event.get("channel") != self.channel_id:
            return

        if event.get("subtype") in IGNORED_SUBTYPES:
            return

        if self.bot_user_id and event.get("user") == self.bot_user_id:
            return

        if self._subscriber is None:
            logger.debug(f"구독자 없음, 메시지 무시: ts={event.get('ts')}")
            return

        self._subscriber(InboundMessage.from_slack_event(event))

    async def connect(self) -> None:
        """봇 신원을 확인하고 Socket Mode 연결을 엽니다.

        Raises:
            AuthError: auth.test가 실패한 경우
        """
        if self._handler is not None:
            return

        try:
            auth_result = await self._app.client.auth_test()
        except SlackApiError as e:
            raise AuthError(f"Slack authentication failed: {e.response.get('error', e)}") from e

        if not auth_result.get("ok"):
            raise AuthError("Slack authentication failed")

        self.bot_user_id = auth_result.get("user_id")
        logger.info(
            f"슬랙 인증 성공: team={auth_result.get('team')}, user={auth_result.get('user')}"
        )

        handler = AsyncSocketModeHandler(self._app, self._app_token)
        client = handler.client
        client.on_message_listeners.append(self._on_socket_message)
        client.on_error_listeners.append(self._on_socket_error)
        client.on_close_listeners.append(self._on_socket_close)

        await handler.connect_async()
        self._handler = handler
        self._connected = True
        logger.info("Socket Mode 연결 완료")

    async def disconnect(self) -> None:
        """Socket Mode 연결 종료 (best effort)"""
        handler, self._handler = self._handler, None
        self._connected = False
        if handler is None:
            return

        try:
            await handler.close_async()
            logger.info("Socket Mode 연결 종료")
        except Exception as e:
            logger.warning(f"Socket Mode 종료 중 오류 (무시): {e}")

    # -------------------------------------------------------------------------
    # 소켓 상태 리스너 (인자는 aiohttp WSMessage)
    # -------------------------------------------------------------------------

    async def _on_socket_message(self, message) -> None:
        # disconnect() 이후에는 handler가 None
        if self._handler is not None and not self._connected:
            self._connected = True
            logger.info("Socket Mode 재연결됨")

    async def _on_socket_error(self, message) -> None:
        logger.error(f"Socket Mode 오류: {message.data}")

    async def _on_socket_close(self, message) -> None:
        if self._handler is None or not self._connected:
            return
        self._connected = False
        logger.warning(
            f"Socket Mode 연결 끊김, 재연결 전까지 질문 거절: code={message.data}, reason={message.extra}"
        )

    async def publish(
        self, channel: str, text: str, thread_id: Optional[str] = None
    ) -> str:
        """메시지를 게시하고 ts 반환

        Raises:
            PublishError: API 오류, 네트워크 오류, 응답에 ts가 없는 경우
        """
        msg_kwargs: dict = {"channel": channel, "text": text}
        if thread_id:
            msg_kwargs["thread_ts"] = thread_id

        try:
            response = await self._app.client.chat_postMessage(**msg_kwargs)
        except SlackApiError as e:
            raise PublishError(
                f"Failed to post message to Slack: {e.response.get('error', e)}"
            ) from e
        except aiohttp.ClientError as e:
            raise PublishError(f"Failed to post message to Slack: {e}") from e

        ts = response.get("ts")
        if not ts:
            raise PublishError("Failed to post message to Slack: no ts in response")
        return ts
