"""hitlslack 실행 진입점

설정 검증 → 로깅 → 슬랙 연결 → 엔진 시작 → MCP 서버 실행 → 종료 시 정리
"""

import asyncio
import logging
import sys
from typing import Optional

from hitlslack.bridge.engine import CorrelationEngine
from hitlslack.bridge.errors import AuthError
from hitlslack.config import Config, ConfigurationError
from hitlslack.logging_config import setup_logging
from hitlslack.mcp.server import create_server
from hitlslack.transport.slack_socket import SlackTransport

logger = logging.getLogger(__name__)


async def serve(
    transport: str = "stdio",
    host: str = "127.0.0.1",
    port: int = 3104,
) -> None:
    """슬랙에 연결하고 MCP 서버를 실행. 서버가 끝나면 엔진과 연결을 정리"""
    slack = SlackTransport(
        bot_token=Config.SLACK_BOT_TOKEN,
        app_token=Config.SLACK_APP_TOKEN,
        channel_id=Config.SLACK_CHANNEL_ID,
    )
    engine = CorrelationEngine(
        slack,
        channel_id=Config.SLACK_CHANNEL_ID,
        responder_id=Config.SLACK_USER_ID,
        timeout_ms=Config.RESPONSE_TIMEOUT_MS,
    )

    # 연결(인증 포함)이 성공해야 질문을 받음
    await slack.connect()
    engine.start()

    server = create_server(engine)
    logger.info(
        f"MCP 서버 시작: transport={transport}, channel={Config.SLACK_CHANNEL_ID}, "
        f"timeout={Config.RESPONSE_TIMEOUT_MS}ms"
    )

    try:
        if transport == "sse":
            await server.run_async(transport="sse", host=host, port=port)
        else:
            await server.run_async(transport="stdio")
    finally:
        logger.info("서버 종료 중...")
        await engine.close()
        await slack.disconnect()


def main(argv: Optional[list[str]] = None) -> int:
    """명령행 진입점. 종료 코드 반환"""
    transport = "stdio"
    host = "127.0.0.1"
    port = 3104

    for arg in (sys.argv[1:] if argv is None else argv):
        if arg.startswith("--transport="):
            transport = arg.split("=", 1)[1]
        elif arg.startswith("--port="):
            port = int(arg.split("=", 1)[1])
        elif arg.startswith("--host="):
            host = arg.split("=", 1)[1]

    setup_logging()

    try:
        Config.validate()
    except ConfigurationError as e:
        logger.error(str(e))
        return 1

    try:
        asyncio.run(serve(transport, host, port))
    except AuthError as e:
        logger.error(f"슬랙 연결 실패: {e}")
        return 1
    except KeyboardInterrupt:
        logger.info("사용자 중단")

    return 0
