"""로깅 설정 모듈"""

import logging
import sys
from datetime import datetime
from pathlib import Path

from hitlslack.config import Config


def setup_logging() -> logging.Logger:
    """로깅 설정 및 로거 반환

    stdout은 MCP stdio 프로토콜이 사용하므로 콘솔 로그는 stderr로 보냅니다.
    """
    level = getattr(logging, Config.LOG_LEVEL.upper(), logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    log_path = Config.get_log_path()
    if log_path:
        log_dir = Path(log_path)
        log_dir.mkdir(parents=True, exist_ok=True)
        log_file = log_dir / f"hitlslack_{datetime.now().strftime('%Y%m%d')}.log"
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        handlers=handlers,
    )

    # 슬랙/HTTP 라이브러리 로그는 DEBUG일 때만 출력
    if level > logging.DEBUG:
        for name in ("slack_bolt", "slack_sdk", "aiohttp"):
            logging.getLogger(name).setLevel(logging.WARNING)

    return logging.getLogger("hitlslack")
