"""설정 관리

환경변수(.env 포함)에서 읽어 클래스 변수로 보관합니다 (모듈 로드 시 평가).
경로 설정만 get_*() 메서드로 런타임에 계산합니다.
"""

import os
from typing import List

from dotenv import load_dotenv

from hitlslack.bridge.engine import DEFAULT_TIMEOUT_MS

load_dotenv()


class ConfigurationError(Exception):
    """설정 오류 예외

    필수 환경변수 누락, 잘못된 값 등 설정 관련 오류를 한 번에 모아서 보고합니다.
    """

    def __init__(self, problems: List[str]):
        self.problems = problems
        message = f"설정 검증 실패: {', '.join(problems)}"
        super().__init__(message)


def _parse_positive_int(value: str | None, default: int) -> int | None:
    """문자열을 양의 정수로 변환. 변환할 수 없으면 None"""
    if value is None or value.strip() == "":
        return default
    try:
        parsed = int(value)
    except ValueError:
        return None
    return parsed if parsed > 0 else None


class Config:
    """애플리케이션 설정"""

    # ========================================
    # Slack 설정
    # ========================================
    SLACK_BOT_TOKEN = os.getenv("SLACK_BOT_TOKEN")
    SLACK_APP_TOKEN = os.getenv("SLACK_APP_TOKEN")

    # 질문을 게시할 채널과 답변할 사람 (각각 하나)
    SLACK_CHANNEL_ID = os.getenv("SLACK_CHANNEL_ID")
    SLACK_USER_ID = os.getenv("SLACK_USER_ID")

    # ========================================
    # 응답 대기 설정
    # ========================================
    _RESPONSE_TIMEOUT_MS_RAW = os.getenv("RESPONSE_TIMEOUT_MS")
    RESPONSE_TIMEOUT_MS = _parse_positive_int(_RESPONSE_TIMEOUT_MS_RAW, DEFAULT_TIMEOUT_MS)

    # ========================================
    # 로깅 설정
    # ========================================
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    @staticmethod
    def get_log_path() -> str:
        """로그 디렉토리. 비어 있으면 파일 로그를 남기지 않음"""
        return os.getenv("LOG_PATH", "")

    # ========================================
    # 검증
    # ========================================
    _REQUIRED_VARS = [
        "SLACK_BOT_TOKEN",
        "SLACK_APP_TOKEN",
        "SLACK_CHANNEL_ID",
        "SLACK_USER_ID",
    ]

    @classmethod
    def validate(cls) -> None:
        """필수 환경변수와 값 형식 검증

        문제를 하나씩 멈추지 않고 모두 모아서 ConfigurationError로 보고합니다.

        Raises:
            ConfigurationError: 누락되었거나 잘못된 설정이 있을 때
        """
        problems = []
        for var in cls._REQUIRED_VARS:
            if not getattr(cls, var, None):
                problems.append(f"{var}: 필수 값이 없습니다")

        if cls.RESPONSE_TIMEOUT_MS is None:
            problems.append(
                f"RESPONSE_TIMEOUT_MS: 양의 정수여야 합니다 ({cls._RESPONSE_TIMEOUT_MS_RAW!r})"
            )

        if problems:
            raise ConfigurationError(problems)
