"""현재 대화 스레드 상태"""

import logging
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass
class ConversationState:
    """엔진 인스턴스 하나가 소유하는 '현재 대화' 포인터

    active_thread_id가 None이면 다음 질문은 새 스레드를 엽니다.
    스스로 만료되지 않으며 reset()으로만 비워집니다.
    """

    active_thread_id: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return self.active_thread_id is not None

    def activate(self, thread_id: str) -> None:
        """새로 연 스레드를 현재 대화로 지정"""
        self.active_thread_id = thread_id
        logger.debug(f"대화 스레드 시작: thread_ts={thread_id}")

    def reset(self) -> None:
        """현재 대화 포인터를 비움"""
        if self.active_thread_id is not None:
            logger.info(f"대화 스레드 리셋: thread_ts={self.active_thread_id}")
        self.active_thread_id = None
