"""사람에게 질문하는 MCP 도구"""

import logging

from hitlslack.bridge.engine import CorrelationEngine
from hitlslack.bridge.errors import BridgeError

logger = logging.getLogger(__name__)

RESET_MESSAGE = "Thread reset. Next question will start a new conversation."


async def ask_human(engine: CorrelationEngine, question: str) -> dict:
    """질문을 보내고 답변을 기다림

    Returns:
        dict: 성공 시 {"text": 답변}, 실패 시 {"error": 사유}
    """
    logger.info(f"ask_human 호출: {question[:100]}")

    try:
        answer = await engine.ask(question)
    except BridgeError as e:
        logger.error(f"ask_human 실패: {e}")
        return {"error": f"Failed to get response: {e}"}
    except Exception as e:
        logger.exception(f"ask_human 처리 중 예기치 못한 오류: {e}")
        return {"error": f"Failed to get response: {e}"}

    return {"text": answer}


def reset_thread(engine: CorrelationEngine) -> dict:
    """대화 스레드 리셋. 다음 질문은 새 스레드에서 시작"""
    engine.reset_conversation()
    return {"text": RESET_MESSAGE}
