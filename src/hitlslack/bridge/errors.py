"""브리지 예외 정의

ask 경로에서 발생하는 모든 실패는 BridgeError 하위 타입입니다.
MCP 도구 계층은 이 타입들을 에러 결과로 변환해 에이전트에게 돌려줍니다.
"""


class BridgeError(Exception):
    """브리지 예외 기반 클래스"""


class AuthError(BridgeError):
    """슬랙이 봇 신원 확인(auth.test)을 거부한 경우"""


class PublishError(BridgeError):
    """질문 메시지 게시에 실패했거나 게시 결과에 ts가 없는 경우"""


class NotConnectedError(BridgeError):
    """트랜스포트 연결이 없어 질문을 처리할 수 없는 경우"""


class ConflictError(BridgeError):
    """같은 스레드에 이미 답변 대기 중인 질문이 있는 경우"""

    def __init__(self, thread_id: str):
        self.thread_id = thread_id
        super().__init__(
            f"A question is already waiting for a reply in thread {thread_id}"
        )


class ResponseTimeoutError(BridgeError, TimeoutError):
    """설정된 시간 안에 응답자의 답글이 오지 않은 경우"""

    def __init__(self, timeout_ms: int):
        self.timeout_ms = timeout_ms
        super().__init__(f"Response timeout after {timeout_ms}ms")
