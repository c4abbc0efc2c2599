"""질문-답변 상관 엔진"""

from hitlslack.bridge.conversation import ConversationState
from hitlslack.bridge.engine import DEFAULT_TIMEOUT_MS, CorrelationEngine
from hitlslack.bridge.errors import (
    AuthError,
    BridgeError,
    ConflictError,
    NotConnectedError,
    PublishError,
    ResponseTimeoutError,
)
from hitlslack.bridge.pending import PendingRequest, PendingTable

__all__ = [
    "AuthError",
    "BridgeError",
    "ConflictError",
    "ConversationState",
    "CorrelationEngine",
    "DEFAULT_TIMEOUT_MS",
    "NotConnectedError",
    "PendingRequest",
    "PendingTable",
    "PublishError",
    "ResponseTimeoutError",
]
