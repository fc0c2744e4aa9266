from .chat import (
    ASSISTANT_ROLE,
    SYSTEM_ROLE,
    TOOL_ROLE,
    USER_ROLE,
    ChatTweaks,
    Choice,
    Completion,
    Message,
    Role,
)
from .embedding import Embedding
from .tool import FUNCTION_CALL_TYPE, ToolCallRequest, ToolCallResult

__all__ = [
    "ASSISTANT_ROLE",
    "SYSTEM_ROLE",
    "TOOL_ROLE",
    "USER_ROLE",
    "ChatTweaks",
    "Choice",
    "Completion",
    "Embedding",
    "Message",
    "Role",
    "FUNCTION_CALL_TYPE",
    "ToolCallRequest",
    "ToolCallResult",
]
