"""
Provider‑neutral dataclasses for client‑side tool use.

They are intentionally minimal: everything provider‑specific lives in adapters.
"""
from __future__ import annotations

from dataclasses import dataclass

__all__ = ["ToolCallRequest", "ToolCallResult", "FUNCTION_CALL_TYPE"]

FUNCTION_CALL_TYPE = "function"


@dataclass(frozen=True, slots=True)
class ToolCallRequest:
    """A model‑agnostic request emitted by the LLM to call a local tool."""
    id: str
    name: str
    arguments: str                  # raw JSON text, decoded by the tool itself
    type: str = FUNCTION_CALL_TYPE


@dataclass(frozen=True, slots=True)
class ToolCallResult:
    """Payload to send back to the LLM after the tool finished running."""
    id: str                     # must match the request id
    content: str
