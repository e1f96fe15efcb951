############################################################
#
# agbridge - Multi-format Chat Request Translator
#
# call_registry.py: Tool call id to tool name correlation
#
# Luke Sheneman
# Research Computing and Data Services (RCDS)
# Institute for Interdisciplinary Data Sciences (IIDS)
# University of Idaho
# sheneman@uidaho.edu
#
############################################################

"""Tool call correlation.

Tool results in both client formats reference their call only by id,
while the backend wants the tool name on every function response. The
registry is built in a separate pass over the whole conversation before
any message is rewritten.
"""

from typing import Dict, Optional, Sequence

from agbridge.app.core.canonical_schemas import IncomingMessage, MessageRole
from agbridge.app.logging_config import get_logger

logger = get_logger(__name__)


class CallRegistry:
    """Mapping from tool call id to the name of the tool that was called."""

    def __init__(self) -> None:
        self._names: Dict[str, str] = {}

    @classmethod
    def from_messages(cls, messages: Sequence[IncomingMessage]) -> "CallRegistry":
        """Register every tool call made by an assistant message.

        Both the ``tool_calls`` array and inline ``tool_use`` blocks are
        visited; a message may use both. Messages are not modified.
        """
        registry = cls()
        for msg in messages:
            if msg.role != MessageRole.ASSISTANT:
                continue
            for call in msg.tool_calls or []:
                registry.register(call.id, call.name)
            for block in msg.iter_tool_uses():
                registry.register(block.id, block.name)
        return registry

    def register(self, call_id: str, name: str) -> None:
        """Record a call. A reused id is overwritten by the later call."""
        if not call_id:
            return
        previous = self._names.get(call_id)
        if previous is not None and previous != name:
            logger.debug(
                "tool_call_id_reregistered",
                call_id=call_id,
                previous=previous,
                name=name,
            )
        self._names[call_id] = name

    def resolve(self, call_id: Optional[str]) -> Optional[str]:
        """Return the tool name for a call id, or None on a miss."""
        if not call_id:
            return None
        return self._names.get(call_id)

    def __contains__(self, call_id: object) -> bool:
        return call_id in self._names

    def __len__(self) -> int:
        return len(self._names)
