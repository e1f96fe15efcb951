############################################################
#
# agbridge - Multi-format Chat Request Translator
#
# conversation.py: Conversation history to backend turns rewriter
#
# Luke Sheneman
# Research Computing and Data Services (RCDS)
# Institute for Interdisciplinary Data Sciences (IIDS)
# University of Idaho
# sheneman@uidaho.edu
#
############################################################

"""Rewrite an incoming conversation into backend turns.

Each message becomes zero or one turn:

- ``system`` messages are dropped (they go to the system instruction)
- ``user`` messages become ``user`` turns; ``tool_result`` blocks become
  function responses in place
- ``assistant`` messages become ``model`` turns; ``tool_use`` blocks and
  ``tool_calls`` entries become function calls
- ``tool`` messages become a ``user`` turn holding one function response

A message that yields no parts yields no turn.
"""

import copy
import json
from typing import Any, Dict, List, Optional, Sequence, Union

from agbridge.app.core.canonical_schemas import (
    FUNCTION_THOUGHT_SIGNATURE,
    FunctionCall,
    FunctionCallPart,
    FunctionResponse,
    FunctionResponsePart,
    ImageBlock,
    IncomingMessage,
    IncomingToolCall,
    InlineData,
    InlineDataPart,
    MessageRole,
    Part,
    TextBlock,
    TextPart,
    ToolResultBlock,
    ToolUseBlock,
    Turn,
    TurnRole,
)
from agbridge.app.core.errors import CorrelationMissError, TranslationError
from agbridge.app.core.translators.call_registry import CallRegistry
from agbridge.app.logging_config import get_logger
from agbridge.app.settings import CorrelationMissPolicy

logger = get_logger(__name__)


class ConversationRewriter:
    """Second pass over the conversation, consulting a filled CallRegistry."""

    def __init__(
        self,
        registry: CallRegistry,
        policy: CorrelationMissPolicy = CorrelationMissPolicy.LENIENT,
    ) -> None:
        self.registry = registry
        try:
            self.policy = CorrelationMissPolicy(policy)
        except ValueError as e:
            raise TranslationError(
                f"Unknown correlation miss policy {policy!r}",
                hint="Use 'lenient' or 'strict'",
            ) from e

    def rewrite(self, messages: Sequence[IncomingMessage]) -> List[Turn]:
        """Rewrite all messages, in order.

        Args:
            messages: The same message sequence the registry was built from

        Returns:
            Backend turns, none of them empty

        Raises:
            CorrelationMissError: Under the strict policy, when a tool result
                references an unregistered call id
        """
        turns: List[Turn] = []
        for index, msg in enumerate(messages):
            turn = self.rewrite_message(msg, index)
            if turn is not None:
                turns.append(turn)
        return turns

    def rewrite_message(self, msg: IncomingMessage, index: int = 0) -> Optional[Turn]:
        """Rewrite one message, or return None when it has nothing to send."""
        if msg.role == MessageRole.SYSTEM:
            return None

        if msg.role == MessageRole.ASSISTANT:
            role = TurnRole.MODEL
            parts = self._assistant_parts(msg)
        elif msg.role == MessageRole.TOOL:
            role = TurnRole.USER
            parts = self._tool_parts(msg, index)
        else:
            role = TurnRole.USER
            parts = self._user_parts(msg, index)

        if not parts:
            return None
        return Turn(role=role, parts=parts)

    def _user_parts(self, msg: IncomingMessage, index: int) -> List[Part]:
        if isinstance(msg.content, str):
            return [TextPart(text=msg.content)] if msg.content else []
        if not isinstance(msg.content, list):
            return []

        parts: List[Part] = []
        for block in msg.content:
            if isinstance(block, TextBlock):
                parts.append(TextPart(text=block.text))
            elif isinstance(block, ToolResultBlock):
                parts.append(
                    self._function_response(
                        block.tool_use_id,
                        {"result": block.get_text_content()},
                        index,
                    )
                )
            elif isinstance(block, ImageBlock):
                parts.append(
                    InlineDataPart(
                        inlineData=InlineData(mimeType=block.media_type, data=block.data)
                    )
                )
            else:
                logger.debug("content_block_ignored", role="user", type=block.type, index=index)
        return parts

    def _assistant_parts(self, msg: IncomingMessage) -> List[Part]:
        parts: List[Part] = []

        if isinstance(msg.content, str):
            if msg.content:
                parts.append(TextPart(text=msg.content))
        elif isinstance(msg.content, list):
            for block in msg.content:
                if isinstance(block, TextBlock):
                    parts.append(TextPart(text=block.text))
                elif isinstance(block, ToolUseBlock):
                    parts.append(
                        _function_call(block.id, block.name, copy.deepcopy(block.input))
                    )
                else:
                    logger.debug("content_block_ignored", role="assistant", type=block.type)

        for call in msg.tool_calls or []:
            parts.append(_function_call(call.id, call.name, _decode_arguments(call)))

        return parts

    def _tool_parts(self, msg: IncomingMessage, index: int) -> List[Part]:
        content = msg.content
        if isinstance(content, dict):
            response = copy.deepcopy(content)
        elif isinstance(content, str):
            response = {"result": content}
        else:
            response = {"result": msg.get_text_content()}
        return [self._function_response(msg.tool_call_id or "", response, index)]

    def _function_response(
        self, call_id: str, response: Dict[str, Any], index: int
    ) -> FunctionResponsePart:
        return FunctionResponsePart(
            functionResponse=FunctionResponse(
                id=call_id,
                name=self._resolve_name(call_id, index),
                response=response,
            )
        )

    def _resolve_name(self, call_id: str, index: int) -> str:
        name = self.registry.resolve(call_id)
        if name is not None:
            return name
        if self.policy == CorrelationMissPolicy.STRICT:
            raise CorrelationMissError(call_id, index)
        logger.warning("tool_result_correlation_miss", call_id=call_id, message_index=index)
        return ""


def _function_call(call_id: str, name: str, args: Dict[str, Any]) -> FunctionCallPart:
    return FunctionCallPart(
        functionCall=FunctionCall(id=call_id, name=name, args=args),
        thoughtSignature=FUNCTION_THOUGHT_SIGNATURE,
    )


def _decode_arguments(call: IncomingToolCall) -> Dict[str, Any]:
    """Decode OpenAI call arguments; anything but a JSON object becomes {}."""
    arguments: Union[str, Dict[str, Any], None] = call.arguments
    if isinstance(arguments, dict):
        return copy.deepcopy(arguments)
    if not arguments:
        return {}
    try:
        decoded = json.loads(arguments)
    except json.JSONDecodeError:
        logger.warning("tool_call_arguments_invalid", call_id=call.id, reason="not JSON")
        return {}
    if not isinstance(decoded, dict):
        logger.warning("tool_call_arguments_invalid", call_id=call.id, reason="not an object")
        return {}
    return decoded
