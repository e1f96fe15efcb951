############################################################
#
# agbridge - Multi-format Chat Request Translator
#
# chat_in.py: Mixed OpenAI/Anthropic chat request parser
#
# Luke Sheneman
# Research Computing and Data Services (RCDS)
# Institute for Interdisciplinary Data Sciences (IIDS)
# University of Idaho
# sheneman@uidaho.edu
#
############################################################

"""Parse a raw chat request into the incoming schema.

Clients mix formats freely: an OpenAI chat-completions body may carry
Anthropic content blocks (``tool_use``, ``tool_result``, ``image``) next
to OpenAI ``tool_calls`` arrays and ``tool`` role messages. Only
document-level problems are fatal; a malformed message or block is
skipped and logged so the rest of the conversation still translates.
"""

import json
from typing import Any, Dict, List, Optional, Union

from agbridge.app.core.canonical_schemas import (
    ContentBlock,
    ContentType,
    ImageBlock,
    IncomingMessage,
    IncomingRequest,
    IncomingToolCall,
    MessageRole,
    TextBlock,
    ToolResultBlock,
    ToolUseBlock,
)
from agbridge.app.core.errors import MalformedRequestError
from agbridge.app.logging_config import get_logger

logger = get_logger(__name__)

# Sampling fields forwarded to the backend generation config
SAMPLING_FIELDS = (
    "temperature",
    "top_p",
    "top_k",
    "max_tokens",
    "max_completion_tokens",
    "stop",
    "stop_sequences",
    "n",
    "seed",
)


class ChatInTranslator:
    """Translate raw chat request bodies to the incoming schema."""

    @staticmethod
    def parse_request(raw: Union[bytes, str, Dict[str, Any]]) -> IncomingRequest:
        """Parse a chat request.

        Args:
            raw: Request body as bytes/str, or an already-decoded dict

        Returns:
            IncomingRequest

        Raises:
            MalformedRequestError: If the body is not a JSON object or its
                ``messages`` field is not a list
        """
        data = ChatInTranslator._load_document(raw)

        messages_raw = data.get("messages")
        if messages_raw is None:
            messages_raw = []
        if not isinstance(messages_raw, list):
            raise MalformedRequestError(
                f"'messages' must be a list, got {type(messages_raw).__name__}"
            )

        messages: List[IncomingMessage] = []
        for index, msg in enumerate(messages_raw):
            translated = ChatInTranslator._translate_message(msg, index)
            if translated is not None:
                messages.append(translated)

        tools = data.get("tools") or []
        if not isinstance(tools, list):
            logger.warning("tools_field_ignored", found=type(tools).__name__)
            tools = []

        model = data.get("model")

        return IncomingRequest(
            model=model if isinstance(model, str) else "",
            messages=messages,
            tools=tools,
            system=ChatInTranslator._translate_system(data.get("system")),
            sampling={
                key: data[key] for key in SAMPLING_FIELDS if data.get(key) is not None
            },
        )

    @staticmethod
    def _load_document(raw: Union[bytes, str, Dict[str, Any]]) -> Dict[str, Any]:
        """Decode the body and check that it is a JSON object."""
        if isinstance(raw, dict):
            return raw

        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError, TypeError) as e:
            raise MalformedRequestError(f"Request body is not valid JSON: {e}") from e

        if not isinstance(data, dict):
            raise MalformedRequestError(
                f"Request body must be a JSON object, got {type(data).__name__}"
            )
        return data

    @staticmethod
    def _translate_system(system: Any) -> List[str]:
        """Translate an Anthropic top-level system prompt to a list of texts."""
        if isinstance(system, str):
            return [system] if system else []
        if isinstance(system, list):
            texts = []
            for block in system:
                if isinstance(block, str):
                    texts.append(block)
                elif isinstance(block, dict) and block.get("type") == "text":
                    texts.append(block.get("text"))
            return [text for text in texts if isinstance(text, str) and text]
        return []

    @staticmethod
    def _translate_message(msg: Any, index: int) -> Optional[IncomingMessage]:
        """Translate a single message, or return None if it is unusable."""
        if not isinstance(msg, dict):
            logger.warning("message_skipped", index=index, reason="not an object")
            return None

        try:
            role = MessageRole(msg.get("role"))
        except ValueError:
            logger.warning("message_skipped", index=index, reason="unknown role", role=msg.get("role"))
            return None

        content = msg.get("content")
        if isinstance(content, list):
            content = ChatInTranslator._translate_content_blocks(content)
        elif isinstance(content, dict):
            # Structured tool output stays an object; anything else is one block
            if role != MessageRole.TOOL:
                block = ChatInTranslator._translate_content_block(content)
                content = [block] if block is not None else None
        elif content is not None and not isinstance(content, str):
            logger.debug("content_ignored", index=index, found=type(content).__name__)
            content = None

        tool_calls = None
        if role == MessageRole.ASSISTANT and isinstance(msg.get("tool_calls"), list):
            tool_calls = ChatInTranslator._translate_tool_calls(msg["tool_calls"])

        tool_call_id = msg.get("tool_call_id")
        if tool_call_id is not None:
            tool_call_id = str(tool_call_id)

        return IncomingMessage(
            role=role,
            content=content,
            tool_calls=tool_calls,
            tool_call_id=tool_call_id,
        )

    @staticmethod
    def _translate_tool_calls(tool_calls: List[Any]) -> List[IncomingToolCall]:
        """Translate an OpenAI ``tool_calls`` array."""
        calls = []
        for tc in tool_calls:
            if not isinstance(tc, dict):
                logger.debug("tool_call_skipped", reason="not an object")
                continue
            function = tc.get("function")
            if not isinstance(function, dict):
                function = {}
            name = function.get("name", tc.get("name"))
            arguments = function.get("arguments", tc.get("arguments"))
            calls.append(
                IncomingToolCall(
                    id=str(tc.get("id") or ""),
                    name=name if isinstance(name, str) else "",
                    arguments=arguments if isinstance(arguments, (str, dict)) else None,
                )
            )
        return calls

    @staticmethod
    def _translate_content_blocks(items: List[Any]) -> List[ContentBlock]:
        """Translate a content array, dropping blocks that cannot be represented."""
        blocks: List[ContentBlock] = []
        for item in items:
            block = ChatInTranslator._translate_content_block(item)
            if block is not None:
                blocks.append(block)
        return blocks

    @staticmethod
    def _translate_content_block(item: Any) -> Optional[ContentBlock]:
        """Translate a content block to the incoming schema."""
        if isinstance(item, str):
            return TextBlock(text=item)
        if not isinstance(item, dict):
            return None

        item_type = item.get("type")

        if item_type == ContentType.TEXT.value:
            text = item.get("text")
            return TextBlock(text=text if isinstance(text, str) else "")

        elif item_type == ContentType.TOOL_USE.value:
            return ToolUseBlock(
                id=str(item.get("id") or ""),
                name=item.get("name") if isinstance(item.get("name"), str) else "",
                input=ChatInTranslator._translate_tool_input(item.get("input")),
            )

        elif item_type == ContentType.TOOL_RESULT.value:
            content = item.get("content")
            if isinstance(content, list):
                content = ChatInTranslator._translate_content_blocks(content)
            elif not isinstance(content, str):
                content = None
            return ToolResultBlock(
                tool_use_id=str(item.get("tool_use_id") or ""),
                content=content,
            )

        elif item_type == "image_url":
            image_url = item.get("image_url")
            url = image_url.get("url", "") if isinstance(image_url, dict) else image_url
            return ChatInTranslator._translate_data_url(url)

        elif item_type == ContentType.IMAGE.value:
            return ChatInTranslator._translate_image_source(item.get("source"))

        logger.debug("content_block_ignored", type=item_type)
        return None

    @staticmethod
    def _translate_tool_input(value: Any) -> Dict[str, Any]:
        """Tool inputs are objects; accept a JSON-encoded object as well."""
        if isinstance(value, dict):
            return value
        if isinstance(value, str) and value:
            try:
                decoded = json.loads(value)
            except json.JSONDecodeError:
                return {}
            if isinstance(decoded, dict):
                return decoded
        return {}

    @staticmethod
    def _translate_image_source(source: Any) -> Optional[ImageBlock]:
        """Translate an Anthropic image ``source``; only inline base64 is usable."""
        if not isinstance(source, dict) or source.get("type") != "base64":
            logger.debug("content_block_ignored", type="image", reason="non-inline image source")
            return None

        data = source.get("data")
        media_type = source.get("media_type")
        if media_type is None:
            media_type = "image/png"
        if not isinstance(data, str) or not data or not isinstance(media_type, str):
            logger.debug("content_block_ignored", type="image", reason="bad base64 source")
            return None
        return ImageBlock(data=data, media_type=media_type or "image/png")

    @staticmethod
    def _translate_data_url(url: Any) -> Optional[ImageBlock]:
        """Parse ``data:image/png;base64,<data>`` into an image block."""
        if not isinstance(url, str) or not url.startswith("data:"):
            logger.debug("content_block_ignored", type="image_url", reason="not a data URL")
            return None
        try:
            header, data = url.split(",", 1)
            media_type = header.split(":")[1].split(";")[0]
        except (ValueError, IndexError):
            logger.debug("content_block_ignored", type="image_url", reason="bad data URL")
            return None
        return ImageBlock(data=data, media_type=media_type or "image/png")
