############################################################
#
# agbridge - Multi-format Chat Request Translator
#
# __init__.py: Request translation package exports
#
# Luke Sheneman
# Research Computing and Data Services (RCDS)
# Institute for Interdisciplinary Data Sciences (IIDS)
# University of Idaho
# sheneman@uidaho.edu
#
############################################################

"""Request translation layer for agbridge.

Translates chat requests in any mix of:
- OpenAI chat-completions format (tool_calls arrays, tool role messages)
- Anthropic/Claude content blocks (tool_use, tool_result, input_schema tools)

into the single Antigravity backend request format.
"""

from agbridge.app.core.translators.antigravity_out import (
    AntigravityOutTranslator,
    translate_request,
)
from agbridge.app.core.translators.call_registry import CallRegistry
from agbridge.app.core.translators.chat_in import ChatInTranslator
from agbridge.app.core.translators.conversation import ConversationRewriter
from agbridge.app.core.translators.tool_declarations import ToolDeclarationTranslator

__all__ = [
    "AntigravityOutTranslator",
    "CallRegistry",
    "ChatInTranslator",
    "ConversationRewriter",
    "ToolDeclarationTranslator",
    "translate_request",
]
