############################################################
#
# agbridge - Multi-format Chat Request Translator
#
# antigravity_out.py: Chat request to Antigravity backend request translator
#
# Luke Sheneman
# Research Computing and Data Services (RCDS)
# Institute for Interdisciplinary Data Sciences (IIDS)
# University of Idaho
# sheneman@uidaho.edu
#
############################################################

"""Chat request to Antigravity backend request translator."""

from typing import Any, Dict, List, Optional, Union

from agbridge.app.core.canonical_schemas import (
    BackendRequest,
    CanonicalRequest,
    FunctionDeclaration,
    FunctionDeclarationGroup,
    GenerationConfig,
    GoogleSearchTool,
    IncomingRequest,
    MessageRole,
    SystemInstruction,
    TextPart,
    ToolEntry,
)
from agbridge.app.core.translators.call_registry import CallRegistry
from agbridge.app.core.translators.chat_in import ChatInTranslator
from agbridge.app.core.translators.conversation import ConversationRewriter
from agbridge.app.core.translators.tool_declarations import ToolDeclarationTranslator
from agbridge.app.logging_config import (
    bind_request_context,
    clear_request_context,
    get_logger,
)
from agbridge.app.settings import CorrelationMissPolicy, Settings, get_settings

logger = get_logger(__name__)

# Client sampling field -> backend generationConfig field
GENERATION_FIELD_MAP = {
    "temperature": "temperature",
    "top_p": "topP",
    "top_k": "topK",
    "max_tokens": "maxOutputTokens",
    "max_completion_tokens": "maxOutputTokens",
    "stop": "stopSequences",
    "stop_sequences": "stopSequences",
    "n": "candidateCount",
    "seed": "seed",
}


class AntigravityOutTranslator:
    """Translate chat requests to the Antigravity request envelope."""

    @staticmethod
    def translate_chat_request(
        data: Union[bytes, str, Dict[str, Any], IncomingRequest],
        model: str,
        web_search: bool = False,
        *,
        policy: Optional[Union[CorrelationMissPolicy, str]] = None,
        settings: Optional[Settings] = None,
    ) -> CanonicalRequest:
        """Translate a chat request to the backend format.

        Args:
            data: Raw request body, decoded dict, or parsed IncomingRequest
            model: Target backend model identifier
            web_search: Enable backend-side search grounding
            policy: Correlation miss policy; defaults to the configured one
            settings: Settings override (defaults to get_settings())

        Returns:
            CanonicalRequest

        Raises:
            MalformedRequestError: If the body is not a JSON chat request
            CorrelationMissError: Under the strict policy only
            TranslationError: For an unknown policy value
        """
        settings = settings or get_settings()
        if policy is None:
            policy = settings.correlation_miss_policy

        tokens = bind_request_context(target_model=model, web_search=web_search)
        try:
            return AntigravityOutTranslator._translate(data, model, web_search, policy, settings)
        finally:
            clear_request_context(tokens)

    @staticmethod
    def _translate(
        data: Union[bytes, str, Dict[str, Any], IncomingRequest],
        model: str,
        web_search: bool,
        policy: Union[CorrelationMissPolicy, str],
        settings: Settings,
    ) -> CanonicalRequest:
        if isinstance(data, IncomingRequest):
            incoming = data
        else:
            incoming = ChatInTranslator.parse_request(data)

        declarations = ToolDeclarationTranslator.translate_tools(incoming.tools)

        # Correlation must see the whole conversation before any rewrite
        registry = CallRegistry.from_messages(incoming.messages)
        contents = ConversationRewriter(registry, policy=policy).rewrite(incoming.messages)

        system_instruction = None
        if settings.emit_system_instruction:
            system_instruction = AntigravityOutTranslator._build_system_instruction(incoming)

        generation_config = None
        if settings.emit_generation_config:
            generation_config = AntigravityOutTranslator._build_generation_config(
                incoming.sampling
            )

        body = BackendRequest(
            contents=contents,
            systemInstruction=system_instruction,
            tools=AntigravityOutTranslator._build_tools(declarations, web_search),
            generationConfig=generation_config,
        )

        logger.info(
            "request_translated",
            turns=len(contents),
            declarations=len(declarations),
            registered_calls=len(registry),
        )

        return CanonicalRequest(model=model or incoming.model, request=body)

    @staticmethod
    def _build_tools(
        declarations: List[FunctionDeclaration], web_search: bool
    ) -> Optional[List[ToolEntry]]:
        """Build ``request.tools``; None when there is nothing to declare."""
        tools: List[ToolEntry] = []
        if declarations:
            tools.append(FunctionDeclarationGroup(functionDeclarations=declarations))
        if web_search:
            tools.append(GoogleSearchTool())
        return tools or None

    @staticmethod
    def _build_system_instruction(incoming: IncomingRequest) -> Optional[SystemInstruction]:
        """Collect the top-level system prompt and system messages, in order."""
        texts = list(incoming.system)
        for msg in incoming.messages:
            if msg.role == MessageRole.SYSTEM:
                text = msg.get_text_content()
                if text:
                    texts.append(text)

        if not texts:
            return None
        return SystemInstruction(parts=[TextPart(text=text) for text in texts])

    @staticmethod
    def _build_generation_config(sampling: Dict[str, Any]) -> Optional[GenerationConfig]:
        """Rename sampling fields for the backend; values are not touched."""
        fields: Dict[str, Any] = {}
        for key, value in sampling.items():
            target = GENERATION_FIELD_MAP.get(key)
            if target is None:
                continue
            if target == "stopSequences" and isinstance(value, str):
                value = [value]
            fields.setdefault(target, value)

        if not fields:
            return None
        return GenerationConfig(**fields)


def translate_request(
    raw: bytes,
    model: str,
    web_search: bool = False,
    *,
    policy: Optional[Union[CorrelationMissPolicy, str]] = None,
    settings: Optional[Settings] = None,
) -> bytes:
    """Translate a raw chat request body to a raw backend request body.

    Args:
        raw: Client request body (JSON)
        model: Target backend model identifier
        web_search: Enable backend-side search grounding
        policy: Correlation miss policy; defaults to the configured one
        settings: Settings override; passing one skips reading the
            environment and ``.env``

    Returns:
        Backend request body (JSON)
    """
    canonical = AntigravityOutTranslator.translate_chat_request(
        raw, model, web_search, policy=policy, settings=settings
    )
    return canonical.to_bytes()
