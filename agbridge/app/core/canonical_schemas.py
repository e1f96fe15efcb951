############################################################
#
# agbridge - Multi-format Chat Request Translator
#
# canonical_schemas.py: Incoming chat schemas and Antigravity wire schemas
#
# Luke Sheneman
# Research Computing and Data Services (RCDS)
# Institute for Interdisciplinary Data Sciences (IIDS)
# University of Idaho
# sheneman@uidaho.edu
#
############################################################

"""Schemas for both sides of the translator.

The incoming side models an OpenAI chat-completions request that may carry
Anthropic-style content blocks and tool definitions mixed in (as sent by
Cursor and other IDE integrations). The outgoing side models the
Antigravity ``{model, request: {contents, tools, ...}}`` envelope.
"""

import copy
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, model_serializer

# Attached to every functionCall part; the backend skips signature
# validation for calls carrying this value.
FUNCTION_THOUGHT_SIGNATURE = "skip_thought_signature_validator"


class MessageRole(str, Enum):
    """Message roles in an incoming conversation."""
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


class ContentType(str, Enum):
    """Types of content block in an incoming message."""
    TEXT = "text"
    TOOL_USE = "tool_use"
    TOOL_RESULT = "tool_result"
    IMAGE = "image"


class TurnRole(str, Enum):
    """Roles accepted by the backend for conversation turns."""
    USER = "user"
    MODEL = "model"


# Incoming content blocks
class TextBlock(BaseModel):
    """Text content block."""
    type: Literal["text"] = "text"
    text: str = ""


class ToolUseBlock(BaseModel):
    """Inline tool invocation (Anthropic style)."""
    type: Literal["tool_use"] = "tool_use"
    id: str
    name: str
    input: Dict[str, Any] = Field(default_factory=dict)


class ToolResultBlock(BaseModel):
    """Inline tool result (Anthropic style); carries the call id but no name."""
    type: Literal["tool_result"] = "tool_result"
    tool_use_id: str
    content: Optional[Union[str, List["ContentBlock"]]] = None

    def get_text_content(self) -> str:
        """Flatten the result to a single string.

        Block content is reduced to the concatenated text of its text
        blocks; anything else yields an empty string.
        """
        if isinstance(self.content, str):
            return self.content
        if isinstance(self.content, list):
            return "".join(
                block.text for block in self.content if isinstance(block, TextBlock)
            )
        return ""


class ImageBlock(BaseModel):
    """Base64 image, from either an OpenAI data URL or an Anthropic source."""
    type: Literal["image"] = "image"
    data: str
    media_type: str = "image/png"


ContentBlock = Annotated[
    Union[TextBlock, ToolUseBlock, ToolResultBlock, ImageBlock],
    Field(discriminator="type"),
]

ToolResultBlock.model_rebuild()


class IncomingToolCall(BaseModel):
    """Entry of an OpenAI-style ``tool_calls`` array."""
    id: str
    name: str
    # JSON-encoded string per the OpenAI wire format; some clients send an object
    arguments: Union[str, Dict[str, Any], None] = None


class IncomingMessage(BaseModel):
    """One message of the incoming conversation."""
    role: MessageRole
    content: Union[str, List[ContentBlock], Dict[str, Any], None] = None
    tool_calls: Optional[List[IncomingToolCall]] = None
    tool_call_id: Optional[str] = None

    def get_text_content(self) -> str:
        """Extract text content from message."""
        if isinstance(self.content, str):
            return self.content
        if isinstance(self.content, list):
            return "".join(
                block.text for block in self.content if isinstance(block, TextBlock)
            )
        return ""

    def iter_tool_uses(self) -> List[ToolUseBlock]:
        """Return the inline tool_use blocks of this message, in order."""
        if not isinstance(self.content, list):
            return []
        return [block for block in self.content if isinstance(block, ToolUseBlock)]


class IncomingRequest(BaseModel):
    """Parsed client request, read-only once built."""
    model: str = ""
    messages: List[IncomingMessage] = Field(default_factory=list)
    # Raw definitions; shape detection is the tool normalizer's job
    tools: List[Any] = Field(default_factory=list)
    system: List[str] = Field(default_factory=list)
    sampling: Dict[str, Any] = Field(default_factory=dict)


# Tool definition variants
class WrappedToolDefinition(BaseModel):
    """OpenAI ``{type: function, function: {name, description, parameters}}``."""
    name: str
    description: Optional[str] = None
    parameters: Dict[str, Any]

    def to_declaration(self) -> "FunctionDeclaration":
        return FunctionDeclaration(
            name=self.name,
            description=self.description,
            parametersJsonSchema=copy.deepcopy(self.parameters),
        )


class FlatToolDefinition(BaseModel):
    """Anthropic ``{name, description, input_schema}``."""
    name: str
    description: Optional[str] = None
    input_schema: Dict[str, Any]

    def to_declaration(self) -> "FunctionDeclaration":
        return FunctionDeclaration(
            name=self.name,
            description=self.description,
            parametersJsonSchema=copy.deepcopy(self.input_schema),
        )


ToolDefinition = Union[WrappedToolDefinition, FlatToolDefinition]


# Outgoing wire schemas
class WireModel(BaseModel):
    """Base for backend wire models.

    Optional fields left as None are omitted from the dump. Only this
    model's own fields are filtered; None values inside free-form dicts
    (schemas, args) are kept.
    """

    @model_serializer(mode="wrap")
    def _omit_unset_optionals(self, handler):
        data = handler(self)
        fields = type(self).model_fields
        return {k: v for k, v in data.items() if not (v is None and k in fields)}


class TextPart(WireModel):
    """Text part."""
    text: str


class FunctionCall(WireModel):
    """Function invocation issued by the model."""
    id: str
    name: str
    args: Dict[str, Any] = Field(default_factory=dict)


class FunctionCallPart(WireModel):
    """Function invocation part."""
    functionCall: FunctionCall
    thoughtSignature: str = FUNCTION_THOUGHT_SIGNATURE


class FunctionResponse(WireModel):
    """Result of a function invocation, returned by the user side."""
    id: str
    name: str
    response: Dict[str, Any]


class FunctionResponsePart(WireModel):
    """Function result part."""
    functionResponse: FunctionResponse


class InlineData(WireModel):
    """Base64 payload with its MIME type."""
    mimeType: str
    data: str


class InlineDataPart(WireModel):
    """Inline binary part (images)."""
    inlineData: InlineData


Part = Union[TextPart, FunctionCallPart, FunctionResponsePart, InlineDataPart]


class Turn(WireModel):
    """One conversation turn; never emitted without parts."""
    role: TurnRole
    parts: List[Part] = Field(min_length=1)


class SystemInstruction(WireModel):
    """System prompt, sent outside the conversation contents."""
    role: Literal["user"] = "user"
    parts: List[TextPart] = Field(min_length=1)


class FunctionDeclaration(WireModel):
    """Schema-bearing description of a callable tool."""
    name: str
    description: Optional[str] = None
    parametersJsonSchema: Dict[str, Any]


class FunctionDeclarationGroup(WireModel):
    """The ``tools`` entry holding all function declarations."""
    functionDeclarations: List[FunctionDeclaration] = Field(min_length=1)


class GoogleSearchTool(WireModel):
    """Backend-side web search grounding."""
    googleSearch: Dict[str, Any] = Field(default_factory=dict)


ToolEntry = Union[FunctionDeclarationGroup, GoogleSearchTool]


class GenerationConfig(WireModel):
    """Sampling parameters; values are forwarded exactly as the client sent them."""
    temperature: Optional[Any] = None
    topP: Optional[Any] = None
    topK: Optional[Any] = None
    maxOutputTokens: Optional[Any] = None
    stopSequences: Optional[Any] = None
    candidateCount: Optional[Any] = None
    seed: Optional[Any] = None


class BackendRequest(WireModel):
    """The ``request`` object of the Antigravity envelope."""
    contents: List[Turn] = Field(default_factory=list)
    systemInstruction: Optional[SystemInstruction] = None
    tools: Optional[List[ToolEntry]] = None
    generationConfig: Optional[GenerationConfig] = None


class CanonicalRequest(WireModel):
    """Complete backend request."""
    model: str
    request: BackendRequest

    def to_bytes(self) -> bytes:
        """Serialize to the JSON body sent to the backend."""
        return self.model_dump_json().encode("utf-8")
