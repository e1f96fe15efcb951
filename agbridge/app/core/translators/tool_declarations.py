############################################################
#
# agbridge - Multi-format Chat Request Translator
#
# tool_declarations.py: Tool definition to function declaration normalizer
#
# Luke Sheneman
# Research Computing and Data Services (RCDS)
# Institute for Interdisciplinary Data Sciences (IIDS)
# University of Idaho
# sheneman@uidaho.edu
#
############################################################

"""Normalize mixed-format tool definitions into function declarations."""

from typing import Any, List, Optional, Sequence

from agbridge.app.core.canonical_schemas import (
    FlatToolDefinition,
    FunctionDeclaration,
    ToolDefinition,
    WrappedToolDefinition,
)
from agbridge.app.logging_config import get_logger

logger = get_logger(__name__)


class ToolDeclarationTranslator:
    """Translate OpenAI and Anthropic tool definitions to backend declarations."""

    @staticmethod
    def translate_tools(tools: Optional[Sequence[Any]]) -> List[FunctionDeclaration]:
        """Translate a tool list, preserving order.

        Supported shapes:
            OpenAI:    {"type": "function", "function": {"name", "description", "parameters"}}
            Anthropic: {"name", "description", "input_schema"}

        The schema is renamed to ``parametersJsonSchema`` and otherwise
        copied unchanged. Definitions matching neither shape, or lacking
        a schema object, are dropped without failing the request.

        Args:
            tools: Raw tool definitions (may be None or empty)

        Returns:
            Function declarations, possibly empty
        """
        declarations: List[FunctionDeclaration] = []
        for index, raw in enumerate(tools or []):
            definition = ToolDeclarationTranslator.parse_definition(raw)
            if definition is None:
                logger.warning(
                    "tool_definition_dropped",
                    index=index,
                    keys=sorted(raw) if isinstance(raw, dict) else None,
                )
                continue
            declarations.append(definition.to_declaration())
        return declarations

    @staticmethod
    def parse_definition(raw: Any) -> Optional[ToolDefinition]:
        """Detect the shape of a tool definition.

        Returns:
            The matching variant, or None if the definition is unusable
        """
        if not isinstance(raw, dict):
            return None

        function = raw.get("function")
        if isinstance(function, dict):
            if raw.get("type", "function") != "function":
                return None
            name = function.get("name")
            parameters = function.get("parameters")
            if not _is_name(name) or not isinstance(parameters, dict):
                return None
            return WrappedToolDefinition(
                name=name,
                description=_description(function),
                parameters=parameters,
            )

        if "input_schema" in raw or "name" in raw:
            name = raw.get("name")
            input_schema = raw.get("input_schema")
            if not _is_name(name) or not isinstance(input_schema, dict):
                return None
            return FlatToolDefinition(
                name=name,
                description=_description(raw),
                input_schema=input_schema,
            )

        return None


def _is_name(value: Any) -> bool:
    return isinstance(value, str) and bool(value)


def _description(source: dict) -> Optional[str]:
    description = source.get("description")
    return description if isinstance(description, str) else None
