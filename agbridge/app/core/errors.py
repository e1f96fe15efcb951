############################################################
#
# agbridge - Multi-format Chat Request Translator
#
# errors.py: Exception hierarchy for request translation
#
# Luke Sheneman
# Research Computing and Data Services (RCDS)
# Institute for Interdisciplinary Data Sciences (IIDS)
# University of Idaho
# sheneman@uidaho.edu
#
############################################################

"""Exception hierarchy for request translation."""

from typing import Optional


class TranslationError(Exception):
    """Base exception for all translation failures."""

    def __init__(self, message: str, *, hint: Optional[str] = None) -> None:
        super().__init__(message)
        self.hint = hint


class MalformedRequestError(TranslationError):
    """The request document is not valid JSON or not shaped like a chat request."""


class CorrelationMissError(TranslationError):
    """A tool result references a call id that no earlier message declared.

    Only raised under the strict correlation policy.
    """

    def __init__(self, call_id: str, message_index: int) -> None:
        super().__init__(
            f"Tool result in message {message_index} references unknown call id {call_id!r}",
            hint="Set correlation_miss_policy to 'lenient' to forward it with an empty name",
        )
        self.call_id = call_id
        self.message_index = message_index
