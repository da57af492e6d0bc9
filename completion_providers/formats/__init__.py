"""Stateless converters between canonical messages and backend wire formats.

Modules in this package perform no I/O and import no SDK or HTTP client.
"""

from .anthropic_format import convert_to_anthropic_messages
from .bedrock_converse_format import convert_to_bedrock_converse_messages
from .cache_markers import apply_openai_cache_markers
from .gemini_format import convert_message_to_gemini, unescape_gemini_content
from .mistral_format import convert_to_mistral_messages
from .openai_format import convert_to_openai_messages
from .r1_format import convert_to_r1_format
from .simple_format import convert_to_simple_content, convert_to_simple_messages

__all__ = [
    "convert_to_anthropic_messages",
    "convert_to_bedrock_converse_messages",
    "apply_openai_cache_markers",
    "convert_message_to_gemini",
    "unescape_gemini_content",
    "convert_to_mistral_messages",
    "convert_to_openai_messages",
    "convert_to_r1_format",
    "convert_to_simple_content",
    "convert_to_simple_messages",
]
