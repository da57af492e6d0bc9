"""
Canonical conversation and model DTOs shared by converters and adapters.

Messages
--------
A :class:`Message` has a ``role`` (``"user"`` or ``"assistant"``) and either a
plain string or an ordered list of content blocks. The block union mirrors
what coding assistants exchange with a model: text, base64 images, tool
calls issued by the assistant and tool results returned by the user turn.

Models
------
:class:`ModelInfo` carries limits, capability flags and per-million-token
prices; :class:`ModelDescriptor` pairs it with the model id sent on the wire.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Literal, Mapping, Optional, Union

Role = Literal["user", "assistant"]


@dataclass(frozen=True)
class TextBlock:
    text: str
    type: Literal["text"] = field(default="text", init=False)


@dataclass(frozen=True)
class ImageBlock:
    """Inline base64 image."""

    media_type: str
    data: str
    type: Literal["image"] = field(default="image", init=False)

    def data_uri(self) -> str:
        return f"data:{self.media_type};base64,{self.data}"


@dataclass(frozen=True)
class ToolUseBlock:
    """A tool invocation requested by the assistant."""

    id: str
    name: str
    input: Mapping[str, Any] = field(default_factory=dict)
    type: Literal["tool_use"] = field(default="tool_use", init=False)


@dataclass(frozen=True)
class ToolResultBlock:
    """The result of a tool invocation, returned on the following user turn."""

    tool_use_id: str
    content: Union[str, List[Union[TextBlock, ImageBlock]]] = ""
    is_error: bool = False
    type: Literal["tool_result"] = field(default="tool_result", init=False)


ContentBlock = Union[TextBlock, ImageBlock, ToolUseBlock, ToolResultBlock]


@dataclass
class Message:
    """A canonical chat message.

    Attributes:
        role: ``"user"`` or ``"assistant"``.
        content: Plain text or an ordered list of content blocks.
    """

    role: Role
    content: Union[str, List[ContentBlock]]

    def blocks(self) -> List[ContentBlock]:
        """Return the content as a list of blocks (strings become one text block)."""
        if isinstance(self.content, str):
            return [TextBlock(self.content)]
        return list(self.content)


@dataclass(frozen=True)
class ModelInfo:
    """Limits, capabilities and pricing for one backend model.

    Prices are USD per million tokens. ``max_tokens`` of ``-1`` means the
    backend picks the limit.
    """

    context_window: int
    supports_prompt_cache: bool = False
    max_tokens: Optional[int] = None
    supports_images: bool = False
    supports_computer_use: bool = False
    input_price: Optional[float] = None
    output_price: Optional[float] = None
    cache_writes_price: Optional[float] = None
    cache_reads_price: Optional[float] = None
    description: Optional[str] = None
    reasoning_effort: Optional[Literal["low", "medium", "high"]] = None

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serializable dictionary of the info."""
        return asdict(self)


@dataclass(frozen=True)
class ModelDescriptor:
    """A model id paired with its :class:`ModelInfo`."""

    id: str
    info: ModelInfo


__all__ = [
    "Role",
    "TextBlock",
    "ImageBlock",
    "ToolUseBlock",
    "ToolResultBlock",
    "ContentBlock",
    "Message",
    "ModelInfo",
    "ModelDescriptor",
]
