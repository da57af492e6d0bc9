"""Static model tables and descriptor resolution.

Each backend with a fixed model list has a table mapping model id to
:class:`ModelInfo`. Gateways (OpenRouter, Glama, Requesty, Unbound) and local
runtimes (Ollama, LM Studio) accept arbitrary ids, so they carry a default
info that callers may replace with a custom one.

:func:`resolve_model` never fails: an unknown or empty id resolves to the
provider default descriptor.
"""
from __future__ import annotations

from typing import Mapping, Optional

from ..config.defaults import (
    ANTHROPIC_DEFAULT_MODEL,
    BEDROCK_DEFAULT_MODEL,
    DEEPSEEK_DEFAULT_MODEL,
    GEMINI_DEFAULT_MODEL,
    MISTRAL_DEFAULT_MODEL,
    OPENAI_NATIVE_DEFAULT_MODEL,
    VERTEX_DEFAULT_MODEL,
)
from .models import ModelDescriptor, ModelInfo

# ---- Default infos for open-ended backends ----

OPENAI_MODEL_INFO_SANE_DEFAULTS = ModelInfo(
    max_tokens=-1,
    context_window=128_000,
    supports_images=True,
    supports_prompt_cache=False,
    input_price=0,
    output_price=0,
)

GLAMA_DEFAULT_MODEL_INFO = ModelInfo(
    max_tokens=8192,
    context_window=200_000,
    supports_images=True,
    supports_prompt_cache=False,
    input_price=0,
    output_price=0,
)

OPENROUTER_DEFAULT_MODEL_INFO = ModelInfo(
    max_tokens=4096,
    context_window=8192,
    supports_images=False,
    supports_prompt_cache=True,
    input_price=0,
    output_price=0,
)

REQUESTY_MODEL_INFO_SANE_DEFAULTS = ModelInfo(
    max_tokens=4096,
    context_window=8192,
    supports_images=False,
    supports_prompt_cache=False,
    input_price=0,
    output_price=0,
)

UNBOUND_DEFAULT_MODEL_INFO = ModelInfo(
    max_tokens=8192,
    context_window=200_000,
    supports_images=True,
    supports_prompt_cache=True,
    input_price=3.0,
    output_price=15.0,
    cache_writes_price=3.75,
    cache_reads_price=0.3,
)

# ---- Fixed tables ----

ANTHROPIC_MODELS: Mapping[str, ModelInfo] = {
    "claude-3-5-sonnet-20241022": ModelInfo(
        max_tokens=8192,
        context_window=200_000,
        supports_images=True,
        supports_computer_use=True,
        supports_prompt_cache=True,
        input_price=3.0,
        output_price=15.0,
        cache_writes_price=3.75,
        cache_reads_price=0.30,
    ),
    "claude-3-5-haiku-20241022": ModelInfo(
        max_tokens=8192,
        context_window=200_000,
        supports_images=False,
        supports_prompt_cache=True,
        input_price=1.0,
        output_price=5.0,
        cache_writes_price=1.25,
        cache_reads_price=0.10,
    ),
    "claude-3-opus-20240229": ModelInfo(
        max_tokens=8192,
        context_window=200_000,
        supports_images=True,
        supports_prompt_cache=True,
        input_price=15.0,
        output_price=75.0,
        cache_writes_price=18.75,
        cache_reads_price=1.50,
    ),
    "claude-3-haiku-20240307": ModelInfo(
        max_tokens=8192,
        context_window=200_000,
        supports_images=True,
        supports_prompt_cache=True,
        input_price=0.25,
        output_price=1.25,
        cache_writes_price=0.30,
        cache_reads_price=0.03,
    ),
}

VERTEX_MODELS: Mapping[str, ModelInfo] = {
    "claude-3-5-sonnet@20240620": ModelInfo(
        max_tokens=8192,
        context_window=200_000,
        supports_images=True,
        supports_prompt_cache=True,
        input_price=3.0,
        output_price=15.0,
        cache_writes_price=3.75,
        cache_reads_price=0.30,
    ),
    "claude-3-opus@20240229": ModelInfo(
        max_tokens=4096,
        context_window=200_000,
        supports_images=True,
        supports_prompt_cache=True,
        input_price=15.0,
        output_price=75.0,
        cache_writes_price=18.75,
        cache_reads_price=1.50,
    ),
    "claude-3-haiku@20240307": ModelInfo(
        max_tokens=4096,
        context_window=200_000,
        supports_images=True,
        supports_prompt_cache=True,
        input_price=0.25,
        output_price=1.25,
        cache_writes_price=0.30,
        cache_reads_price=0.03,
    ),
}

BEDROCK_MODELS: Mapping[str, ModelInfo] = {
    "anthropic.claude-3-sonnet-20240229-v1:0": ModelInfo(
        max_tokens=8192,
        context_window=200_000,
        supports_images=True,
        supports_prompt_cache=True,
        input_price=3.0,
        output_price=15.0,
    ),
}

OPENAI_NATIVE_MODELS: Mapping[str, ModelInfo] = {
    "o3-mini": ModelInfo(
        max_tokens=100_000,
        context_window=200_000,
        input_price=1.1,
        output_price=4.4,
        reasoning_effort="medium",
    ),
    "o3-mini-high": ModelInfo(
        max_tokens=100_000,
        context_window=200_000,
        input_price=1.1,
        output_price=4.4,
        reasoning_effort="high",
    ),
    "o3-mini-low": ModelInfo(
        max_tokens=100_000,
        context_window=200_000,
        input_price=1.1,
        output_price=4.4,
        reasoning_effort="low",
    ),
    "o1": ModelInfo(
        max_tokens=100_000,
        context_window=200_000,
        supports_images=True,
        input_price=15,
        output_price=60,
    ),
    "o1-preview": ModelInfo(
        max_tokens=32_768,
        context_window=128_000,
        supports_images=True,
        input_price=15,
        output_price=60,
    ),
    "o1-mini": ModelInfo(
        max_tokens=65_536,
        context_window=128_000,
        supports_images=True,
        input_price=1.1,
        output_price=4.4,
    ),
    "gpt-4o": ModelInfo(
        max_tokens=4_096,
        context_window=128_000,
        supports_images=True,
        input_price=5,
        output_price=15,
    ),
    "gpt-4o-mini": ModelInfo(
        max_tokens=16_384,
        context_window=128_000,
        supports_images=True,
        input_price=0.15,
        output_price=0.6,
    ),
}

DEEPSEEK_MODELS: Mapping[str, ModelInfo] = {
    "deepseek-chat": ModelInfo(
        max_tokens=8192,
        context_window=64_000,
        input_price=0.014,
        output_price=0.28,
        description="DeepSeek-V3, a fast general chat model.",
    ),
    "deepseek-reasoner": ModelInfo(
        max_tokens=8192,
        context_window=64_000,
        input_price=0.55,
        output_price=2.19,
        description="DeepSeek-R1, a reasoning model for math, code and planning.",
    ),
}

GEMINI_MODELS: Mapping[str, ModelInfo] = {
    "gemini-2.0-flash-001": ModelInfo(
        max_tokens=8192,
        context_window=32_767,
        supports_images=True,
        input_price=0,
        output_price=0,
    ),
    "gemini-2.0-flash-thinking-exp-1219": ModelInfo(
        max_tokens=8192,
        context_window=32_767,
        supports_images=True,
        input_price=0,
        output_price=0,
    ),
}

MISTRAL_MODELS: Mapping[str, ModelInfo] = {
    "codestral-latest": ModelInfo(
        max_tokens=256_000,
        context_window=256_000,
        input_price=0.3,
        output_price=0.9,
    ),
    "mistral-large-latest": ModelInfo(
        max_tokens=131_000,
        context_window=131_000,
        input_price=2.0,
        output_price=6.0,
    ),
    "ministral-8b-latest": ModelInfo(
        max_tokens=131_000,
        context_window=131_000,
        input_price=0.1,
        output_price=0.1,
    ),
    "ministral-3b-latest": ModelInfo(
        max_tokens=131_000,
        context_window=131_000,
        input_price=0.04,
        output_price=0.04,
    ),
    "mistral-small-latest": ModelInfo(
        max_tokens=32_000,
        context_window=32_000,
        input_price=0.2,
        output_price=0.6,
    ),
    "pixtral-large-latest": ModelInfo(
        max_tokens=131_000,
        context_window=131_000,
        supports_images=True,
        input_price=2.0,
        output_price=6.0,
    ),
}

_TABLE_DEFAULTS = (
    (ANTHROPIC_MODELS, ANTHROPIC_DEFAULT_MODEL),
    (VERTEX_MODELS, VERTEX_DEFAULT_MODEL),
    (BEDROCK_MODELS, BEDROCK_DEFAULT_MODEL),
    (OPENAI_NATIVE_MODELS, OPENAI_NATIVE_DEFAULT_MODEL),
    (DEEPSEEK_MODELS, DEEPSEEK_DEFAULT_MODEL),
    (GEMINI_MODELS, GEMINI_DEFAULT_MODEL),
    (MISTRAL_MODELS, MISTRAL_DEFAULT_MODEL),
)

for _table, _default in _TABLE_DEFAULTS:
    if _default not in _table:  # pragma: no cover - guarded at import
        raise RuntimeError(f"default model {_default!r} missing from its table")


def resolve_model(
    table: Mapping[str, ModelInfo],
    model_id: Optional[str],
    default_id: str,
) -> ModelDescriptor:
    """Return the descriptor for ``model_id`` or the table's default.

    Parameters:
        table: Model id to info mapping for one backend.
        model_id: Requested id; ``None``, empty or unknown ids fall back.
        default_id: Provider default id, guaranteed to be present in ``table``.

    Returns:
        ModelDescriptor: Never ``None``.
    """
    if model_id and model_id in table:
        return ModelDescriptor(id=model_id, info=table[model_id])
    return ModelDescriptor(id=default_id, info=table[default_id])


def resolve_open_model(
    model_id: Optional[str],
    custom_info: Optional[ModelInfo],
    default_id: str,
    default_info: ModelInfo,
) -> ModelDescriptor:
    """Resolve a gateway model where any id is accepted with caller-supplied info.

    The id and info are only honoured together; a missing half falls back to
    the gateway default so the descriptor never mixes one model's id with
    another model's limits.
    """
    if model_id and custom_info is not None:
        return ModelDescriptor(id=model_id, info=custom_info)
    return ModelDescriptor(id=default_id, info=default_info)


def resolve_passthrough_model(
    model_id: Optional[str],
    custom_info: Optional[ModelInfo],
    default_id: str,
    default_info: ModelInfo,
) -> ModelDescriptor:
    """Resolve a model whose id is forwarded verbatim (self-hosted or routed).

    The id is honoured on its own; limits and prices come from ``custom_info``
    when supplied and from ``default_info`` otherwise.
    """
    return ModelDescriptor(id=model_id or default_id, info=custom_info or default_info)


__all__ = [
    "ANTHROPIC_MODELS",
    "VERTEX_MODELS",
    "BEDROCK_MODELS",
    "OPENAI_NATIVE_MODELS",
    "DEEPSEEK_MODELS",
    "GEMINI_MODELS",
    "MISTRAL_MODELS",
    "OPENAI_MODEL_INFO_SANE_DEFAULTS",
    "GLAMA_DEFAULT_MODEL_INFO",
    "OPENROUTER_DEFAULT_MODEL_INFO",
    "REQUESTY_MODEL_INFO_SANE_DEFAULTS",
    "UNBOUND_DEFAULT_MODEL_INFO",
    "resolve_model",
    "resolve_open_model",
    "resolve_passthrough_model",
]
