"""completion_providers.config.defaults
=================================

Central place for small, stable default values used across the adapters and
the cache subsystem. These defaults can be overridden via environment
variables or external configuration, but provide sensible fallbacks.

This module intentionally avoids importing from other packages to prevent
circular dependencies. Only plain constants live here.
"""

from __future__ import annotations

# ---- Factory ----
# Adapter used when a provider id is unknown.
DEFAULT_PROVIDER = "anthropic"

# ---- Default model ids ----
ANTHROPIC_DEFAULT_MODEL = "claude-3-5-sonnet-20241022"
BEDROCK_DEFAULT_MODEL = "anthropic.claude-3-sonnet-20240229-v1:0"
DEEPSEEK_DEFAULT_MODEL = "deepseek-chat"
GEMINI_DEFAULT_MODEL = "gemini-2.0-flash-001"
GLAMA_DEFAULT_MODEL = "anthropic/claude-3-5-sonnet"
MISTRAL_DEFAULT_MODEL = "codestral-latest"
OPENAI_NATIVE_DEFAULT_MODEL = "gpt-4o"
OPENROUTER_DEFAULT_MODEL = "anthropic/claude-3.5-sonnet:beta"
REQUESTY_DEFAULT_MODEL = "anthropic/claude-3-sonnet"
UNBOUND_DEFAULT_MODEL = "anthropic/claude-3-5-sonnet-20241022"
VERTEX_DEFAULT_MODEL = "claude-3-5-sonnet@20240620"

# ---- Endpoints ----
OPENAI_DEFAULT_BASE_URL = "https://api.openai.com/v1"
DEEPSEEK_DEFAULT_BASE_URL = "https://api.deepseek.com/v1"
REQUESTY_DEFAULT_BASE_URL = "https://router.requesty.ai/v1"
UNBOUND_DEFAULT_BASE_URL = "https://api.getunbound.ai/v1"
OPENROUTER_DEFAULT_BASE_URL = "https://openrouter.ai/api/v1"
GLAMA_DEFAULT_BASE_URL = "https://glama.ai/api/gateway/openai/v1"
GLAMA_COMPLETION_REQUESTS_URL = "https://glama.ai/api/gateway/v1/completion-requests"
MISTRAL_DEFAULT_BASE_URL = "https://api.mistral.ai"
MISTRAL_CODESTRAL_BASE_URL = "https://codestral.mistral.ai"
OLLAMA_DEFAULT_BASE_URL = "http://localhost:11434"
LMSTUDIO_DEFAULT_BASE_URL = "http://localhost:1234"

AZURE_OPENAI_DEFAULT_API_VERSION = "2024-08-01-preview"
BEDROCK_DEFAULT_REGION = "us-east-1"
VERTEX_DEFAULT_REGION = "us-east5"

# Attribution headers sent to OpenAI-compatible routers.
APP_REFERER = "https://github.com/completion-providers/completion-providers"
APP_TITLE = "completion-providers"

# ---- Sampling defaults ----
DEFAULT_TEMPERATURE = 0.0
DEEPSEEK_REASONER_TEMPERATURE = 0.6
DEEPSEEK_REASONER_TOP_P = 0.95
BEDROCK_DEFAULT_TEMPERATURE = 0.3
BEDROCK_DEFAULT_TOP_P = 0.1
BEDROCK_FALLBACK_MAX_TOKENS = 5000
ANTHROPIC_FALLBACK_MAX_TOKENS = 8192
ROUTER_ANTHROPIC_MAX_TOKENS = 8192

# ---- Prompt caching ----
ANTHROPIC_PROMPT_CACHING_BETA = "prompt-caching-2024-07-31"
# Shorter than the backend's five-minute ephemeral cache TTL.
CACHE_REFRESH_PERIOD_SECONDS = 4 * 60
CACHE_REFRESH_MESSAGE = "Continue"
# stopped session ids remembered for session_state()
CACHE_RETIRED_HISTORY = 1024

# ---- Out-of-band usage retrieval ----
USAGE_FETCH_MAX_ATTEMPTS = 10
USAGE_FETCH_DELAY_SECONDS = 0.2
USAGE_FETCH_TIMEOUT_SECONDS = 5.0

# ---- HTTP ----
HTTP_CONNECT_TIMEOUT_SECONDS = 10.0
