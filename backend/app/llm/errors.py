# app/llm/errors.py
class LLMError(Exception):
    """Base LLM error (wrapped)."""

class LLMNotConfiguredError(LLMError):
    """No API credential configured. Callers may fall back to simulated output."""

class LLMRetryableError(LLMError):
    """Transient error: timeouts, 429s, 5xx, network."""

class LLMNonRetryableError(LLMError):
    """Bad request, auth, invalid response."""
