from .client import HuggingFaceClient, LLMBackend, LLMConfig, LLMError, LLMResponse, create_client

__all__ = [
    "HuggingFaceClient",
    "LLMBackend",
    "LLMConfig",
    "LLMError",
    "LLMResponse",
    "create_client",
]
