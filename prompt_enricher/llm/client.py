from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass
from typing import Dict, List, Optional

import requests
from pydantic import BaseModel

logger = logging.getLogger(__name__)


class LLMResponse(BaseModel):
    content: str
    actions: Optional[List[str]] = None
    model: Optional[str] = None
    finish_reason: str = "stop"
    usage: Optional[Dict[str, int]] = None
    time_taken: float = 0.0


class LLMError(RuntimeError):
    """The backend answered with a payload we cannot use."""


@dataclass
class LLMConfig:
    api_base: str = "https://router.huggingface.co"
    model: str = "deepseek-ai/DeepSeek-Coder-V2-Lite-Instruct"
    max_tokens: int = 4096
    temperature: float = 0.0
    timeout: int = 60

    @classmethod
    def from_dict(cls, cfg: Dict) -> "LLMConfig":
        llm = cfg.get("llm", {})
        defaults = cls()
        return cls(
            api_base=str(llm.get("api_base", defaults.api_base)).rstrip("/"),
            model=llm.get("model", defaults.model),
            max_tokens=int(llm.get("max_tokens", defaults.max_tokens)),
            temperature=float(llm.get("temperature", defaults.temperature)),
            timeout=int(llm.get("timeout", defaults.timeout)),
        )


class LLMBackend:
    """Abstract base class for the AI backend."""

    def complete(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> LLMResponse:
        """Send one composed prompt. Errors propagate to the caller; there is no retry."""
        raise NotImplementedError


class HuggingFaceClient(LLMBackend):

    def __init__(self, config: LLMConfig | None = None):
        self.config = config or LLMConfig()
        self.api_key = os.getenv("HF_TOKEN")
        if not self.api_key:
            raise ValueError("HF_TOKEN environment variable not set")

        self.headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    def complete(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> LLMResponse:
        messages = []
        if system_prompt and system_prompt.strip():
            messages.append({"role": "system", "content": system_prompt.strip()})
        messages.append({"role": "user", "content": prompt.strip()})
        url = f"{self.config.api_base}/v1/chat/completions"
        payload = {
            "model": self.config.model,
            "messages": messages,
            "max_tokens": max_tokens if max_tokens is not None else self.config.max_tokens,
            "temperature": temperature if temperature is not None else self.config.temperature,
        }
        start_time = time.time()
        response = requests.post(
            url,
            headers=self.headers,
            json=payload,
            timeout=self.config.timeout,
        )
        response.raise_for_status()
        data = response.json()
        if not data.get("choices"):
            raise LLMError(f"Unexpected response format: {data}")

        choice = data["choices"][0]
        message_content = choice.get("message", {}).get("content") or ""
        usage = data.get("usage", {})
        elapsed = time.time() - start_time
        logger.info(f"{self.config.model} answered in {elapsed:.2f}s")

        return LLMResponse(
            content=message_content.strip(),
            model=data.get("model", self.config.model),
            finish_reason=choice.get("finish_reason") or "stop",
            usage={
                "prompt_tokens": usage.get("prompt_tokens", 0),
                "completion_tokens": usage.get("completion_tokens", 0),
                "total_tokens": usage.get("total_tokens", 0),
            },
            time_taken=elapsed,
        )


def create_client(cfg: Dict) -> HuggingFaceClient:
    return HuggingFaceClient(LLMConfig.from_dict(cfg))
