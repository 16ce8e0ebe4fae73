from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import SecretStr

from ..core.errors import CompletionError, ConfigurationError, NoResponseError

logger = logging.getLogger("searchai.llm")


class LLMClient:
    def __init__(
        self,
        api_key: Optional[SecretStr],
        model: str = "gpt-4o",
        base_url: str = "https://api.openai.com/v1",
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        if api_key is None or not api_key.get_secret_value():
            raise ConfigurationError("An OpenAI API key is required for completions.")
        self._api_key = api_key
        self.model = model
        self.url = base_url.rstrip("/") + "/chat/completions"
        self.timeout = timeout
        self._transport = transport

    async def chat(
        self,
        system_prompt: str,
        messages: List[Dict[str, Any]],
        temperature: Optional[float] = None,
    ) -> Dict[str, Any]:
        """
        Returns the raw message dict from OpenAI, e.g.:
        {
            "role": "assistant",
            "content": "..."
        }

        Raises CompletionError on transport/HTTP failure and NoResponseError
        when the response carries no choices.
        """
        payload: Dict[str, Any] = {
            "model": self.model,
            "messages": [{"role": "system", "content": system_prompt}] + messages,
        }
        if temperature is not None:
            payload["temperature"] = temperature

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.post(
                    self.url,
                    json=payload,
                    headers={"Authorization": f"Bearer {self._api_key.get_secret_value()}"},
                )
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPError as exc:
            logger.error("Completion request failed (%s): %s", type(exc).__name__, exc)
            raise CompletionError(f"Completion request failed: {type(exc).__name__}") from exc
        except ValueError as exc:
            raise CompletionError("Completion response is not valid JSON.") from exc

        choices = data.get("choices") if isinstance(data, dict) else None
        if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
            raise NoResponseError("No response generated from the completion model")
        message = choices[0].get("message")
        return message if isinstance(message, dict) else {}
