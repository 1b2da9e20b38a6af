"""Explainer client: a thin adapter over a LangChain chat model.

Model providers
---------------
``ollama`` (default)
    Local Ollama server.  Configure via ``OLLAMA_BASE_URL`` and
    ``OLLAMA_CHAT_MODEL``.

``openai``
    OpenAI chat completions.  Requires ``OPENAI_API_KEY``; configure via
    ``OPENAI_CHAT_MODEL``.

Set ``LLM_PROVIDER=openai`` in your ``.env`` to switch providers.  Both are
built with an explicit request timeout (``MODEL_TIMEOUT``).
"""

from __future__ import annotations

import logging
from typing import Any

from clarifyr.config import Settings, settings
from clarifyr.errors import ModelError

logger = logging.getLogger(__name__)


def build_llm(config: Settings = settings) -> Any:
    """Return a configured LangChain chat model based on *config*."""
    if config.llm_provider == "openai":
        from langchain_openai import ChatOpenAI

        if not config.openai_api_key:
            raise EnvironmentError(
                "OPENAI_API_KEY environment variable is not set. "
                "Set it or switch to LLM_PROVIDER=ollama."
            )
        return ChatOpenAI(
            model=config.openai_chat_model,
            api_key=config.openai_api_key,
            timeout=config.model_timeout,
            max_retries=0,
        )

    from langchain_ollama import ChatOllama

    return ChatOllama(
        model=config.ollama_chat_model,
        base_url=config.ollama_base_url,
        client_kwargs={"timeout": config.model_timeout},
    )


def _response_text(response: Any) -> str:
    """Map a LangChain message (or bare string) to its text content."""
    content = response.content if hasattr(response, "content") else response
    if isinstance(content, str):
        return content
    # Some providers return a list of content blocks.
    if isinstance(content, list):
        parts = []
        for block in content:
            if isinstance(block, str):
                parts.append(block)
            elif isinstance(block, dict) and block.get("type") == "text":
                parts.append(block.get("text", ""))
        return "".join(parts)
    return ""


class Explainer:
    """Submit a prompt to *llm* once and return the raw text it produces."""

    def __init__(self, llm: Any) -> None:
        self._llm = llm

    def explain(self, prompt: str) -> str:
        """Return the model's text for *prompt*, unmodified.

        Raises:
            ModelError: If the call fails or times out, or the model returns
                no text.
        """
        try:
            response = self._llm.invoke(prompt)
        except Exception as exc:  # noqa: BLE001
            raise ModelError(exc) from exc

        text = _response_text(response)
        if not text.strip():
            raise ModelError("model returned an empty response")
        return text
