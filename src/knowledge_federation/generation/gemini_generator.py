"""Google Gemini generation step using the google-genai SDK."""

from __future__ import annotations

from google import genai
from google.genai import types

from knowledge_federation.exceptions import GenerationError
from knowledge_federation.generation.prompt_templates import ASSISTANT_SYSTEM, render_prompt
from knowledge_federation.models.domain import ChatContext, ChatMessage, ContextBundle
from knowledge_federation.observability.logger import get_logger

logger = get_logger("gemini")


class GeminiGenerator:
    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.0-flash",
        temperature: float = 0.3,
        max_tokens: int = 2048,
    ) -> None:
        # Without a key every call degrades to the apology reply.
        self._client = genai.Client(api_key=api_key) if api_key else None
        self._model = model
        self._temperature = temperature
        self._max_tokens = max_tokens

    async def generate(
        self,
        bundle: ContextBundle,
        history: list[ChatMessage],
        query: str,
        context: ChatContext | None = None,
    ) -> str:
        if self._client is None:
            raise GenerationError("no Gemini API key configured")
        prompt = render_prompt(bundle, history, query, context)
        try:
            config = types.GenerateContentConfig(
                temperature=self._temperature,
                max_output_tokens=self._max_tokens,
                system_instruction=ASSISTANT_SYSTEM,
            )
            response = await self._client.aio.models.generate_content(
                model=self._model,
                contents=prompt,
                config=config,
            )
        except Exception as e:
            raise GenerationError(f"Gemini generation failed: {e}") from e

        text = response.text or ""
        if not text.strip():
            raise GenerationError("Gemini returned an empty completion")

        logger.info(
            "generated_answer",
            query_len=len(query),
            answer_len=len(text),
            sources=len(bundle.entries),
        )
        return text
