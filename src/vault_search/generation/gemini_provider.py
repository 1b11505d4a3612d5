"""Google Gemini LLM provider using the google-genai SDK."""

from __future__ import annotations

from google import genai
from google.genai import types

from vault_search.exceptions import GenerationError
from vault_search.models.domain import ChatTurn, Role
from vault_search.observability.logger import get_logger

logger = get_logger("gemini")

_GEMINI_ROLES = {Role.USER: "user", Role.ASSISTANT: "model"}


class GeminiProvider:
    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.0-flash",
        temperature: float = 0.2,
        max_tokens: int = 4096,
    ) -> None:
        self._client = genai.Client(api_key=api_key)
        self._model = model
        self._temperature = temperature
        self._max_tokens = max_tokens

    async def generate(
        self,
        prompt: str,
        system: str | None = None,
        history: list[ChatTurn] | None = None,
        json_output: bool = False,
    ) -> str:
        contents = [
            types.Content(role=_GEMINI_ROLES[turn.role], parts=[types.Part(text=turn.text)])
            for turn in history or []
        ]
        contents.append(types.Content(role="user", parts=[types.Part(text=prompt)]))

        try:
            config = types.GenerateContentConfig(
                temperature=self._temperature,
                max_output_tokens=self._max_tokens,
            )
            if system:
                config.system_instruction = system
            if json_output:
                config.response_mime_type = "application/json"

            response = await self._client.aio.models.generate_content(
                model=self._model,
                contents=contents,
                config=config,
            )
            return response.text or ""
        except Exception as e:
            logger.error("gemini_request_failed", model=self._model, error=str(e))
            raise GenerationError(f"Gemini generation failed: {e}") from e
