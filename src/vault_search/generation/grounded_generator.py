"""Grounded generation shared by the summary, answer and chat modes."""

from __future__ import annotations

import json
import re

from vault_search.exceptions import GenerationError
from vault_search.generation.prompt_templates import (
    ANSWER_PROMPT,
    CHAT_PROMPT,
    CHAT_SYSTEM,
    GROUNDING_SYSTEM,
    STATELESS_CHAT_PROMPT,
    SUMMARY_PROMPT,
    TERMINOLOGY_GUIDE,
)
from vault_search.models.domain import ChatTurn, GenerationOutput, SearchMode
from vault_search.observability.logger import get_logger
from vault_search.protocols.llm import LLMProvider

logger = get_logger("generation")

_JSON_FENCE = re.compile(r"```(?:json)?\s*\n(.*?)\n?```", re.DOTALL)

# Key holding the generated text in the model's JSON, per mode.
_TEXT_KEYS = {
    SearchMode.SUMMARY: "summary",
    SearchMode.ANSWER: "answer",
    SearchMode.CHAT: "answer",
}


def parse_model_json(raw: str) -> dict:
    """Decode the JSON object in a model reply, unwrapping a markdown code fence."""
    match = _JSON_FENCE.search(raw)
    payload = match.group(1) if match else raw.strip()
    try:
        data = json.loads(payload)
    except json.JSONDecodeError as e:
        raise GenerationError(f"Model returned malformed JSON: {e}") from e
    if not isinstance(data, dict):
        raise GenerationError(f"Model returned {type(data).__name__}, expected an object")
    return data


class GroundedGenerator:
    def __init__(self, llm: LLMProvider) -> None:
        self._llm = llm

    async def generate(
        self,
        mode: SearchMode,
        query: str,
        context: str,
        history: list[ChatTurn] | None = None,
    ) -> GenerationOutput:
        if mode not in _TEXT_KEYS:
            raise ValueError(f"No generation pathway for mode {mode!s}")

        if mode == SearchMode.CHAT:
            system = CHAT_SYSTEM.format(document_context=context)
            prompt = CHAT_PROMPT.format(message=query)
        else:
            template = SUMMARY_PROMPT if mode == SearchMode.SUMMARY else ANSWER_PROMPT
            system = GROUNDING_SYSTEM
            prompt = template.format(
                document_context=context,
                terminology_guide=TERMINOLOGY_GUIDE,
                query=query,
            )

        raw = await self._llm.generate(prompt, system=system, history=history, json_output=True)
        data = parse_model_json(raw)

        text = data.get(_TEXT_KEYS[mode])
        if not isinstance(text, str) or not text.strip():
            raise GenerationError(f"Model reply is missing '{_TEXT_KEYS[mode]}' text")

        follow_ups = data.get("suggestedFollowUps") or []
        if not isinstance(follow_ups, list):
            follow_ups = []

        logger.info(
            "generated",
            mode=str(mode),
            query_len=len(query),
            text_len=len(text),
            history_turns=len(history or []),
        )
        return GenerationOutput(
            text=text.strip(),
            references=data.get("referencedDocuments"),
            suggested_follow_ups=[str(item) for item in follow_ups if item],
        )

    async def converse(self, message: str, context: str, history: list[ChatTurn]) -> str:
        """Free-form chat reply for callers that keep their own history."""
        system = CHAT_SYSTEM.format(document_context=context)
        text = await self._llm.generate(
            STATELESS_CHAT_PROMPT.format(message=message), system=system, history=history
        )
        if not text.strip():
            raise GenerationError("Model returned an empty chat reply")
        logger.info("generated_chat_reply", history_turns=len(history), text_len=len(text))
        return text.strip()
