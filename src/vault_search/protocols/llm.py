"""Protocol for LLM providers."""

from __future__ import annotations

from typing import Protocol

from vault_search.models.domain import ChatTurn


class LLMProvider(Protocol):
    async def generate(
        self,
        prompt: str,
        system: str | None = None,
        history: list[ChatTurn] | None = None,
        json_output: bool = False,
    ) -> str: ...
