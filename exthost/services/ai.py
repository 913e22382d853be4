"""
AI provider interface consumed by the ai facade.

Concrete providers (OpenAI, Anthropic, ...) live outside the host; they only
need to implement ``ask``.
"""

import asyncio
import inspect
from abc import ABC, abstractmethod
from typing import Dict, List, Optional


class AIProvider(ABC):
    """Abstract base class for AI providers."""

    @abstractmethod
    def ask(self, prompt: str, history: Optional[List[Dict]] = None, context: Optional[str] = None) -> str:
        """Ask the AI a question and return the response."""
        pass

    def is_available(self) -> bool:
        """Check if the provider is available."""
        return True

    async def ask_async(self, prompt: str, history: Optional[List[Dict]] = None,
                        context: Optional[str] = None) -> str:
        """Run ``ask`` without blocking the event loop."""
        result = await asyncio.to_thread(self.ask, prompt, history, context)
        if inspect.isawaitable(result):
            result = await result
        return result


class StaticProvider(AIProvider):
    """Provider returning canned responses; handy for demos and tests."""

    def __init__(self, response: str = ""):
        self.response = response
        self.prompts: List[str] = []

    def ask(self, prompt: str, history: Optional[List[Dict]] = None, context: Optional[str] = None) -> str:
        self.prompts.append(prompt)
        return self.response
