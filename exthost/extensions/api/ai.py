"""
AI assistance for extensions, backed by the host's AI provider.
"""

import json
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import AsyncIterator, List, Optional

from ..errors import CapabilityUnavailableError
from ..permissions import Permission
from .base import Facade


@dataclass
class ChatOptions:
    model: Optional[str] = None
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    context: List[str] = field(default_factory=list)


@dataclass
class AIMessage:
    role: str
    content: str
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass
class CodeIssue:
    type: str  # "error", "warning" or "info"
    message: str
    line: Optional[int] = None
    severity: str = "low"


@dataclass
class CodeAnalysis:
    issues: List[CodeIssue] = field(default_factory=list)
    suggestions: List[str] = field(default_factory=list)
    summary: str = ""


@dataclass
class Completion:
    text: str
    detail: str = ""


_CODE_FENCE = re.compile(r"```[\w+-]*\n(.*?)```", re.DOTALL)


def extract_code(response: str) -> str:
    """Return the first fenced code block, or the whole response."""
    match = _CODE_FENCE.search(response)
    return (match.group(1) if match else response).strip("\n")


def parse_analysis(response: str) -> CodeAnalysis:
    """Read a JSON analysis if the model produced one, else keep the prose."""
    try:
        payload = json.loads(extract_code(response))
    except json.JSONDecodeError:
        return CodeAnalysis(summary=response.strip())
    if not isinstance(payload, dict):
        return CodeAnalysis(summary=response.strip())

    issues = []
    for raw in payload.get("issues", []):
        if isinstance(raw, dict) and raw.get("message"):
            issues.append(CodeIssue(
                type=raw.get("type", "info"),
                message=raw["message"],
                line=raw.get("line"),
                severity=raw.get("severity", "low"),
            ))
    return CodeAnalysis(
        issues=issues,
        suggestions=[str(s) for s in payload.get("suggestions", [])],
        summary=str(payload.get("summary", "")),
    )


class AIAPI(Facade):

    def _provider(self):
        provider = self._services.ai
        if provider is None or not provider.is_available():
            raise CapabilityUnavailableError("No AI provider is configured")
        return provider

    async def _ask(self, prompt: str, options: Optional[ChatOptions] = None) -> str:
        options = options or ChatOptions()
        context = "\n".join(options.context) if options.context else None
        return await self._provider().ask_async(prompt, None, context)

    async def chat(self, message: str, options: Optional[ChatOptions] = None) -> AIMessage:
        self._require(Permission.AI_REQUEST)
        return AIMessage("assistant", await self._ask(message, options))

    def stream_chat(self, message: str, options: Optional[ChatOptions] = None) -> AsyncIterator[AIMessage]:
        """Yield the reply paragraph by paragraph."""
        self._require(Permission.AI_REQUEST)

        async def _stream():
            reply = await self._ask(message, options)
            for chunk in re.split(r"(?<=\n\n)", reply):
                if chunk:
                    yield AIMessage("assistant", chunk)

        return _stream()

    async def generate_code(self, prompt: str, language: Optional[str] = None) -> str:
        self._require(Permission.AI_REQUEST)
        target = f" in {language}" if language else ""
        request = f"Write code{target} for the following request. Reply with a single code block.\n\n{prompt}"
        return extract_code(await self._ask(request))

    async def analyze_code(self, code: str, language: Optional[str] = None) -> CodeAnalysis:
        self._require(Permission.AI_REQUEST)
        request = (
            f"Analyze this {language or 'source'} code. Reply with JSON containing "
            '"issues" (objects with type, message, line, severity), "suggestions" and "summary".'
            f"\n\n```\n{code}\n```"
        )
        return parse_analysis(await self._ask(request))

    async def complete(self, text: str, position: int, language: Optional[str] = None) -> List[Completion]:
        self._require(Permission.AI_REQUEST)
        before, after = text[:position], text[position:]
        request = (
            f"Complete the {language or 'source'} code at <CURSOR>. Reply with the inserted text only."
            f"\n\n{before}<CURSOR>{after}"
        )
        completion = extract_code(await self._ask(request))
        return [Completion(completion)] if completion else []
