"""Best-effort metadata suggestions for a snippet, produced by an agent.

The agent answers through the ``submit_metadata`` tool, so the result arrives
as structured arguments and is validated here; free-form text is ignored.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Protocol, Sequence

from claude_agent_sdk import ClaudeSDKError, CLIConnectionError, CLINotFoundError, ProcessError
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..config import DEFAULT_MODEL
from ..wrapper import Agent, BaseTool, tool
from .prompt import PROMPT, SYSTEM_PROMPT, USER_SECTION

logger = logging.getLogger("snipit")


class SnippetMetadata(BaseModel):
    title: str = Field("", max_length=200)
    description: str = ""
    code_language: str = Field("", alias="codeLanguage")
    framework: str = ""
    tags: List[str] = Field(default_factory=list)
    error: str | None = None

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("tags", mode="before")
    @classmethod
    def _split_tags(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.split(",")
        if isinstance(value, (list, tuple)):
            cleaned = {str(tag).strip().lower() for tag in value}
            return sorted(tag for tag in cleaned if tag)
        return value


class MetadataFailureReason(str, Enum):
    EMPTY_CODE = "empty_code"
    AGENT_ERROR = "agent_error"
    TIMEOUT = "timeout"
    NO_RESULT = "no_result"
    INVALID_RESULT = "invalid_result"


@dataclass(frozen=True, slots=True)
class MetadataFailure:
    reason: MetadataFailureReason
    message: str


class MetadataCollector(BaseTool):
    """Tool server that captures the agent's structured answer."""

    tool_server_name = "snipit_metadata"

    def __init__(self) -> None:
        super().__init__()
        self.submissions: List[Dict[str, Any]] = []

    @tool(description="Report the generated metadata for the snippet. Call exactly once.")
    async def submit_metadata(
        self,
        title: str,
        description: str,
        code_language: str,
        tags: str,
        framework: str = "",
        error: str = "",
    ) -> Dict[str, Any]:
        self.submissions.append(
            {
                "title": title,
                "description": description,
                "code_language": code_language,
                "tags": tags,
                "framework": framework,
                "error": error or None,
            }
        )
        return {"accepted": True}


class MetadataAgent(Protocol):
    async def arun(self, prompt: str) -> str | None: ...


AgentFactory = Callable[[str, str, MetadataCollector], MetadataAgent]


def _default_agent_factory(system_prompt: str, model: str, collector: MetadataCollector) -> MetadataAgent:
    return Agent(
        mcp_servers={collector.server_name: collector.server},
        allowed_tools=collector.tool_names,
        system_prompt=system_prompt,
        model=model,
        max_turns=3,
    )


def build_prompt(
    code: str,
    *,
    title: str | None = None,
    description: str | None = None,
    language: str | None = None,
    tags: Sequence[str] | None = None,
) -> str:
    lines = []
    if title and title.strip():
        lines.append(f"- Title: {title.strip()}")
    if description and description.strip():
        lines.append(f"- Description: {description.strip()}")
    if language and language.strip():
        lines.append(f"- Language: {language.strip()}")
    if tags:
        lines.append(f"- Tags: {', '.join(tags)}")
    user_section = USER_SECTION.format(lines="\n".join(lines)) if lines else ""
    return PROMPT.format(code=code, user_section=user_section)


class MetadataCompleter:
    """Ask an agent for title/description/language/tags of a code snippet.

    Never raises: every problem is returned as a :class:`MetadataFailure`.
    """

    def __init__(
        self,
        *,
        agent_factory: AgentFactory | None = None,
        timeout: float = 120.0,
        default_model: str = DEFAULT_MODEL,
    ) -> None:
        self._agent_factory = agent_factory or _default_agent_factory
        self.timeout = timeout
        self.default_model = default_model

    async def complete(
        self,
        code: str,
        model_hint: str | None = None,
        *,
        title: str | None = None,
        description: str | None = None,
        language: str | None = None,
        tags: Sequence[str] | None = None,
    ) -> SnippetMetadata | MetadataFailure:
        if not code or not code.strip():
            return MetadataFailure(MetadataFailureReason.EMPTY_CODE, "Snippet code is empty.")

        model = model_hint or self.default_model
        collector = MetadataCollector()
        prompt = build_prompt(code, title=title, description=description, language=language, tags=tags)
        logger.info("Requesting snippet metadata using model %s", model)

        try:
            agent = self._agent_factory(SYSTEM_PROMPT, model, collector)
            await asyncio.wait_for(agent.arun(prompt), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning("Metadata completion timed out after %.0fs", self.timeout)
            return MetadataFailure(MetadataFailureReason.TIMEOUT, f"No answer within {self.timeout:.0f}s.")
        except (CLINotFoundError, CLIConnectionError, ProcessError, ClaudeSDKError) as exc:
            logger.error("Metadata agent failed: %s", exc)
            return MetadataFailure(MetadataFailureReason.AGENT_ERROR, str(exc) or exc.__class__.__name__)
        except Exception as exc:
            logger.exception("Unexpected failure during metadata completion")
            return MetadataFailure(MetadataFailureReason.AGENT_ERROR, str(exc) or exc.__class__.__name__)

        if not collector.submissions:
            logger.warning("Metadata agent finished without calling submit_metadata")
            return MetadataFailure(MetadataFailureReason.NO_RESULT, "The model returned no metadata.")

        try:
            return SnippetMetadata.model_validate(collector.submissions[-1])
        except ValidationError as exc:
            logger.warning("Metadata agent returned invalid metadata: %s", exc)
            return MetadataFailure(MetadataFailureReason.INVALID_RESULT, "The model returned invalid metadata.")


__all__ = [
    "MetadataCollector",
    "MetadataCompleter",
    "MetadataFailure",
    "MetadataFailureReason",
    "SnippetMetadata",
    "build_prompt",
]
