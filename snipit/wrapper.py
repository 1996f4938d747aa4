"""Wrapper for the Claude Agent SDK."""
from __future__ import annotations

import inspect
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from itertools import count
from typing import (
    Any, Awaitable, Callable,
    Dict, List, Optional,
    Union, get_args, get_origin, get_type_hints,
    MutableMapping,
)
from types import UnionType

from claude_agent_sdk import (
    ClaudeAgentOptions,
    ClaudeSDKClient,
    McpSdkServerConfig,
    ResultMessage,
    SdkMcpTool,
    create_sdk_mcp_server,
)

ToolArguments = Dict[str, Any]
ToolResult = Dict[str, Any]
AsyncToolHandler = Callable[[ToolArguments], Awaitable[ToolResult]]

_counter = count()

try:
    _option_parameter_names: set[str] = set(inspect.signature(ClaudeAgentOptions).parameters)
except (TypeError, ValueError):  # pragma: no cover - exotic SDK builds
    _option_parameter_names = set()


def _option_supported(name: str) -> bool:
    return name in _option_parameter_names


@dataclass(slots=True)
class _ToolConfig:
    name: str | None
    description: str | None
    order: int


@dataclass(slots=True)
class _RegisteredTool:
    name: str
    description: str
    schema: dict[str, Any]
    handler: AsyncToolHandler


def tool(
    name: str | None = None,
    *,
    description: str | None = None,
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Mark an async method as an MCP tool; name and docstring are the defaults."""

    def _decorate(func: Callable[..., Any]) -> Callable[..., Any]:
        setattr(func, "__tool_config__", _ToolConfig(name, description, next(_counter)))
        return func

    return _decorate


class BaseTool:
    """In-process MCP tool collection.

    Decorated async methods are discovered on instantiation and exposed
    through :attr:`server`.
    """

    tool_server_name: str | None = None
    tool_server_version: str = "1.0.0"

    def __init__(self) -> None:
        self.server_name = self.tool_server_name or self.__class__.__name__.lower()
        self._registered_tools = self._discover_tools()
        self._server: Optional[McpSdkServerConfig] = None

    @property
    def server(self) -> McpSdkServerConfig:
        if self._server is None:
            self._server = create_sdk_mcp_server(
                name=self.server_name,
                version=self.tool_server_version,
                tools=[
                    SdkMcpTool(
                        name=entry.name,
                        description=entry.description,
                        input_schema=entry.schema,
                        handler=entry.handler,
                    )
                    for entry in self._registered_tools
                ],
            )
        return self._server

    @property
    def tool_names(self) -> List[str]:
        """Fully-qualified names the agent must be allowed to call."""
        return [f"mcp__{self.server_name}__{entry.name}" for entry in self._registered_tools]

    def _discover_tools(self) -> List[_RegisteredTool]:
        found: Dict[str, tuple[_ToolConfig, Callable[..., Any]]] = {}
        for cls in type(self).mro():
            for attr_name, attr_value in cls.__dict__.items():
                config = getattr(attr_value, "__tool_config__", None)
                if config is not None and attr_name not in found:
                    found[attr_name] = (config, attr_value)

        registry: List[_RegisteredTool] = []
        for config, func in sorted(found.values(), key=lambda entry: entry[0].order):
            bound = getattr(self, func.__name__)
            if not inspect.iscoroutinefunction(bound):
                raise TypeError(f"Tool '{func.__name__}' must be defined as an async function")
            registry.append(
                _RegisteredTool(
                    name=config.name or func.__name__,
                    description=config.description or inspect.getdoc(func) or "",
                    schema=self._infer_schema(func),
                    handler=self._make_handler(bound),
                )
            )
        return registry

    def _make_handler(self, method: Callable[..., Awaitable[Any]]) -> AsyncToolHandler:
        async def handler(arguments: ToolArguments) -> ToolResult:
            if not isinstance(arguments, dict):
                raise TypeError(f"Tool expected dict arguments but received {type(arguments)!r}")
            try:
                result = await method(**arguments)
            except Exception as exc:  # pragma: no cover - surfaced to the agent as a tool error
                return {
                    "content": [{"type": "text", "text": str(exc) or exc.__class__.__name__}],
                    "is_error": True,
                }
            return self._wrap_tool_result(result)

        return handler

    def _infer_schema(self, func: Callable[..., Any]) -> dict[str, Any]:
        try:
            annotations = get_type_hints(func)
        except Exception:
            annotations = dict(getattr(func, "__annotations__", {}))

        schema: dict[str, Any] = {}
        for param in inspect.signature(func).parameters.values():
            if param.name == "self":
                continue
            if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
                raise TypeError(f"Tool '{func.__name__}' cannot use *args or **kwargs")
            schema[param.name] = self._resolve_annotation(annotations.get(param.name, param.annotation))
        return schema

    def _resolve_annotation(self, annotation: Any) -> Any:
        if annotation is inspect.Signature.empty or annotation is Any:
            return str
        if isinstance(annotation, type):
            return annotation

        origin = get_origin(annotation)
        if origin is Union or origin is UnionType:
            args = [arg for arg in get_args(annotation) if arg is not type(None)]
            if len(args) == 1:
                return self._resolve_annotation(args[0])
        # Complex annotations are passed to the agent as plain strings.
        return str

    def _wrap_tool_result(self, result: Any) -> ToolResult:
        if isinstance(result, dict) and "content" in result:
            return result
        if isinstance(result, Mapping):
            text = repr(dict(result))
        elif isinstance(result, Sequence) and not isinstance(result, (str, bytes, bytearray)):
            text = repr(list(result))
        else:
            text = "" if result is None else str(result)
        return {"content": [{"type": "text", "text": text}]}


class Agent:
    """Thin wrapper that prepares ``ClaudeAgentOptions`` and runs one prompt."""

    def __init__(
        self,
        *,
        mcp_servers: Optional[Mapping[str, Any]] = None,
        allowed_tools: Optional[Sequence[str]] = None,
        system_prompt: Optional[str] = None,
        model: Optional[str] = None,
        max_turns: Optional[int] = None,
    ) -> None:
        option_kwargs: MutableMapping[str, Any] = {}

        if mcp_servers is not None and _option_supported("mcp_servers"):
            option_kwargs["mcp_servers"] = dict(mcp_servers)
        if _option_supported("allowed_tools"):
            option_kwargs["allowed_tools"] = list(allowed_tools or [])
        if system_prompt is not None and _option_supported("system_prompt"):
            option_kwargs["system_prompt"] = system_prompt
        if model is not None and _option_supported("model"):
            option_kwargs["model"] = model
        if max_turns is not None and _option_supported("max_turns"):
            option_kwargs["max_turns"] = max_turns

        self._options = ClaudeAgentOptions(**option_kwargs)

    async def arun(self, prompt: str) -> Optional[str]:
        """Run ``prompt`` and return the final result text."""
        if not prompt:
            raise ValueError("prompt must be a non-empty string")

        # SDK MCP servers are only initialised in streaming mode.
        result: Optional[str] = None
        client = ClaudeSDKClient(options=self._options)
        await client.connect()
        try:
            await client.query(prompt)
            async for message in client.receive_response():
                if isinstance(message, ResultMessage):
                    result = message.result
        finally:
            await client.disconnect()
        return result


__all__ = ["Agent", "BaseTool", "tool"]
