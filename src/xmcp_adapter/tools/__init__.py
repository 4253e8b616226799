"""Tool registry for the xmcp adapter."""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Awaitable, Callable, Iterable, Mapping

from mcp.types import ToolAnnotations


@dataclass(frozen=True)
class ToolDescriptor:
    """A named tool: metadata, input schema and its async handler."""
    name: str
    description: str
    annotations: ToolAnnotations
    schema: Mapping[str, dict]
    handler: Callable[[Any], Awaitable[Any]]

    def input_schema(self) -> dict:
        """JSON schema advertised by tools/list. Every property is required."""
        return {
            "type": "object",
            "properties": dict(self.schema),
            "required": list(self.schema.keys()),
        }


Registry = Mapping[str, ToolDescriptor]


def build_registry(descriptors: Iterable[ToolDescriptor]) -> Registry:
    """Build the read-only name -> descriptor mapping, keeping registration order."""
    tools: dict[str, ToolDescriptor] = {}
    for descriptor in descriptors:
        if descriptor.name in tools:
            raise ValueError(f"Duplicate tool name: {descriptor.name}")
        tools[descriptor.name] = descriptor
    return MappingProxyType(tools)


def default_registry() -> Registry:
    """Registry of the built-in tools."""
    from . import greet

    return build_registry([greet.register()])
