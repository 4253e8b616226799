"""Greeting tool: greet."""

import logging

from mcp.types import ToolAnnotations

from . import ToolDescriptor

logger = logging.getLogger("xmcp-adapter")


async def greet(arguments):
    name = (arguments or {}).get("name")
    if not name:
        raise ValueError("name is required")
    logger.debug(f"Greeting {name}")
    return f"Hello, {name}"


def register() -> ToolDescriptor:
    return ToolDescriptor(
        name="greet",
        description="Greet the user",
        annotations=ToolAnnotations(
            title="Greet the user",
            readOnlyHint=True,
            destructiveHint=False,
            idempotentHint=True,
        ),
        schema={
            "name": {
                "type": "string",
                "description": "The name of the user to greet",
            },
        },
        handler=greet,
    )
