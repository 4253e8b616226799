"""
xmcp Adapter

Exposes named tools over the tools/list and tools/call JSON protocol.
"""

from .dispatcher import ToolDispatcher
from .server import main, run, create_server

__version__ = "0.1.0"
__all__ = ["ToolDispatcher", "main", "run", "create_server"]
