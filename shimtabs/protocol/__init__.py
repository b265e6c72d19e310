"""Loopback TCP protocol spoken with the shim process."""

from .base import ConnectError, ProtocolError, ReplyError, TabSource
from .commands import CommandDispatcher, build_command
from .tab_client import TabProtocolClient

__all__ = [
    "CommandDispatcher",
    "ConnectError",
    "ProtocolError",
    "ReplyError",
    "TabProtocolClient",
    "TabSource",
    "build_command",
]
