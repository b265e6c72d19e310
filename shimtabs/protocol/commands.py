"""Fire-and-forget commands sent to the shim process."""

import json
import logging
import socket
from typing import Any, Dict

logger = logging.getLogger("ShimTabs.Commands")

SWITCH_TAB = "switch_tab"


def build_command(action: str, tab_id: int, window_id: int) -> Dict[str, Any]:
    """Build the wire payload for a command, values passed through unchanged."""
    return {"action": action, "tabId": tab_id, "windowId": window_id}


class CommandDispatcher:
    """Sends one JSON command per short-lived connection and never reads a reply."""

    def __init__(self, host: str, port: int, connect_timeout: float = 1.0):
        self.host = host
        self.port = port
        self.connect_timeout = connect_timeout

    def send_command(self, action: str, tab_id: int, window_id: int) -> None:
        """Send a command to the shim process.

        Failures (shim not running, connection reset) are dropped; there is
        no acknowledgment, retry or ordering between commands.

        Args:
            action: Command name, e.g. ``switch_tab``
            tab_id: Tab id exactly as received from the shim
            window_id: Window id exactly as received from the shim
        """
        data = json.dumps(build_command(action, tab_id, window_id)).encode("utf-8")
        try:
            with socket.create_connection(
                (self.host, self.port), timeout=self.connect_timeout
            ) as sock:
                sock.sendall(data)
            logger.debug(f"Sent {action} for tab {tab_id} in window {window_id}")
        except OSError as e:
            logger.debug(f"Command {action} for tab {tab_id} dropped: {e}")

    def switch_tab(self, tab_id: int, window_id: int) -> None:
        self.send_command(SWITCH_TAB, tab_id, window_id)
