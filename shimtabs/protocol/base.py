"""Base class and errors for tab sources."""

from abc import ABC, abstractmethod
from typing import List

from ..models import TabRecord


class ProtocolError(Exception):
    """A tab request could not be completed."""


class ConnectError(ProtocolError):
    """The shim process could not be reached."""


class ReplyError(ProtocolError):
    """The shim process sent no reply or an unreadable one."""


class TabSource(ABC):
    """Abstract base class for tab sources."""

    @abstractmethod
    async def get_tabs(self) -> List[TabRecord]:
        """Get list of tabs.

        Returns:
            List of tabs, empty if the source is unavailable
        """
        pass

    @abstractmethod
    async def is_available(self) -> bool:
        """Check if this tab source is currently reachable."""
        pass

    @abstractmethod
    def activate_tab(self, tab: TabRecord) -> None:
        """Ask the source to switch to a specific tab.

        Args:
            tab: The tab to bring to the front
        """
        pass
