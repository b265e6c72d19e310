"""Data types shared by the protocol client, icon store and plugin."""

from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional


class MalformedTabError(ValueError):
    """A reply element could not be read as a tab."""


@dataclass(frozen=True)
class MatchSpan:
    """Character range matched by the fuzzy matcher (end exclusive)."""

    start: int
    end: int


@dataclass(frozen=True)
class TabRecord:
    """One open browser tab as reported by the shim process.

    ``id`` and ``window_id`` are opaque to the client; they are only sent
    back unchanged inside commands.
    """

    id: int
    window_id: int
    title: str = ""
    url: str = ""
    favicon_source: Optional[str] = None

    @classmethod
    def from_wire(cls, data: Any) -> "TabRecord":
        """Build a tab from one element of a ``get_tabs`` reply.

        Args:
            data: Decoded JSON object with ``id``, ``windowId``, ``title``,
                ``url`` and optionally ``favIconUrl``

        Raises:
            MalformedTabError: If the element is not an object, its ids
                are not integers or its title/url are not strings
        """
        if not isinstance(data, dict):
            raise MalformedTabError(f"tab entry is not an object: {data!r}")

        tab_id = data.get("id")
        window_id = data.get("windowId")
        for name, value in (("id", tab_id), ("windowId", window_id)):
            if isinstance(value, bool) or not isinstance(value, int):
                raise MalformedTabError(f"tab field {name} is not an integer: {value!r}")

        for name in ("title", "url"):
            value = data.get(name)
            if value is not None and not isinstance(value, str):
                raise MalformedTabError(f"tab field {name} is not a string: {value!r}")

        favicon = data.get("favIconUrl")
        if favicon is not None and not isinstance(favicon, str):
            favicon = None

        return cls(
            id=tab_id,
            window_id=window_id,
            title=data.get("title") or "",
            url=data.get("url") or "",
            favicon_source=favicon,
        )


@dataclass(frozen=True)
class CachedIcon:
    """An icon file in the on-disk favicon cache."""

    key: str
    extension: str
    path: str


@dataclass
class RankedResult:
    """A tab ready for display by the host launcher."""

    title: str
    subtitle: str
    icon_path: str
    score: int
    tab: TabRecord
    highlight_spans: List[MatchSpan] = field(default_factory=list)
    action: Optional[Callable[[], None]] = field(default=None, repr=False)

    def on_activate(self) -> bool:
        """Run the bound action.

        Returns:
            True so the host hides its window after selection
        """
        if self.action is not None:
            self.action()
        return True
