"""Client for the ``get_tabs`` request.

The shim writes its reply in one burst with no length prefix or
delimiter, so the end of the reply is detected by socket idle time: a
first read waits up to ``first_read_timeout`` for the reply to start, then
a drain phase keeps reading until nothing arrives for ``drain_timeout``.
The first timeout must exceed the shim's time to first byte; the drain
timeout must be shorter than any gap between chunks of the same reply.
"""

import asyncio
import json
import logging
from typing import List, Optional

from ..models import MalformedTabError, TabRecord
from .base import ConnectError, ProtocolError, ReplyError, TabSource
from .commands import CommandDispatcher

logger = logging.getLogger("ShimTabs.Protocol")

GET_TABS_REQUEST = {"action": "get_tabs"}


class TabProtocolClient(TabSource):
    """Fetches the live tab list from the shim process over loopback TCP."""

    def __init__(
        self,
        host: str = "127.0.0.1",
        port: int = 19876,
        connect_timeout: float = 1.0,
        first_read_timeout: float = 0.1,
        drain_timeout: float = 0.05,
        read_chunk_size: int = 128 * 1024,
        dispatcher: Optional[CommandDispatcher] = None,
    ):
        """Initialize the client.

        Args:
            host: Shim host, loopback in practice
            port: Shim port
            connect_timeout: Seconds allowed for the TCP connect
            first_read_timeout: Seconds to wait for the first reply bytes
            drain_timeout: Idle seconds that mark the end of the reply
            read_chunk_size: Maximum bytes per socket read
            dispatcher: Used by activate_tab; one is built for the same
                endpoint if omitted
        """
        self.host = host
        self.port = port
        self.connect_timeout = connect_timeout
        self.first_read_timeout = first_read_timeout
        self.drain_timeout = drain_timeout
        self.read_chunk_size = read_chunk_size
        self.dispatcher = dispatcher or CommandDispatcher(host, port, connect_timeout)

    async def fetch_tabs(self) -> List[TabRecord]:
        """Fetch all tabs, returning an empty list on any failure.

        Cancellation of the calling task is propagated, not swallowed.
        """
        try:
            tabs = await self.request_tabs()
        except ProtocolError as e:
            logger.debug(f"Tab request failed: {e}")
            return []
        except Exception as e:
            logger.warning(f"Unexpected error fetching tabs: {e}")
            return []
        logger.debug(f"Fetched {len(tabs)} tabs from {self.host}:{self.port}")
        return tabs

    async def request_tabs(self) -> List[TabRecord]:
        """Run one ``get_tabs`` exchange.

        Raises:
            ConnectError: If the shim could not be reached
            ReplyError: If the reply was missing or malformed
        """
        payload = await self._exchange(json.dumps(GET_TABS_REQUEST).encode("utf-8"))
        return parse_tabs(payload)

    async def _exchange(self, request: bytes) -> bytes:
        try:
            reader, writer = await asyncio.wait_for(
                asyncio.open_connection(self.host, self.port),
                timeout=self.connect_timeout,
            )
        except (OSError, asyncio.TimeoutError) as e:
            raise ConnectError(f"cannot connect to {self.host}:{self.port}: {e!r}") from e

        try:
            try:
                writer.write(request)
                await writer.drain()
            except OSError as e:
                raise ConnectError(f"cannot send request: {e!r}") from e
            return await self._read_reply(reader)
        finally:
            writer.close()
            try:
                await writer.wait_closed()
            except OSError:
                pass

    async def _read_reply(self, reader: asyncio.StreamReader) -> bytes:
        try:
            first = await asyncio.wait_for(
                reader.read(self.read_chunk_size), timeout=self.first_read_timeout
            )
        except asyncio.TimeoutError as e:
            raise ReplyError(
                f"no reply within {self.first_read_timeout}s"
            ) from e
        except OSError as e:
            raise ReplyError(f"reply read failed: {e!r}") from e
        if not first:
            raise ReplyError("connection closed without a reply")

        chunks = [first]
        while True:
            try:
                chunk = await asyncio.wait_for(
                    reader.read(self.read_chunk_size), timeout=self.drain_timeout
                )
            except (asyncio.TimeoutError, OSError):
                break
            if not chunk:
                break
            chunks.append(chunk)

        if len(chunks) > 1:
            logger.debug(f"Reply arrived in {len(chunks)} chunks")
        return b"".join(chunks)

    async def get_tabs(self) -> List[TabRecord]:
        return await self.fetch_tabs()

    async def is_available(self) -> bool:
        """Check whether the shim accepts connections."""
        try:
            _, writer = await asyncio.wait_for(
                asyncio.open_connection(self.host, self.port),
                timeout=self.connect_timeout,
            )
        except (OSError, asyncio.TimeoutError):
            return False
        writer.close()
        try:
            await writer.wait_closed()
        except OSError:
            pass
        return True

    def activate_tab(self, tab: TabRecord) -> None:
        self.dispatcher.switch_tab(tab.id, tab.window_id)


def parse_tabs(payload: bytes) -> List[TabRecord]:
    """Decode a ``get_tabs`` reply.

    Args:
        payload: Raw reply bytes

    Returns:
        Tabs in reply order; an empty or ``null`` reply gives an empty list

    Raises:
        ReplyError: If the bytes are not a JSON array of tab objects
    """
    try:
        data = json.loads(payload.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as e:
        raise ReplyError(f"reply is not valid JSON: {e}") from e

    if data is None:
        return []
    if not isinstance(data, list):
        raise ReplyError(f"reply is not a list: {type(data).__name__}")

    try:
        return [TabRecord.from_wire(item) for item in data]
    except MalformedTabError as e:
        raise ReplyError(str(e)) from e
