"""Background download of fallback favicons."""

import logging
import os
import tempfile
import threading

import requests

logger = logging.getLogger("ShimTabs.Icons.Fetcher")

DEFAULT_SERVICE_URL = "https://www.google.com/s2/favicons?domain={host}&sz={size}"


def write_file_atomic(dest_path: str, data: bytes) -> None:
    """Replace ``dest_path`` with ``data`` so readers never see a partial file."""
    directory = os.path.dirname(os.path.abspath(dest_path))
    fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".icon-", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.replace(tmp_path, dest_path)
    except BaseException:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise


class RemoteIconFetcher:
    """Fetches favicons from a remote service without blocking the caller.

    Each call starts a daemon thread that makes a single attempt. Nothing
    is retried or deduplicated; concurrent fetches for the same host race
    and the last write wins.
    """

    def __init__(
        self,
        service_url: str = DEFAULT_SERVICE_URL,
        size: int = 128,
        timeout: float = 5.0,
        session=None,
    ):
        self.service_url = service_url
        self.size = size
        self.timeout = timeout
        # Persistent HTTP session shared by all fetch threads
        self._session = session or requests.Session()

    def service_url_for(self, host: str) -> str:
        return self.service_url.format(host=host, size=self.size)

    def fetch_fallback(self, host: str, dest_path: str) -> threading.Thread:
        """Start fetching the service icon for ``host`` into ``dest_path``.

        Returns:
            The started thread; callers are not expected to join it
        """
        return self.fetch_url(self.service_url_for(host), dest_path)

    def fetch_url(self, url: str, dest_path: str) -> threading.Thread:
        """Start downloading ``url`` verbatim into ``dest_path``."""
        thread = threading.Thread(
            target=self._download, args=(url, dest_path), name="favicon-fetch"
        )
        thread.daemon = True
        thread.start()
        return thread

    def _download(self, url: str, dest_path: str) -> None:
        try:
            response = self._session.get(url, timeout=self.timeout)
            if not response.ok:
                logger.debug(f"Favicon fetch {url} returned {response.status_code}")
                return
            if not response.content:
                logger.debug(f"Favicon fetch {url} returned an empty body")
                return
            write_file_atomic(dest_path, response.content)
            logger.debug(f"Cached favicon {dest_path} from {url}")
        except (requests.RequestException, OSError) as e:
            logger.debug(f"Favicon fetch {url} failed: {e}")
