"""On-disk favicon cache keyed by site host."""

import base64
import binascii
import glob
import logging
import os
import re
from typing import Optional, Tuple
from urllib.parse import urlparse

from ..models import CachedIcon, TabRecord
from .fetcher import RemoteIconFetcher, write_file_atomic

logger = logging.getLogger("ShimTabs.Icons")

DATA_URI_PATTERN = re.compile(
    r"^data:image/(?P<subtype>[\w.+-]+);base64,(?P<payload>.*)$", re.DOTALL
)

# Image subtypes whose extension differs from the subtype itself
_SUBTYPE_EXTENSIONS = {
    "svg+xml": ".svg",
    "x-icon": ".ico",
    "vnd.microsoft.icon": ".ico",
    "jpeg": ".jpg",
}

# Decoded fine, but the host cannot display them
_UNSUPPORTED_EXTENSIONS = {".svg"}


class IconDecodeError(ValueError):
    """An inline ``data:`` favicon could not be turned into an image file."""


def cache_key_for_url(url: str) -> Optional[str]:
    """Derive the cache key (host with ``:`` as ``_``) from a tab URL.

    Returns:
        The key, or None when the URL has no usable authority
    """
    try:
        netloc = urlparse(url).netloc
    except ValueError:
        return None
    # Drop user info, keep host and port
    netloc = netloc.rpartition("@")[2]
    if not netloc:
        return None
    key = netloc.replace(":", "_")
    if "/" in key or "\\" in key or key in (".", ".."):
        return None
    return key


def extension_for_subtype(subtype: str) -> str:
    subtype = subtype.lower()
    return _SUBTYPE_EXTENSIONS.get(subtype, "." + subtype)


def decode_data_uri(source: str) -> Tuple[str, bytes]:
    """Decode an inline ``data:image/<subtype>;base64,<payload>`` favicon.

    Returns:
        Tuple of (file extension, image bytes)

    Raises:
        IconDecodeError: If the source does not match, the payload is not
            valid base64, or the image type is unsupported
    """
    match = DATA_URI_PATTERN.match(source)
    if match is None:
        raise IconDecodeError("not a base64 image data URI")

    extension = extension_for_subtype(match.group("subtype"))
    if extension in _UNSUPPORTED_EXTENSIONS:
        raise IconDecodeError(f"unsupported inline image type {extension}")

    try:
        data = base64.b64decode(match.group("payload").strip(), validate=True)
    except (binascii.Error, ValueError) as e:
        raise IconDecodeError(f"invalid base64 payload: {e}") from e
    if not data:
        raise IconDecodeError("empty payload")
    return extension, data


class IconStore:
    """Resolves a tab's favicon to a displayable file path.

    Icons are cached per host and never refreshed. Inline icons are
    written synchronously; anything else starts a background fetch and
    returns the default icon until a later query finds the cached file.
    """

    def __init__(
        self,
        cache_dir: str,
        default_icon: str,
        fetcher: Optional[RemoteIconFetcher] = None,
    ):
        """Initialize the icon store.

        Args:
            cache_dir: Directory holding one icon file per host
            default_icon: Path returned when no icon is available
            fetcher: Remote fallback fetcher, a default one if omitted
        """
        self.cache_dir = cache_dir
        self.default_icon = default_icon
        self.fetcher = fetcher or RemoteIconFetcher()

    def ensure_cache_dir(self) -> None:
        os.makedirs(self.cache_dir, exist_ok=True)

    def resolve_icon(self, tab: TabRecord) -> str:
        """Return an icon path for ``tab``; never raises."""
        try:
            return self._resolve(tab)
        except Exception as e:
            logger.debug(f"Icon resolution failed for {tab.url!r}: {e}")
            return self.default_icon

    def _resolve(self, tab: TabRecord) -> str:
        source = tab.favicon_source
        if not source:
            return self.default_icon

        key = cache_key_for_url(tab.url)
        if key is None:
            return self.default_icon

        cached = self.find_cached(key)
        if cached is not None:
            return cached.path

        if source.startswith("data:"):
            try:
                return self.store_inline(key, source).path
            except IconDecodeError as e:
                logger.debug(f"Inline favicon for {key} not usable: {e}")

        host = urlparse(tab.url).hostname or key
        self.fetcher.fetch_fallback(host, self.cache_path(key, ".png"))
        return self.default_icon

    def cache_path(self, key: str, extension: str) -> str:
        return os.path.join(self.cache_dir, key + extension)

    def find_cached(self, key: str) -> Optional[CachedIcon]:
        """Look up a cached icon for ``key`` with any extension."""
        png_path = self.cache_path(key, ".png")
        if os.path.isfile(png_path):
            return CachedIcon(key=key, extension=".png", path=png_path)

        pattern = os.path.join(glob.escape(self.cache_dir), glob.escape(key) + ".*")
        for path in sorted(glob.glob(pattern)):
            name = os.path.basename(path)
            extension = name[len(key):]
            # Skip keys that merely share a prefix, e.g. "a.b" vs "a.b.c"
            if "." in extension[1:] or not os.path.isfile(path):
                continue
            return CachedIcon(key=key, extension=extension, path=path)
        return None

    def store_inline(self, key: str, source: str) -> CachedIcon:
        """Decode an inline favicon and write it to the cache.

        Raises:
            IconDecodeError: If the source cannot be decoded
            OSError: If the file cannot be written
        """
        extension, data = decode_data_uri(source)
        path = self.cache_path(key, extension)
        write_file_atomic(path, data)
        logger.debug(f"Cached inline favicon {path}")
        return CachedIcon(key=key, extension=extension, path=path)
