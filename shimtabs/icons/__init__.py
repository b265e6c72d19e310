"""Favicon resolution and caching."""

from .default_icon import ensure_default_icon
from .fetcher import RemoteIconFetcher
from .icon_store import IconDecodeError, IconStore, cache_key_for_url, decode_data_uri

__all__ = [
    "IconDecodeError",
    "IconStore",
    "RemoteIconFetcher",
    "cache_key_for_url",
    "decode_data_uri",
    "ensure_default_icon",
]
