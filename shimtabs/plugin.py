import os
import logging
from typing import List, Optional

from .config_manager import ConfigManager
from .icons import IconStore, RemoteIconFetcher, ensure_default_icon
from .matching import Matcher, fuzzy_match
from .models import RankedResult, TabRecord
from .protocol import CommandDispatcher, TabProtocolClient
from .protocol.commands import SWITCH_TAB


class TabSwitcherPlugin:
    """Launcher plugin that lists open browser tabs and switches to them."""

    def __init__(self, matcher: Matcher = fuzzy_match):
        """Initialize the plugin.

        Args:
            matcher: Fuzzy matcher supplied by the host launcher
        """
        self.logger = logging.getLogger("ShimTabs.Plugin")
        self.matcher = matcher

        self.config_manager: Optional[ConfigManager] = None
        self.client: Optional[TabProtocolClient] = None
        self.dispatcher: Optional[CommandDispatcher] = None
        self.icon_store: Optional[IconStore] = None

    def init(self, plugin_dir, config_manager=None):
        """Set up the favicon cache and protocol clients.

        Args:
            plugin_dir (str): Plugin directory; holds the cache and default icon
            config_manager (ConfigManager, optional): If None, loads
                ``shimtabs_config.json`` from the plugin directory
        """
        if config_manager is None:
            config_manager = ConfigManager(os.path.join(plugin_dir, "shimtabs_config.json"))
        self.config_manager = config_manager
        settings = config_manager.get_settings()

        cache_dir = os.path.join(plugin_dir, settings["cache_dir_name"])

        default_icon = os.path.join(plugin_dir, settings["default_icon"])
        try:
            ensure_default_icon(default_icon)
        except OSError as e:
            self.logger.warning(f"Could not create default icon {default_icon}: {e}")

        self.dispatcher = CommandDispatcher(
            settings["host"], settings["port"], settings["connect_timeout"]
        )
        self.client = TabProtocolClient(
            host=settings["host"],
            port=settings["port"],
            connect_timeout=settings["connect_timeout"],
            first_read_timeout=settings["first_read_timeout"],
            drain_timeout=settings["drain_timeout"],
            read_chunk_size=settings["read_chunk_size"],
            dispatcher=self.dispatcher,
        )
        fetcher = RemoteIconFetcher(
            service_url=settings["favicon_service_url"],
            size=settings["favicon_size"],
            timeout=settings["favicon_fetch_timeout"],
        )
        self.icon_store = IconStore(cache_dir, default_icon, fetcher)
        self.icon_store.ensure_cache_dir()

        self.logger.info(
            f"Initialized for {settings['host']}:{settings['port']}, cache at {cache_dir}"
        )

    async def query(self, search_text: str) -> List[RankedResult]:
        """Fetch tabs and rank them against ``search_text``.

        A blank search keeps every tab; otherwise a tab is kept when its
        title or URL scores above zero. Results are sorted by the better of
        the two scores, highest first.

        Raises:
            RuntimeError: If called before init()
        """
        if self.client is None or self.icon_store is None:
            raise RuntimeError("TabSwitcherPlugin.init() has not been called")

        tabs = await self.client.fetch_tabs()
        search_text = search_text or ""
        blank = not search_text.strip()

        scored = []
        for tab in tabs:
            title_score, title_spans = self.matcher(search_text, tab.title)
            url_score, _ = self.matcher(search_text, tab.url)
            if blank or title_score > 0 or url_score > 0:
                scored.append((max(title_score, url_score), tab, title_spans))

        scored.sort(key=lambda item: item[0], reverse=True)

        results = [
            RankedResult(
                title=tab.title,
                subtitle=tab.url,
                icon_path=self.icon_store.resolve_icon(tab),
                score=score,
                tab=tab,
                highlight_spans=spans,
                action=self._switch_action(tab),
            )
            for score, tab, spans in scored
        ]
        self.logger.debug(f"Query {search_text!r}: {len(results)} of {len(tabs)} tabs")
        return results

    def _switch_action(self, tab: TabRecord):
        tab_id, window_id = tab.id, tab.window_id
        dispatcher = self.dispatcher

        def action() -> None:
            dispatcher.send_command(SWITCH_TAB, tab_id, window_id)

        return action
