"""Command line front end: list, search and switch browser tabs."""

import argparse
import asyncio
import json
import logging
import os
import sys

from . import setup_logging
from .config_manager import ConfigManager
from .plugin import TabSwitcherPlugin


def build_parser():
    parser = argparse.ArgumentParser(
        prog="shimtabs", description="Search open browser tabs via the ShimTabs process."
    )
    parser.add_argument("query", nargs="?", default="", help="Search text (default: all tabs)")
    parser.add_argument(
        "--activate",
        type=int,
        metavar="N",
        help="Switch to the N-th result (1-based)",
    )
    parser.add_argument("--config", help="Path to shimtabs_config.json")
    parser.add_argument(
        "--plugin-dir",
        default=os.path.join(os.path.expanduser("~"), ".shimtabs"),
        help="Directory for the favicon cache and default icon",
    )
    parser.add_argument("--json", action="store_true", help="Print results as JSON")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    os.makedirs(args.plugin_dir, exist_ok=True)
    setup_logging(
        log_file=os.path.join(args.plugin_dir, "shimtabs.log"),
        level=logging.DEBUG if args.verbose else logging.WARNING,
        stream=sys.stderr,
    )

    config_manager = ConfigManager(args.config) if args.config else None
    plugin = TabSwitcherPlugin()
    plugin.init(args.plugin_dir, config_manager=config_manager)

    results = asyncio.run(plugin.query(args.query))

    if args.json:
        print(
            json.dumps(
                [
                    {
                        "title": r.title,
                        "url": r.subtitle,
                        "icon": r.icon_path,
                        "score": r.score,
                        "tabId": r.tab.id,
                        "windowId": r.tab.window_id,
                    }
                    for r in results
                ],
                indent=2,
            )
        )
    else:
        for index, r in enumerate(results, 1):
            print(f"{index:3d} {r.score:5d}  {r.title}  {r.subtitle}  {r.icon_path}")

    if args.activate is not None:
        if not 1 <= args.activate <= len(results):
            print(f"No result number {args.activate}", file=sys.stderr)
            return 1
        results[args.activate - 1].on_activate()

    return 0


if __name__ == "__main__":
    sys.exit(main())
