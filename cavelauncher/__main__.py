#!/usr/bin/env python3
"""
Command-line launcher.

Usage:
    python -m cavelauncher list
    python -m cavelauncher launch <cave_id> [--action NAME]
"""
import sys
import asyncio
import logging
import argparse

from .api.client import ApiClient
from .console import ConsoleChooser, ConsoleModals
from .registry.caves_registry import CAVES, get_registry
from .services.configure_service import ConfigureService
from .services.launch_service import LaunchService
from .settings import load_settings, get_credentials
from .utils.explorer import Explorer
from .utils.paths import ensure_data_dir

logger = logging.getLogger("cavelauncher")


def list_caves(registry) -> int:
    caves = registry.get_entities(CAVES)
    if not caves:
        print("No caves installed")
        return 0
    for cave_id, cave in sorted(caves.items()):
        title = (cave.game or {}).get('title') or f"game {cave.game_id}"
        minutes = (cave.seconds_run or 0) // 60
        print(f"{cave_id}\t{cave.launch_type}\t{minutes} min\t{title}")
    return 0


async def launch_cave(registry, cave_id: str, action_name: str = None, interactive: bool = True) -> int:
    settings = load_settings()
    api = ApiClient(settings["api_base_url"])
    service = LaunchService(
        store=registry,
        api=api,
        tasks=ConfigureService(registry),
        chooser=ConsoleChooser(),
        modals=ConsoleModals(interactive=interactive),
        explorer=Explorer(),
        credentials=get_credentials(settings),
    )
    result = await service.launch(cave_id, manifest_action_name=action_name)
    if not result['success']:
        logger.error(f"Launch failed: {result.get('error')}")
        return 1
    if result.get('cancelled'):
        logger.info("Launch cancelled")
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(prog="cavelauncher", description="Launch installed games")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("list", help="List installed caves")

    launch_parser = subparsers.add_parser("launch", help="Launch a cave")
    launch_parser.add_argument("cave_id", help="Cave to launch")
    launch_parser.add_argument("--action", default=None,
                               help="Manifest action to run without prompting")
    launch_parser.add_argument("--non-interactive", action="store_true",
                               help="Don't prompt after a failed launch")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s [%(levelname)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
    )

    ensure_data_dir()
    registry = get_registry()
    if args.command == "list":
        return list_caves(registry)
    return asyncio.run(launch_cave(registry, args.cave_id, args.action, not args.non_interactive))


if __name__ == "__main__":
    sys.exit(main())
