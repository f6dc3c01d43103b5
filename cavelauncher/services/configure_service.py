"""
ConfigureService - Re-scans an install folder to find what can be launched.

Responsibilities:
- Find native executables for the current platform (by extension or binary header)
- Find the HTML entry point of web builds
- Save executables, game_path and the inferred launch type on the cave

It is the 'configure' task the launch pipeline runs when a cave is not
launchable as recorded.
"""
import os
import asyncio
import logging
from typing import Any, Dict, List, Optional

from ..launch.classifier import sniff_executable
from ..launch.collaborators import TaskRunner
from ..registry.caves_registry import CAVES
from ..utils.paths import app_path
from ..utils.platform import current_platform, WINDOWS, OSX, LINUX

logger = logging.getLogger(__name__)

MAX_SCAN_DEPTH = 5
HTML_INDEX_NAMES = ("index.html", "index.htm")


class ConfigureService(TaskRunner):
    """Task runner for the 'configure' task."""

    def __init__(self, store, platform: str = None):
        self.store = store
        self.platform = platform or current_platform()

    async def run(self, name: str, **kwargs) -> Dict[str, Any]:
        if name != "configure":
            raise ValueError(f"Unknown task: {name}")

        cave = kwargs["cave"]
        root = app_path(cave)
        logger.info(f"[Configure] Scanning {root} for cave {cave.id}")

        loop = asyncio.get_running_loop()
        scan = await loop.run_in_executor(None, self.scan, root)

        updates: Dict[str, Any] = {
            "executables": scan["executables"],
            "game_path": scan["game_path"],
        }
        if scan["executables"]:
            updates["launch_type"] = "native"
        elif scan["game_path"]:
            updates["launch_type"] = "html"

        self.store.save_entity(CAVES, cave.id, updates)
        logger.info(f"[Configure] Cave {cave.id}: {len(scan['executables'])} executable(s), "
                    f"html index={scan['game_path']}")
        return {'success': True, **scan}

    def _is_native(self, full_path: str, name: str) -> bool:
        lower = name.lower()
        if self.platform == WINDOWS:
            return lower.endswith(('.exe', '.bat'))
        if lower.endswith('.sh'):
            return True
        return sniff_executable(full_path) == self.platform

    def scan(self, root: str) -> Dict[str, Any]:
        """Walk an install folder.

        Returns:
            Dict with 'executables' (relative paths) and 'game_path'
            (relative path of the shallowest HTML index, or None)
        """
        executables: List[str] = []
        html_indexes: List[str] = []

        if not os.path.isdir(root):
            logger.warning(f"[Configure] Install folder does not exist: {root}")
            return {"executables": [], "game_path": None}

        for dirpath, dirnames, filenames in os.walk(root):
            rel_dir = os.path.relpath(dirpath, root)
            depth = 0 if rel_dir == '.' else len(rel_dir.split(os.sep))

            # App bundles are executables themselves, don't descend into them
            if self.platform == OSX:
                for d in list(dirnames):
                    if d.lower().endswith('.app'):
                        executables.append(os.path.normpath(os.path.join(rel_dir, d)))
                        dirnames.remove(d)

            dirnames[:] = sorted(d for d in dirnames if not d.startswith('.'))
            if depth >= MAX_SCAN_DEPTH:
                dirnames[:] = []

            for filename in sorted(filenames):
                rel_path = os.path.normpath(os.path.join(rel_dir, filename))
                if filename.lower() in HTML_INDEX_NAMES:
                    html_indexes.append(rel_path)
                if self.platform in (WINDOWS, LINUX) and self._is_native(os.path.join(dirpath, filename), filename):
                    executables.append(rel_path)

        game_path: Optional[str] = None
        if html_indexes:
            game_path = min(html_indexes, key=lambda p: (len(p.split(os.sep)), p))

        return {"executables": executables, "game_path": game_path}
