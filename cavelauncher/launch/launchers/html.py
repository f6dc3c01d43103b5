"""HTML launcher: opens a game's HTML entry point in the default browser."""

import os
from pathlib import Path

from ...errors import LauncherError
from ..classifier import LaunchType
from .base import Launcher, emit


class HtmlLauncher(Launcher):
    """Opens index.html (or the manifest's HTML path) as a file:// URI"""

    def __init__(self, explorer):
        self.explorer = explorer

    @property
    def launch_type(self) -> LaunchType:
        return LaunchType.HTML

    async def launch(self, out, ctx) -> None:
        if ctx.manifest_action is not None:
            relative = ctx.manifest_action.path
        else:
            relative = ctx.cave.game_path
        if not relative:
            raise LauncherError("no HTML entry point to open")

        index = os.path.join(ctx.app_path, relative)
        if not os.path.isfile(index):
            raise LauncherError(f"HTML entry point not found: {index}")

        uri = Path(index).resolve().as_uri()
        ctx.logger.info(f"[Html] Opening {uri}")
        self.explorer.open(uri)
        await emit(out, {'type': 'launch.started', 'launch_type': self.launch_type.value, 'target': uri})
