"""
One-time platform prerequisite installer.

Some Windows builds ship a redistributable installer (UE4PrereqSetup.exe) that
has to run once before the game starts. Completion is recorded on the cave,
so it never runs twice for the same install. Best effort: a failing installer
is logged and the launch carries on.
"""
import os
import re
import logging

from ..registry.caves_registry import CAVES
from ..utils.platform import current_platform, WINDOWS
from ..utils.spawn import spawn

logger = logging.getLogger(__name__)

PREREQ_RE = re.compile(r"UE4PrereqSetup(_x64)?\.exe$", re.IGNORECASE)
PREREQ_ARGS = ["/quiet", "/norestart"]
PREREQ_PLATFORMS = {WINDOWS}


class PrerequisiteInstaller:
    """Runs the prerequisite installer found among a cave's executables"""

    def __init__(self, store, spawner=spawn, platform: str = None):
        self.store = store
        self.spawner = spawner
        self.platform = platform or current_platform()

    def find_installer(self, executables) -> str:
        for exe in executables or []:
            if PREREQ_RE.search(exe):
                return exe
        return None

    async def ensure_installed(self, install_root: str, cave, log: logging.Logger = None) -> None:
        """Run the prerequisite installer if this cave still needs it."""
        log = log or logger
        if self.platform not in PREREQ_PLATFORMS:
            return

        # The flag is persisted, so read it from the store rather than the caller's copy
        current = self.store.get_entity(CAVES, cave.id) or cave
        if current.installed_prereq:
            return

        log.info("[Prereq] Looking for prerequisite setup")
        try:
            installer = self.find_installer(current.executables)
            if not installer:
                return

            log.info(f"[Prereq] Launching installer {installer}")
            code = await self.spawner(
                os.path.join(install_root, installer),
                PREREQ_ARGS,
                on_token=lambda tok: log.info(f"[prereq out] {tok}"),
                on_err_token=lambda tok: log.info(f"[prereq err] {tok}"),
            )
            if code == 0:
                log.info("[Prereq] Successfully installed prerequisites")
                self.store.save_entity(CAVES, cave.id, {"installed_prereq": True})
            else:
                log.warning(f"[Prereq] Couldn't install prerequisites (exit code {code})")
        except Exception as e:
            log.error(f"[Prereq] Error while launching prerequisites for {cave.id}: {e}", exc_info=True)
