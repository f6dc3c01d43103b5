"""Open folders, files and URLs with the desktop's default handler."""

import os
import logging
import subprocess

from .platform import current_platform, WINDOWS, OSX

logger = logging.getLogger(__name__)


class Explorer:
    """Opens paths in the file manager and URLs in the browser"""

    def __init__(self, platform: str = None):
        self.platform = platform or current_platform()

    def _opener(self):
        if self.platform == WINDOWS:
            return ['explorer']
        if self.platform == OSX:
            return ['open']
        return ['xdg-open']

    def open(self, target: str) -> None:
        """Open a folder, file or URL without waiting for the handler to exit"""
        logger.info(f"[Explorer] Opening: {target[:120]}")
        if self.platform == WINDOWS and not target.startswith(('http://', 'https://', 'file://')):
            target = os.path.normpath(target)
        subprocess.Popen(
            self._opener() + [target],
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
        )
