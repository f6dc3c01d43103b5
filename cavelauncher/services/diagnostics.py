"""Crash reporter that writes a diagnostics block to the per-cave log."""

import os
import sys
import platform
import logging

from ..launch.collaborators import CrashReporter
from ..utils.paths import app_path

logger = logging.getLogger(__name__)


class DiagnosticsReporter(CrashReporter):
    """Appends system and install details to the launch log of a failed launch"""

    async def report(self, cave, error: BaseException, game_logger) -> None:
        log = game_logger or logger
        root = app_path(cave)
        lines = [
            "=" * 60,
            "Diagnostics",
            f"platform: {platform.platform()}",
            f"python: {sys.version.split()[0]}",
            f"cave: {cave.id} (game {cave.game_id}, upload {cave.upload_id})",
            f"install folder: {root} (exists: {os.path.isdir(root)})",
            f"launch type: {cave.launch_type}",
            f"executables: {', '.join(cave.executables) or '(none)'}",
            f"html index: {cave.game_path or '(none)'}",
            f"error: {type(error).__name__}: {error}",
        ]
        reasons = getattr(error, 'reasons', None)
        if reasons:
            lines.append(f"reasons: {', '.join(reasons)}")
        lines.append("=" * 60)
        for line in lines:
            log.info(line)
