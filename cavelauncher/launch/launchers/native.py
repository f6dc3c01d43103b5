"""Native launcher: runs an executable from the install folder and waits for it."""

import os
import stat
import logging
from typing import List, Optional, Tuple

from ...errors import Crash, LauncherError
from ...utils.platform import WINDOWS, OSX
from ...utils.spawn import spawn
from ..classifier import LaunchType
from ..prereqs import PREREQ_RE
from .base import Launcher, emit

logger = logging.getLogger(__name__)


def pick_executable(app_path: str, executables: List[str]) -> Optional[str]:
    """Pick the most likely game executable.

    Shallowest path first, then the biggest file. Prerequisite installers
    are never picked.
    """
    candidates = [exe for exe in executables or [] if not PREREQ_RE.search(exe)]
    if not candidates:
        return None

    def rank(exe: str) -> Tuple[int, int]:
        depth = len(os.path.normpath(exe).split(os.sep))
        try:
            size = os.path.getsize(os.path.join(app_path, exe))
        except OSError:
            size = 0
        return depth, -size

    return min(candidates, key=rank)


def ensure_executable(path: str) -> None:
    """Set the executable bits on a file (POSIX only)"""
    try:
        mode = os.stat(path).st_mode
        if not mode & stat.S_IXUSR:
            os.chmod(path, mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    except OSError as e:
        logger.warning(f"[Native] Could not make {path} executable: {e}")


class NativeLauncher(Launcher):
    """Launches native executables, .bat/.sh files and macOS app bundles"""

    def __init__(self, spawner=spawn):
        self.spawner = spawner

    @property
    def launch_type(self) -> LaunchType:
        return LaunchType.NATIVE

    def _target(self, ctx) -> str:
        if ctx.manifest_action is not None:
            return os.path.join(ctx.app_path, ctx.manifest_action.path)
        exe = pick_executable(ctx.app_path, ctx.cave.executables)
        if not exe:
            raise LauncherError("no executable to launch")
        return os.path.join(ctx.app_path, exe)

    def _command(self, ctx, target: str) -> Tuple[str, List[str]]:
        lower = target.lower()
        if ctx.platform == OSX and lower.endswith('.app'):
            return 'open', ['-W', '-a', target, '--args'] + list(ctx.args)
        if ctx.platform == WINDOWS and lower.endswith('.bat'):
            return 'cmd', ['/c', target] + list(ctx.args)
        if ctx.platform != WINDOWS and lower.endswith('.sh'):
            return 'sh', [target] + list(ctx.args)
        return target, list(ctx.args)

    async def launch(self, out, ctx) -> None:
        log = ctx.logger
        target = self._target(ctx)
        if not os.path.exists(target):
            raise LauncherError(f"executable not found: {target}")

        if ctx.platform != WINDOWS and os.path.isfile(target):
            ensure_executable(target)

        command, args = self._command(ctx, target)
        env = dict(os.environ)
        env.update(ctx.env)

        log.info(f"[Native] Executing: {command} {' '.join(args)}")
        await emit(out, {'type': 'launch.started', 'launch_type': self.launch_type.value, 'target': target})
        try:
            code = await self.spawner(
                command,
                args,
                env=env,
                cwd=os.path.dirname(target) or ctx.app_path,
                on_token=lambda tok: log.info(f"[game out] {tok}"),
                on_err_token=lambda tok: log.info(f"[game err] {tok}"),
            )
        except OSError as e:
            raise LauncherError(f"could not start {target}: {e}") from e

        await emit(out, {'type': 'launch.exited', 'exit_code': code})
        log.info(f"[Native] Process exited with code {code}")
        if code != 0:
            raise Crash(f"process exited with code {code}", exit_code=code)
