"""Shell launcher: hands a script to the platform shell."""

import os

from ...errors import Crash, LauncherError
from ...utils.platform import WINDOWS
from ...utils.spawn import spawn
from ..classifier import LaunchType
from .base import Launcher, emit


class ShellLauncher(Launcher):
    """Runs `sh <script>` (or `cmd /c <script>` on Windows)"""

    def __init__(self, spawner=spawn):
        self.spawner = spawner

    @property
    def launch_type(self) -> LaunchType:
        return LaunchType.SHELL

    async def launch(self, out, ctx) -> None:
        log = ctx.logger
        if ctx.manifest_action is None:
            raise LauncherError("shell launch requires a manifest action")

        script = os.path.join(ctx.app_path, ctx.manifest_action.path)
        if not os.path.isfile(script):
            raise LauncherError(f"script not found: {script}")

        if ctx.platform == WINDOWS:
            command, args = 'cmd', ['/c', script] + list(ctx.args)
        else:
            command, args = 'sh', [script] + list(ctx.args)

        env = dict(os.environ)
        env.update(ctx.env)

        log.info(f"[Shell] Executing: {command} {' '.join(args)}")
        await emit(out, {'type': 'launch.started', 'launch_type': self.launch_type.value, 'target': script})
        try:
            code = await self.spawner(
                command,
                args,
                env=env,
                cwd=ctx.app_path,
                on_token=lambda tok: log.info(f"[shell out] {tok}"),
                on_err_token=lambda tok: log.info(f"[shell err] {tok}"),
            )
        except OSError as e:
            raise LauncherError(f"could not run {script}: {e}") from e

        await emit(out, {'type': 'launch.exited', 'exit_code': code})
        if code != 0:
            raise Crash(f"script exited with code {code}", exit_code=code)
