"""External launcher: the action is a URL, opened in the user's browser."""

from ...errors import LauncherError
from ..classifier import LaunchType, URL_RE
from .base import Launcher, emit


class ExternalLauncher(Launcher):

    def __init__(self, explorer):
        self.explorer = explorer

    @property
    def launch_type(self) -> LaunchType:
        return LaunchType.EXTERNAL

    async def launch(self, out, ctx) -> None:
        url = ctx.manifest_action.path if ctx.manifest_action is not None else None
        if not url or not URL_RE.search(url):
            raise LauncherError(f"not an http(s) URL: {url!r}")

        ctx.logger.info(f"[External] Opening {url}")
        self.explorer.open(url)
        await emit(out, {'type': 'launch.started', 'launch_type': self.launch_type.value, 'target': url})
