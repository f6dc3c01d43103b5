# Launchers package
# One launcher per launch type; the set is closed and keyed by LaunchType.
from typing import Dict

from ...errors import UnsupportedLaunchType
from ...utils.explorer import Explorer
from ...utils.spawn import spawn
from ..classifier import LaunchType
from .base import Launcher, OutputSink, emit
from .native import NativeLauncher
from .html import HtmlLauncher
from .shell import ShellLauncher
from .external import ExternalLauncher


def build_launchers(explorer=None, spawner=spawn) -> Dict[LaunchType, Launcher]:
    """Create the launcher registry"""
    explorer = explorer or Explorer()
    return {
        LaunchType.NATIVE: NativeLauncher(spawner),
        LaunchType.HTML: HtmlLauncher(explorer),
        LaunchType.SHELL: ShellLauncher(spawner),
        LaunchType.EXTERNAL: ExternalLauncher(explorer),
    }


def get_launcher(launchers: Dict[LaunchType, Launcher], launch_type) -> Launcher:
    """Look up the launcher for a launch type.

    Raises:
        UnsupportedLaunchType: for values outside the four known types
    """
    try:
        key = LaunchType(launch_type)
    except ValueError:
        raise UnsupportedLaunchType(launch_type) from None
    launcher = launchers.get(key)
    if launcher is None:
        raise UnsupportedLaunchType(launch_type)
    return launcher
