"""Diagnostics telling whether a cave can be launched as-is."""

from enum import Enum
from typing import List


class LaunchProblem(str, Enum):
    NO_EXECUTABLES = "game.install.no_executables_found"
    NO_HTML_INDEX = "game.install.no_html_index_found"


def cave_problems(cave) -> List[LaunchProblem]:
    """List what prevents a cave from launching.

    An empty list means the cave is launchable. Only native and html caves
    can have problems; the other launch types are resolved at launch time.
    """
    launch_type = cave.launch_type or "native"
    if launch_type == "native" and not cave.executables:
        return [LaunchProblem.NO_EXECUTABLES]
    if launch_type == "html" and not cave.game_path:
        return [LaunchProblem.NO_HTML_INDEX]
    return []
