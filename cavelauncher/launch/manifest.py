"""
Manifest discovery, parsing and action resolution.

A manifest is an optional `.launch.toml` at the top level of an install that
lists one or more launchable actions:

    [[actions]]
    name = "play"
    path = "Game{{EXT}}"
    args = ["--fullscreen"]
    scope = "wallet"
    icon = "star"

resolve() picks the action to run: the only one, the one named by the
caller, or the one the user picks from a chooser.
"""
import os
import asyncio
import logging
import tomllib
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, Optional, Tuple, Union

from ..errors import ManifestParseError
from ..utils.paths import manifest_path
from ..utils.platform import platform_ext
from .classifier import LaunchType
from .collaborators import Chooser, ChooserOption
from .validator import validate_manifest

logger = logging.getLogger(__name__)

EXT_PLACEHOLDER = "{{EXT}}"

DEFAULT_ICONS = {
    "play": "play",
    "editor": "pencil",
    "manual": "book",
    "setup": "cog",
    "scripts": "terminal",
    "web": "earth",
    "server": "tower",
}


class _Cancelled:
    """Marker returned when action selection was aborted on purpose"""

    def __repr__(self):
        return "CANCELLED"

    def __bool__(self):
        return False


CANCELLED = _Cancelled()


@dataclass(frozen=True)
class ManifestAction:
    """One launchable action declared in a manifest"""
    name: str
    path: str
    icon: Optional[str] = None
    args: Tuple[str, ...] = ()
    scope: Optional[str] = None
    type_hint: Optional[LaunchType] = None  # Legacy 'type' field, advisory only

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ManifestAction':
        return cls(
            name=data["name"],
            path=data["path"],
            icon=data.get("icon"),
            args=tuple(data.get("args") or ()),
            scope=data.get("scope") or None,
            type_hint=LaunchType.from_hint(data.get("type")),
        )

    def with_platform_ext(self, platform: str = None) -> 'ManifestAction':
        """Copy of this action with the {{EXT}} placeholder substituted once"""
        return replace(self, path=self.path.replace(EXT_PLACEHOLDER, platform_ext(platform), 1))

    @property
    def default_icon(self) -> str:
        return self.icon or DEFAULT_ICONS.get(self.name, "star")


@dataclass(frozen=True)
class Manifest:
    """A parsed and validated manifest"""
    actions: Tuple[ManifestAction, ...]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Manifest':
        return cls(actions=tuple(ManifestAction.from_dict(a) for a in data["actions"]))

    def find(self, name: str) -> Optional[ManifestAction]:
        for action in self.actions:
            if action.name == name:
                return action
        return None


def _read_text(path: str) -> str:
    with open(path, 'r', encoding='utf-8') as f:
        return f.read()


class ManifestResolver:
    """Finds, parses and validates manifests, then picks the action to launch"""

    def __init__(self, validator: Callable = validate_manifest, platform: str = None):
        self.validator = validator
        self.platform = platform

    async def load(self, install_root: str, log: logging.Logger = None) -> Optional[Manifest]:
        """Load the manifest of an install.

        Returns:
            The manifest, or None if the install has none

        Raises:
            ManifestParseError: the file is not valid TOML
            ManifestValidationError: the file has the wrong shape
        """
        log = log or logger
        path = manifest_path(install_root)
        log.info(f"[Manifest] Looking for manifest @ \"{path}\"")

        loop = asyncio.get_running_loop()
        if not await loop.run_in_executor(None, os.path.isfile, path):
            log.info(f"[Manifest] No manifest found (no '{os.path.basename(path)}' file in top-level directory). "
                     f"Proceeding with heuristics.")
            return None

        log.info("[Manifest] Found manifest, parsing")
        try:
            contents = await loop.run_in_executor(None, _read_text, path)
            data = tomllib.loads(contents)
        except (tomllib.TOMLDecodeError, OSError, UnicodeDecodeError) as e:
            log.error(f"[Manifest] Error reading manifest: {e}")
            raise ManifestParseError(path, e) from e

        self.validator(data, log)
        manifest = Manifest.from_dict(data)
        log.info(f"[Manifest] Declares {len(manifest.actions)} action(s): "
                 f"{', '.join(a.name for a in manifest.actions)}")
        return manifest

    async def resolve(
        self,
        install_root: str,
        explicit_action_name: Optional[str],
        chooser: Chooser,
        title: str = "",
        cover: Optional[str] = None,
        log: logging.Logger = None,
    ) -> Union[ManifestAction, None, _Cancelled]:
        """Pick the manifest action to launch.

        Args:
            install_root: Directory the cave is installed in
            explicit_action_name: Action requested by the caller, if any
            chooser: Asked to pick when several actions exist and none was requested
            title: Game title shown by the chooser
            cover: Cover image URL shown by the chooser
            log: Per-cave logger

        Returns:
            The selected action with {{EXT}} substituted, None when there is no
            manifest, or CANCELLED when the selection was aborted
        """
        log = log or logger
        manifest = await self.load(install_root, log)
        if manifest is None:
            return None

        if len(manifest.actions) == 1:
            return manifest.actions[0].with_platform_ext(self.platform)

        if explicit_action_name:
            action = manifest.find(explicit_action_name)
            if action is None:
                log.warning(f"[Manifest] Picked invalid manifest action: {explicit_action_name}, "
                            f"had: {', '.join(a.name for a in manifest.actions)}")
                return CANCELLED
            return action.with_platform_ext(self.platform)

        options = [
            ChooserOption(
                value=action.name,
                label=action.name,
                icon=action.default_icon,
                class_name=f"action-{action.name}",
            )
            for action in manifest.actions
        ]
        choice = await chooser.choose(title, cover, options)
        if choice is None:
            log.info("[Manifest] Action selection cancelled by user")
            return CANCELLED

        action = manifest.find(choice)
        if action is None:
            log.warning(f"[Manifest] Chooser returned unknown action '{choice}', aborting")
            return CANCELLED
        return action.with_platform_ext(self.platform)
