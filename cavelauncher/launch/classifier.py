"""
Launch type classification.

Decides how a manifest action's target must be started. Extension checks run
first and always win over content sniffing, so a script whose first bytes
happen to look like a binary header is still handed to the right launcher.
"""
import os
import re
import logging
from enum import Enum
from typing import Optional

from ..utils.platform import current_platform, LINUX, OSX

logger = logging.getLogger(__name__)


class LaunchType(str, Enum):
    NATIVE = "native"
    HTML = "html"
    SHELL = "shell"
    EXTERNAL = "external"

    @classmethod
    def from_hint(cls, value) -> Optional['LaunchType']:
        """Normalize a launch type hint, including legacy manifest spellings.

        Returns:
            The matching LaunchType, or None for unknown hints
        """
        if value is None:
            return None
        hint = str(value).strip().lower()
        return _LEGACY_TYPE_HINTS.get(hint)


_LEGACY_TYPE_HINTS = {
    "native": LaunchType.NATIVE,
    "exe": LaunchType.NATIVE,
    "executable": LaunchType.NATIVE,
    "html": LaunchType.HTML,
    "web": LaunchType.HTML,
    "shell": LaunchType.SHELL,
    "script": LaunchType.SHELL,
    "external": LaunchType.EXTERNAL,
    "url": LaunchType.EXTERNAL,
    "link": LaunchType.EXTERNAL,
}

NATIVE_EXT_RE = re.compile(r"\.(app|exe|bat|sh)$", re.IGNORECASE)
HTML_EXT_RE = re.compile(r"\.html?$", re.IGNORECASE)
URL_RE = re.compile(r"^https?://", re.IGNORECASE)

ELF_MAGIC = b"\x7fELF"
MACHO_MAGICS = (
    b"\xfe\xed\xfa\xce",  # 32-bit, big endian
    b"\xfe\xed\xfa\xcf",  # 64-bit, big endian
    b"\xce\xfa\xed\xfe",  # 32-bit, little endian
    b"\xcf\xfa\xed\xfe",  # 64-bit, little endian
    b"\xca\xfe\xba\xbe",  # universal binary
)


def sniff_executable(path: str) -> Optional[str]:
    """Look at a file's header to see whether it is a native binary.

    Args:
        path: File to inspect

    Returns:
        'linux' for ELF, 'osx' for Mach-O, None for anything else
        (including missing or unreadable files and directories)
    """
    try:
        with open(path, 'rb') as f:
            header = f.read(4)
    except OSError:
        return None

    if header == ELF_MAGIC:
        return LINUX
    if header in MACHO_MAGICS:
        return OSX
    return None


def classify(install_root: str, action_path: str, platform: str = None) -> LaunchType:
    """Classify how an action path must be launched.

    Args:
        install_root: Directory the cave is installed in
        action_path: Path from the manifest, placeholders already substituted
        platform: Platform to classify for (defaults to the current one)

    Returns:
        The launch type
    """
    if NATIVE_EXT_RE.search(action_path):
        return LaunchType.NATIVE

    if HTML_EXT_RE.search(action_path):
        return LaunchType.HTML

    if URL_RE.search(action_path):
        return LaunchType.EXTERNAL

    platform = platform or current_platform()
    sniffed = sniff_executable(os.path.join(install_root, action_path))
    if sniffed is not None and sniffed == platform:
        return LaunchType.NATIVE

    logger.debug(f"[Classify] {action_path} is not a known binary for {platform}, falling back to shell")
    return LaunchType.SHELL
