"""Platform names as used in manifests and install records."""

import sys

WINDOWS = "windows"
OSX = "osx"
LINUX = "linux"


def current_platform() -> str:
    """Map sys.platform onto 'windows', 'osx' or 'linux' (anything else is returned as-is)"""
    if sys.platform.startswith("win"):
        return WINDOWS
    if sys.platform == "darwin":
        return OSX
    if sys.platform.startswith("linux"):
        return LINUX
    return sys.platform


def platform_ext(platform: str = None) -> str:
    """Native executable suffix substituted for {{EXT}} in manifest paths"""
    platform = platform or current_platform()
    if platform == OSX:
        return ".app"
    if platform == WINDOWS:
        return ".exe"
    return ""
