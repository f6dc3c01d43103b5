"""
Launch error taxonomy.

Everything the launch pipeline raises derives from LaunchError, so the
presentation wrapper (LaunchService) can catch the whole family in one place.
"""
from typing import List, Optional


class LaunchError(Exception):
    """Base class for every failure raised by the launch pipeline"""


class ManifestParseError(LaunchError):
    """The manifest file exists but is not valid TOML"""

    def __init__(self, path: str, cause: Exception):
        super().__init__(f"could not parse manifest {path}: {cause}")
        self.path = path
        self.cause = cause


class ManifestValidationError(LaunchError):
    """The manifest parsed fine but its shape is wrong (e.g. an action without a name)"""

    def __init__(self, problems: List[str]):
        super().__init__("invalid manifest: " + "; ".join(problems))
        self.problems = problems


class UnlaunchableInstall(LaunchError):
    """The cave still has launch problems after its single repair attempt"""

    def __init__(self, reasons: List[str]):
        super().__init__(f"game.install.could_not_launch ({', '.join(reasons)})")
        self.reasons = reasons


class UnsupportedLaunchType(LaunchError):
    """No launcher is registered for the computed launch type"""

    def __init__(self, launch_type):
        super().__init__(f"Unsupported launch type '{launch_type}'")
        self.launch_type = launch_type


class AuthorizationError(LaunchError):
    """Subkey exchange failed; the launch is aborted"""


class LauncherError(LaunchError):
    """A launcher failed for a reason other than the game crashing (spawn failure, missing target)"""


class Crash(LaunchError):
    """The launched process terminated abnormally"""

    def __init__(self, message: str, exit_code: Optional[int] = None):
        super().__init__(message)
        self.exit_code = exit_code
