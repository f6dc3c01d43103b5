"""cavelauncher file path constants and utilities."""

import os


# Data directory (overridable for tests and portable installs)
DATA_DIR = os.environ.get(
    "CAVELAUNCHER_DATA_DIR",
    os.path.expanduser("~/.local/share/cavelauncher"),
)

# Data files
CAVES_REGISTRY_PATH = os.path.join(DATA_DIR, "caves.json")
SETTINGS_PATH = os.path.join(DATA_DIR, "settings.json")
CAVE_LOGS_DIR = os.path.join(DATA_DIR, "logs", "caves")

# Default install location when a cave does not record one
DEFAULT_INSTALL_LOCATION = os.path.expanduser("~/Games")

# Manifest file looked up at the top level of every install
MANIFEST_FILENAME = ".launch.toml"


def app_path(cave) -> str:
    """Get the install root of a cave.

    Args:
        cave: Cave record

    Returns:
        Full path to the directory the cave was installed into
    """
    location = cave.install_location or DEFAULT_INSTALL_LOCATION
    folder = cave.install_folder or cave.id
    return os.path.join(os.path.expanduser(location), folder)


def manifest_path(install_root: str) -> str:
    """Path where the manifest of an install is expected."""
    return os.path.join(install_root, MANIFEST_FILENAME)


def cave_log_path(cave_id: str) -> str:
    """Per-cave launch log file."""
    return os.path.join(CAVE_LOGS_DIR, f"{cave_id}.log")


def ensure_data_dir() -> None:
    """Ensure the cavelauncher data directory exists."""
    os.makedirs(DATA_DIR, exist_ok=True)
