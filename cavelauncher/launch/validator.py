"""
Manifest shape validation.

Structural problems (things the launcher cannot work around) raise
ManifestValidationError; unknown keys are only warned about so that newer
manifests keep working with older launchers.
"""
import logging
from typing import Any, Dict, List

from ..errors import ManifestValidationError

logger = logging.getLogger(__name__)

MANIFEST_KEYS = {"actions", "prereqs"}
ACTION_KEYS = {"name", "path", "icon", "args", "scope", "type", "locales", "platform"}


def validate_manifest(manifest: Dict[str, Any], log: logging.Logger = None) -> None:
    """Check a parsed manifest.

    Args:
        manifest: Result of parsing the manifest TOML
        log: Logger for warnings (the per-cave logger during a launch)

    Raises:
        ManifestValidationError: listing every structural problem found
    """
    log = log or logger
    problems: List[str] = []

    for key in manifest:
        if key not in MANIFEST_KEYS:
            log.warning(f"[Manifest] Unknown top-level field '{key}'")

    actions = manifest.get("actions")
    if not isinstance(actions, list) or not actions:
        raise ManifestValidationError(["manifest must declare at least one [[actions]] entry"])

    seen_names = set()
    for i, action in enumerate(actions):
        if not isinstance(action, dict):
            problems.append(f"action {i} is not a table")
            continue

        for key in action:
            if key not in ACTION_KEYS:
                log.warning(f"[Manifest] Unknown field '{key}' in action {i}")

        name = action.get("name")
        if not isinstance(name, str) or not name.strip():
            problems.append(f"action {i} is missing a name")
        elif name in seen_names:
            problems.append(f"action name '{name}' is used more than once")
        else:
            seen_names.add(name)

        path = action.get("path")
        if not isinstance(path, str) or not path.strip():
            problems.append(f"action {i} is missing a path")

        args = action.get("args")
        if args is not None and (not isinstance(args, list) or not all(isinstance(a, str) for a in args)):
            problems.append(f"action {i}: args must be a list of strings")

        for key in ("icon", "scope", "type"):
            value = action.get(key)
            if value is not None and not isinstance(value, str):
                problems.append(f"action {i}: {key} must be a string")

    if problems:
        raise ManifestValidationError(problems)
