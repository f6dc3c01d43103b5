"""Per-attempt launch context handed to launchers."""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .classifier import LaunchType


@dataclass
class LaunchContext:
    """Everything a launcher needs for one launch attempt. Never persisted."""
    cave: Any
    game: Dict[str, Any]
    app_path: str
    launch_type: LaunchType
    platform: str
    logger: logging.Logger
    manifest_action: Optional[Any] = None
    env: Dict[str, str] = field(default_factory=dict)
    args: List[str] = field(default_factory=list)
