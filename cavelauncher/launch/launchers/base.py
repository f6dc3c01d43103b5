"""
Base Launcher class defining the interface for all launch variants.

Every launch type (native, html, shell, external) implements launch(). A
launcher returns normally when the game finished fine, raises Crash when the
launched process terminated abnormally, and raises LauncherError (or lets
anything else propagate) for every other failure.
"""
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Dict, Optional
import logging

from ..classifier import LaunchType
from ..context import LaunchContext


logger = logging.getLogger(__name__)

OutputSink = Optional[Callable[[Dict[str, Any]], Awaitable[None]]]


async def emit(out: OutputSink, event: Dict[str, Any]) -> None:
    """Send a progress event to the output sink, if there is one"""
    if out is None:
        return
    try:
        await out(event)
    except Exception as e:
        logger.warning(f"[Launch] Output sink rejected event {event.get('type')}: {e}")


class Launcher(ABC):
    """Abstract base class for launch variants."""

    @property
    @abstractmethod
    def launch_type(self) -> LaunchType:
        """Return the launch type this launcher handles"""
        pass

    @abstractmethod
    async def launch(self, out: OutputSink, ctx: LaunchContext) -> None:
        """
        Start the game described by ctx and wait until it is done.

        Args:
            out: Optional async callback receiving progress events.
            ctx: Launch context for this attempt.

        Raises:
            Crash: the game process terminated abnormally.
            LauncherError: the game could not be started.
        """
        pass
