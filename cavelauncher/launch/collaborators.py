"""
Interfaces of the collaborators the launch pipeline talks to.

The pipeline never shows UI or runs tasks itself; the application (or the CLI)
passes implementations of these in. The record store, game lookup and subkey
exchange are duck-typed against CavesRegistry and ApiClient.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional


@dataclass
class ChooserOption:
    """One entry offered to the user when several manifest actions exist"""
    value: str
    label: str
    icon: str = "star"
    class_name: str = ""


class Chooser(ABC):
    """Presents a list of options and waits for the user to pick one"""

    @abstractmethod
    async def choose(self, title: str, cover: Optional[str], options: List[ChooserOption]) -> Optional[str]:
        """
        Ask the user to pick an option. A cancel choice is always offered.

        Returns:
            The chosen option's value, or None if the user cancelled.
        """
        pass


class Modals(ABC):
    """Shows blocking messages to the user"""

    @abstractmethod
    async def show_error(self, title: str, message: str, detail: str, buttons: List[Dict[str, Any]]) -> Optional[str]:
        """
        Show an error with a set of buttons.

        Returns:
            The 'action' of the button pressed, or None when dismissed.
        """
        pass


class TaskRunner(ABC):
    """Runs named background tasks (e.g. 'configure') to completion"""

    @abstractmethod
    async def run(self, name: str, **kwargs) -> Dict[str, Any]:
        pass


class CrashReporter(ABC):
    """Receives launches that failed for good"""

    @abstractmethod
    async def report(self, cave, error: BaseException, game_logger) -> None:
        pass
