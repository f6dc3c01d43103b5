"""Terminal implementations of the chooser and modal collaborators, used by the CLI."""

import asyncio
from typing import Any, Dict, List, Optional

from .launch.collaborators import Chooser, ChooserOption, Modals


async def _ask(prompt: str) -> str:
    loop = asyncio.get_running_loop()
    try:
        return await loop.run_in_executor(None, input, prompt)
    except EOFError:
        return ""


class ConsoleChooser(Chooser):
    """Numbered prompt on stdin; an empty answer cancels"""

    async def choose(self, title: str, cover: Optional[str], options: List[ChooserOption]) -> Optional[str]:
        print(f"\n{title or 'Choose an action'}")
        for i, option in enumerate(options, start=1):
            print(f"  {i}) {option.label}")
        print("  (empty) cancel")

        while True:
            answer = (await _ask("> ")).strip()
            if not answer:
                return None
            if answer.isdigit() and 1 <= int(answer) <= len(options):
                return options[int(answer) - 1].value
            for option in options:
                if answer == option.value:
                    return option.value
            print(f"Please enter a number between 1 and {len(options)}")


class ConsoleModals(Modals):
    """Prints errors to the terminal and asks which button to press"""

    def __init__(self, interactive: bool = True):
        self.interactive = interactive

    async def show_error(self, title: str, message: str, detail: str, buttons: List[Dict[str, Any]]) -> Optional[str]:
        print(f"\n{title + ': ' if title else ''}{message}")
        if detail:
            print(f"  {detail}")
        if not self.interactive:
            return None
        actions = [b['action'] for b in buttons]
        answer = (await _ask(f"[{'/'.join(actions)}] > ")).strip()
        return answer if answer in actions else None
