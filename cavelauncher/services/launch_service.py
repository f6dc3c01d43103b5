"""
LaunchService - Entry point the application calls to launch a cave.

Responsibilities:
- Open a per-cave log for the attempt
- Run the launch supervisor
- On failure: log it, hand it to the crash reporter, show an error dialog
  offering to report the problem, and return an error result
"""
import os
import logging
from typing import Any, Dict, Optional

from ..launch.supervisor import LaunchSupervisor
from ..registry.caves_registry import CAVES
from ..utils.cave_log import open_cave_logger, close_cave_logger
from ..utils.paths import cave_log_path
from .diagnostics import DiagnosticsReporter

logger = logging.getLogger(__name__)

ERROR_BUTTONS = [
    {'label': 'launch.report_problem', 'icon': 'upload-to-cloud', 'action': 'report'},
    {'label': 'launch.probe', 'icon': 'bug', 'action': 'probe', 'class_name': 'secondary'},
    {'label': 'prompt.cancel', 'action': 'cancel'},
]


class LaunchService:
    """Service for launching caves."""

    def __init__(
        self,
        store,
        api,
        tasks,
        chooser,
        modals,
        crash_reporter=None,
        explorer=None,
        credentials=None,
        log_dir: Optional[str] = None,
        log_console: bool = True,
        supervisor_factory=None,
    ):
        """Initialize LaunchService with its collaborators.

        Args:
            store: CavesRegistry (or anything with get_entity / save_entity)
            api: ApiClient used for game lookup and subkeys
            tasks: TaskRunner providing the 'configure' task
            chooser: Chooser for manifest actions
            modals: Modals used for the error dialog
            crash_reporter: CrashReporter called on failed launches
            explorer: Explorer for folders and URLs
            credentials: Session credentials
            log_dir: Directory for per-cave logs (defaults to the data dir)
            log_console: Mirror per-cave logs to stdout
            supervisor_factory: Callable returning a LaunchSupervisor (for tests)
        """
        self.store = store
        self.api = api
        self.tasks = tasks
        self.chooser = chooser
        self.modals = modals
        self.crash_reporter = crash_reporter or DiagnosticsReporter()
        self.explorer = explorer
        self.credentials = credentials
        self.log_dir = log_dir
        self.log_console = log_console
        self.supervisor_factory = supervisor_factory or self._default_supervisor

    def _default_supervisor(self) -> LaunchSupervisor:
        return LaunchSupervisor(
            store=self.store,
            games=self.api,
            tasks=self.tasks,
            chooser=self.chooser,
            explorer=self.explorer,
        )

    def _log_path(self, cave_id: str) -> str:
        if self.log_dir:
            return os.path.join(self.log_dir, f"{cave_id}.log")
        return cave_log_path(cave_id)

    async def launch(self, cave_id: str, manifest_action_name: Optional[str] = None, out=None) -> Dict[str, Any]:
        """Launch a cave.

        Args:
            cave_id: Cave to launch
            manifest_action_name: Manifest action to run without prompting
            out: Optional async progress callback

        Returns:
            Dict with 'success' and either the launch result fields or
            'error', 'error_kind' and 'reason'
        """
        cave = self.store.get_entity(CAVES, cave_id)
        if cave is None:
            logger.error(f"[Launch] Unknown cave {cave_id}")
            return {'success': False, 'error': 'errors.caveNotFound'}

        game_logger = open_cave_logger(cave_id, self._log_path(cave_id), console=self.log_console)
        try:
            supervisor = self.supervisor_factory()
            result = await supervisor.run(
                cave,
                credentials=self.credentials,
                manifest_action_name=manifest_action_name,
                out=out,
                log=game_logger,
            )
            return {'success': True, **result.to_dict()}
        except Exception as e:
            game_logger.error(f"[Launch] Crashed with {e}", exc_info=True)
            try:
                await self.crash_reporter.report(cave, e, game_logger)
            except Exception as report_error:
                logger.error(f"[Launch] Crash reporter failed: {report_error}")
            choice = await self._show_error(cave, e)
            return {
                'success': False,
                'error': str(e),
                'error_kind': type(e).__name__,
                'reason': list(getattr(e, 'reasons', []) or []),
                'user_choice': choice,
            }
        finally:
            close_cave_logger(game_logger)

    async def _show_error(self, cave, error: Exception) -> Optional[str]:
        title = (cave.game or {}).get('title')
        if not title:
            try:
                game = await self.api.game(cave.game_id, self.credentials, cached=cave.game)
                title = game.get('title')
            except Exception as e:
                logger.warning(f"[Launch] Could not look up game {cave.game_id}: {e}")
        title = title or f"game {cave.game_id}"

        try:
            return await self.modals.show_error(
                title="",
                message=f"Could not launch {title}",
                detail=str(error),
                buttons=ERROR_BUTTONS,
            )
        except Exception as e:
            logger.error(f"[Launch] Could not show error dialog: {e}")
            return None
