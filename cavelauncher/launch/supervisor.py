"""
Launch supervisor.

Drives one launch attempt of a cave through its states:

    CHECKING -> REPAIRING? -> RESOLVING_MANIFEST -> CLASSIFYING
      -> AUTHORIZING? -> PREREQ -> DISPATCHING -> SUPERVISING -> DONE | FAILED

The two bounded rules live here as plain state: `repair_attempts` caps the
configure task at one run per launch, and `started_at` decides whether a
crash is real (within CRASH_GRACE_SECONDS of starting) or a game that ran
and exited badly afterwards.
"""
import time
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

from ..errors import Crash, UnlaunchableInstall
from ..registry.caves_registry import CAVES
from ..utils.explorer import Explorer
from ..utils.paths import app_path
from ..utils.platform import current_platform
from ..utils.spawn import spawn
from .authorizer import SubkeyAuthorizer
from .classifier import LaunchType, classify
from .context import LaunchContext
from .launchers import build_launchers, get_launcher
from .manifest import CANCELLED, ManifestResolver
from .playtime import PlaytimeTracker, now_ms
from .prereqs import PrerequisiteInstaller
from .problems import cave_problems

logger = logging.getLogger(__name__)

CRASH_GRACE_SECONDS = 2.0
MAX_REPAIR_ATTEMPTS = 1

# Game classifications that aren't run, only opened in the file manager
OPEN_CLASSIFICATIONS = {"assets", "game_mod", "physical_game", "soundtrack", "other"}


class LaunchState(str, Enum):
    CHECKING = "checking"
    REPAIRING = "repairing"
    RESOLVING_MANIFEST = "resolving_manifest"
    CLASSIFYING = "classifying"
    AUTHORIZING = "authorizing"
    PREREQ = "prereq"
    DISPATCHING = "dispatching"
    SUPERVISING = "supervising"
    DONE = "done"
    FAILED = "failed"


@dataclass
class LaunchResult:
    """How a launch attempt that did not fail ended"""
    state: LaunchState
    launch_type: Optional[LaunchType] = None
    manifest_action: Optional[str] = None
    cancelled: bool = False
    opened_folder: bool = False
    crash_ignored: bool = False
    elapsed: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'state': self.state.value,
            'launch_type': self.launch_type.value if self.launch_type else None,
            'manifest_action': self.manifest_action,
            'cancelled': self.cancelled,
            'opened_folder': self.opened_folder,
            'crash_ignored': self.crash_ignored,
            'elapsed': self.elapsed,
        }


def action_for_game(game: Optional[Dict[str, Any]], cave) -> str:
    """'open' for things that are browsed rather than run, 'launch' otherwise"""
    classification = (game or {}).get('classification') or "game"
    if classification in OPEN_CLASSIFICATIONS:
        return "open"
    return "launch"


class LaunchSupervisor:
    """Runs the launch pipeline for one cave at a time"""

    def __init__(
        self,
        store,
        games,
        tasks,
        chooser,
        subkey_client=None,
        explorer=None,
        launchers=None,
        resolver: ManifestResolver = None,
        prereqs: PrerequisiteInstaller = None,
        tracker: PlaytimeTracker = None,
        spawner=spawn,
        platform: str = None,
        monotonic=time.monotonic,
        clock=now_ms,
        crash_grace: float = CRASH_GRACE_SECONDS,
    ):
        """
        Args:
            store: Record store (get_entity / save_entity), CavesRegistry in production
            games: Game lookup (`async game(game_id, credentials, cached=None)`)
            tasks: TaskRunner used for the 'configure' repair task
            chooser: Chooser asked to pick among several manifest actions
            subkey_client: Client for subkey exchange (defaults to `games`)
            explorer: Opens install folders and URLs
            launchers: Launcher registry keyed by LaunchType
            monotonic: Clock for the crash grace window
            clock: Wall clock in epoch milliseconds for last_touched
        """
        self.store = store
        self.games = games
        self.tasks = tasks
        self.chooser = chooser
        self.platform = platform or current_platform()
        self.explorer = explorer or Explorer(self.platform)
        self.launchers = launchers or build_launchers(self.explorer, spawner)
        self.resolver = resolver or ManifestResolver(platform=self.platform)
        self.authorizer = SubkeyAuthorizer(subkey_client or games)
        self.prereqs = prereqs or PrerequisiteInstaller(store, spawner, self.platform)
        self.tracker = tracker or PlaytimeTracker(store, clock=clock)
        self.monotonic = monotonic
        self.clock = clock
        self.crash_grace = crash_grace

        self.state: Optional[LaunchState] = None
        self.history: List[LaunchState] = []
        self.repair_attempts = 0
        self.started_at: Optional[float] = None

    def _enter(self, state: LaunchState, log: logging.Logger = None) -> None:
        self.state = state
        self.history.append(state)
        (log or logger).debug(f"[Launch] -> {state.value}")

    def _touch(self, cave_id: str) -> None:
        self.store.save_entity(CAVES, cave_id, {"last_touched": self.clock()})

    async def run(
        self,
        cave,
        credentials=None,
        manifest_action_name: Optional[str] = None,
        out=None,
        log: logging.Logger = None,
    ) -> LaunchResult:
        """Launch a cave and supervise it until the game exits.

        Args:
            cave: Cave record (a fresh copy from the store)
            credentials: Session credentials for game lookup and subkeys
            manifest_action_name: Manifest action to run without asking
            out: Optional async progress callback passed to the launcher
            log: Per-cave logger

        Returns:
            LaunchResult in state DONE (possibly cancelled or folder-opened)

        Raises:
            LaunchError subclasses and launcher errors; the state is FAILED
        """
        log = log or logger
        self.state = None
        self.history = []
        self.repair_attempts = 0
        self.started_at = None

        try:
            return await self._run(cave, credentials, manifest_action_name, out, log)
        except BaseException:
            self._enter(LaunchState.FAILED, log)
            raise

    async def _run(self, cave, credentials, manifest_action_name, out, log) -> LaunchResult:
        game = await self.games.game(cave.game_id, credentials, cached=cave.game)

        if action_for_game(game, cave) == "open":
            self._touch(cave.id)
            folder = app_path(cave)
            log.info(f"[Launch] {game.get('title')} is not runnable, opening {folder}")
            self.explorer.open(folder)
            self._enter(LaunchState.DONE, log)
            return LaunchResult(LaunchState.DONE, opened_folder=True)

        cave = await self._check(cave, game, log)

        log.info(f"[Launch] Launching game {game.get('id', cave.game_id)}: {game.get('title')}")
        install_root = app_path(cave)

        self._enter(LaunchState.RESOLVING_MANIFEST, log)
        action = await self.resolver.resolve(
            install_root,
            manifest_action_name,
            self.chooser,
            title=game.get('title', ''),
            cover=game.get('still_cover_url') or game.get('cover_url'),
            log=log,
        )
        if action is CANCELLED:
            log.info("[Launch] No manifest action selected, nothing to launch")
            self._enter(LaunchState.DONE, log)
            return LaunchResult(LaunchState.DONE, cancelled=True)

        self._enter(LaunchState.CLASSIFYING, log)
        if action is not None:
            launch_type = classify(install_root, action.path, self.platform)
            if action.type_hint and action.type_hint != launch_type:
                log.warning(f"[Launch] Manifest says '{action.type_hint.value}' for {action.path}, "
                            f"launching as '{launch_type.value}'")
        else:
            launch_type = cave.launch_type or LaunchType.NATIVE.value
        log.info(f"[Launch] Launch type: {getattr(launch_type, 'value', launch_type)}")

        ctx = LaunchContext(
            cave=cave,
            game=game,
            app_path=install_root,
            launch_type=launch_type,
            platform=self.platform,
            logger=log,
            manifest_action=action,
        )
        if action is not None:
            ctx.args.extend(action.args)

        if action is not None and action.scope:
            self._enter(LaunchState.AUTHORIZING, log)
            subkey = await self.authorizer.authorize(cave.game_id, action.scope, credentials, log)
            subkey.apply(ctx.env)

        self._enter(LaunchState.PREREQ, log)
        await self.prereqs.ensure_installed(install_root, cave, log)

        self._enter(LaunchState.DISPATCHING, log)
        launcher = get_launcher(self.launchers, launch_type)
        ctx.launch_type = launcher.launch_type

        self._enter(LaunchState.SUPERVISING, log)
        return await self._supervise(launcher, ctx, out, log)

    async def _check(self, cave, game, log):
        """Make sure the cave is launchable, repairing it once if needed"""
        self._enter(LaunchState.CHECKING, log)
        problems = cave_problems(cave)
        if not problems:
            return cave

        self._enter(LaunchState.REPAIRING, log)
        codes = [p.value for p in problems]
        if self.repair_attempts >= MAX_REPAIR_ATTEMPTS:
            raise UnlaunchableInstall(codes)
        self.repair_attempts += 1

        log.info(f"[Launch] Reconfiguring because of problem with cave: {', '.join(codes)}")
        await self.tasks.run(
            "configure",
            game_id=cave.game_id,
            game=game,
            cave=cave,
            upload=cave.upload,
        )

        refreshed = self.store.get_entity(CAVES, cave.id)
        if refreshed is None:
            raise UnlaunchableInstall(codes)

        problems = cave_problems(refreshed)
        if problems:
            raise UnlaunchableInstall([p.value for p in problems])
        log.info("[Launch] Cave repaired")
        return refreshed

    async def _supervise(self, launcher, ctx, out, log) -> LaunchResult:
        cave = ctx.cave
        action_name = ctx.manifest_action.name if ctx.manifest_action is not None else None

        handle = self.tracker.start(cave)
        self.started_at = self.monotonic()
        self._touch(cave.id)

        crash_ignored = False
        try:
            await launcher.launch(out, ctx)
        except Crash as e:
            elapsed = self.monotonic() - self.started_at
            log.error(f"[Launch] Error while launching {cave.id}: {e}")
            if elapsed <= self.crash_grace:
                raise
            # Ran long enough to have started fine, then exited abnormally
            log.info(f"[Launch] Game was running for {elapsed:.1f} seconds, ignoring: {e}")
            crash_ignored = True
        except Exception as e:
            log.error(f"[Launch] Error while launching {cave.id}: {e}", exc_info=True)
            raise
        finally:
            await handle.stop()

        elapsed = self.monotonic() - self.started_at
        self._enter(LaunchState.DONE, log)
        return LaunchResult(
            LaunchState.DONE,
            launch_type=ctx.launch_type,
            manifest_action=action_name,
            crash_ignored=crash_ignored,
            elapsed=elapsed,
        )
