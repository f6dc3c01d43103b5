# Launch package
# The launch pipeline: classification, manifest resolution, subkeys,
# prerequisites, playtime and the supervisor that ties them together.

from .classifier import LaunchType, classify, sniff_executable
from .manifest import CANCELLED, Manifest, ManifestAction, ManifestResolver
from .authorizer import Subkey, SubkeyAuthorizer, API_KEY_ENV_VAR, API_KEY_EXPIRES_ENV_VAR
from .prereqs import PrerequisiteInstaller
from .playtime import PlaytimeTracker, PlaytimeHandle
from .problems import LaunchProblem, cave_problems
from .context import LaunchContext
from .supervisor import LaunchSupervisor, LaunchState, LaunchResult, action_for_game
