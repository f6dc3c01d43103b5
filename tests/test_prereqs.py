"""
Tests for the one-time prerequisite installer.
"""
import os

import pytest
from unittest.mock import AsyncMock

from cavelauncher.launch.prereqs import PREREQ_ARGS, PrerequisiteInstaller


@pytest.fixture
def prereq_cave(registry, cave):
    return registry.save_entity("caves", cave.id, {
        "executables": ["Game.exe", "Engine/Extras/Redist/en-us/UE4PrereqSetup_x64.exe"],
    })


@pytest.mark.asyncio
async def test_runs_installer_and_records_success(registry, prereq_cave, install_root):
    spawner = AsyncMock(return_value=0)
    installer = PrerequisiteInstaller(registry, spawner, platform="windows")

    await installer.ensure_installed(str(install_root), prereq_cave)

    spawner.assert_awaited_once()
    command, args = spawner.call_args.args
    assert command == os.path.join(str(install_root), "Engine/Extras/Redist/en-us/UE4PrereqSetup_x64.exe")
    assert args == PREREQ_ARGS
    assert registry.get_entity("caves", prereq_cave.id).installed_prereq is True


@pytest.mark.asyncio
async def test_runs_at_most_once_per_install(registry, prereq_cave, install_root):
    spawner = AsyncMock(return_value=0)
    installer = PrerequisiteInstaller(registry, spawner, platform="windows")

    await installer.ensure_installed(str(install_root), prereq_cave)
    # Stale copy still says False; the persisted flag wins
    await installer.ensure_installed(str(install_root), prereq_cave)

    assert spawner.await_count == 1


@pytest.mark.asyncio
async def test_non_zero_exit_is_swallowed(registry, prereq_cave, install_root):
    spawner = AsyncMock(return_value=1603)
    installer = PrerequisiteInstaller(registry, spawner, platform="windows")

    await installer.ensure_installed(str(install_root), prereq_cave)

    assert registry.get_entity("caves", prereq_cave.id).installed_prereq is False


@pytest.mark.asyncio
async def test_spawn_failure_is_swallowed(registry, prereq_cave, install_root):
    spawner = AsyncMock(side_effect=OSError("access denied"))
    installer = PrerequisiteInstaller(registry, spawner, platform="windows")

    await installer.ensure_installed(str(install_root), prereq_cave)

    assert registry.get_entity("caves", prereq_cave.id).installed_prereq is False


@pytest.mark.asyncio
async def test_skipped_on_other_platforms(registry, prereq_cave, install_root):
    spawner = AsyncMock(return_value=0)
    await PrerequisiteInstaller(registry, spawner, platform="linux").ensure_installed(str(install_root), prereq_cave)
    spawner.assert_not_called()


@pytest.mark.asyncio
async def test_skipped_without_installer(registry, cave, install_root):
    spawner = AsyncMock(return_value=0)
    await PrerequisiteInstaller(registry, spawner, platform="windows").ensure_installed(str(install_root), cave)
    spawner.assert_not_called()
