from __future__ import annotations

from pathlib import Path
import sys

import pytest

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from cavelauncher.registry.caves_registry import Cave, CavesRegistry  # noqa: E402


ELF_HEADER = b"\x7fELF\x02\x01\x01\x00" + b"\x00" * 56
MACHO_HEADER = b"\xcf\xfa\xed\xfe\x07\x00\x00\x01" + b"\x00" * 56


@pytest.fixture
def install_root(tmp_path: Path) -> Path:
    """Empty install folder for the default cave."""
    root = tmp_path / "Games" / "test-game"
    root.mkdir(parents=True)
    return root


@pytest.fixture
def registry(tmp_path: Path) -> CavesRegistry:
    return CavesRegistry(str(tmp_path / "data" / "caves.json"))


@pytest.fixture
def cave(registry: CavesRegistry, install_root: Path) -> Cave:
    """A launchable native cave registered in the registry."""
    record = Cave(
        id="cave-1",
        game_id=42,
        game={"id": 42, "title": "Test Game", "classification": "game"},
        launch_type="native",
        executables=["test-game"],
        upload_id=7,
        uploads={"7": {"id": 7, "filename": "test-game.zip"}},
        install_location=str(install_root.parent),
        install_folder=install_root.name,
    )
    registry.register(record)
    return registry.get_entity("caves", record.id)
