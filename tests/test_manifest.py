"""
Tests for manifest parsing, validation and action resolution.
"""
import pytest
from unittest.mock import AsyncMock, Mock

from cavelauncher.errors import ManifestParseError, ManifestValidationError
from cavelauncher.launch.manifest import CANCELLED, ManifestResolver

MULTI_ACTION_MANIFEST = """
[[actions]]
name = "play"
path = "Game{{EXT}}"
args = ["--fullscreen"]

[[actions]]
name = "editor"
path = "Editor{{EXT}}"
scope = "profile:me"

[[actions]]
name = "manual"
path = "manual.html"
icon = "help"
"""


@pytest.fixture
def chooser():
    return Mock(choose=AsyncMock(return_value=None))


def write_manifest(root, text):
    (root / ".launch.toml").write_text(text)


@pytest.mark.asyncio
async def test_no_manifest_returns_none(tmp_path, chooser):
    resolver = ManifestResolver(platform="linux")
    assert await resolver.resolve(str(tmp_path), None, chooser) is None
    chooser.choose.assert_not_called()


@pytest.mark.asyncio
async def test_single_action_selected_without_chooser(tmp_path, chooser):
    write_manifest(tmp_path, """
[[actions]]
name = "play"
path = "Game{{EXT}}"
args = ["--fullscreen"]
scope = "wallet"
icon = "star"
""")
    resolver = ManifestResolver(platform="windows")

    action = await resolver.resolve(str(tmp_path), None, chooser)

    assert action.name == "play"
    assert action.path == "Game.exe"
    assert action.args == ("--fullscreen",)
    assert action.scope == "wallet"
    chooser.choose.assert_not_called()


@pytest.mark.asyncio
async def test_single_action_ignores_explicit_name(tmp_path, chooser):
    write_manifest(tmp_path, '[[actions]]\nname = "play"\npath = "game.sh"\n')
    action = await ManifestResolver(platform="linux").resolve(str(tmp_path), "editor", chooser)
    assert action.name == "play"


@pytest.mark.asyncio
async def test_placeholder_substituted_once(tmp_path, chooser):
    write_manifest(tmp_path, '[[actions]]\nname = "play"\npath = "Game{{EXT}}{{EXT}}"\n')
    action = await ManifestResolver(platform="osx").resolve(str(tmp_path), None, chooser)
    assert action.path == "Game.app{{EXT}}"


@pytest.mark.asyncio
async def test_placeholder_is_empty_on_linux(tmp_path, chooser):
    write_manifest(tmp_path, '[[actions]]\nname = "play"\npath = "bin/Game{{EXT}}"\n')
    action = await ManifestResolver(platform="linux").resolve(str(tmp_path), None, chooser)
    assert action.path == "bin/Game"


@pytest.mark.asyncio
async def test_explicit_name_selects_action(tmp_path, chooser):
    write_manifest(tmp_path, MULTI_ACTION_MANIFEST)
    action = await ManifestResolver(platform="windows").resolve(str(tmp_path), "editor", chooser)

    assert action.name == "editor"
    assert action.path == "Editor.exe"
    chooser.choose.assert_not_called()


@pytest.mark.asyncio
async def test_explicit_name_mismatch_is_cancelled(tmp_path, chooser):
    write_manifest(tmp_path, MULTI_ACTION_MANIFEST)
    result = await ManifestResolver(platform="windows").resolve(str(tmp_path), "server", chooser)

    assert result is CANCELLED
    chooser.choose.assert_not_called()


@pytest.mark.asyncio
async def test_multiple_actions_prompt_chooser_once(tmp_path, chooser):
    write_manifest(tmp_path, MULTI_ACTION_MANIFEST)
    chooser.choose.return_value = "manual"

    action = await ManifestResolver(platform="linux").resolve(
        str(tmp_path), None, chooser, title="Test Game", cover="http://cover"
    )

    assert action.name == "manual"
    chooser.choose.assert_awaited_once()
    title, cover, options = chooser.choose.call_args.args
    assert title == "Test Game"
    assert cover == "http://cover"
    assert [o.value for o in options] == ["play", "editor", "manual"]
    assert [o.icon for o in options] == ["play", "pencil", "help"]
    assert options[1].class_name == "action-editor"


@pytest.mark.asyncio
async def test_chooser_cancel_is_not_an_error(tmp_path, chooser):
    write_manifest(tmp_path, MULTI_ACTION_MANIFEST)
    chooser.choose.return_value = None

    result = await ManifestResolver(platform="linux").resolve(str(tmp_path), None, chooser)

    assert result is CANCELLED
    assert not result
    chooser.choose.assert_awaited_once()


@pytest.mark.asyncio
async def test_parse_error_is_fatal(tmp_path, chooser):
    write_manifest(tmp_path, "[[actions]\nname = ")
    with pytest.raises(ManifestParseError):
        await ManifestResolver(platform="linux").resolve(str(tmp_path), None, chooser)


@pytest.mark.asyncio
async def test_action_without_name_is_fatal(tmp_path, chooser):
    write_manifest(tmp_path, """
[[actions]]
name = "play"
path = "game.sh"

[[actions]]
path = "editor.sh"
""")
    with pytest.raises(ManifestValidationError) as exc_info:
        await ManifestResolver(platform="linux").resolve(str(tmp_path), None, chooser)
    assert "action 1 is missing a name" in exc_info.value.problems


@pytest.mark.asyncio
async def test_manifest_without_actions_is_fatal(tmp_path, chooser):
    write_manifest(tmp_path, 'title = "nothing here"\n')
    with pytest.raises(ManifestValidationError):
        await ManifestResolver(platform="linux").resolve(str(tmp_path), None, chooser)


@pytest.mark.asyncio
async def test_custom_validator_is_used(tmp_path, chooser):
    write_manifest(tmp_path, '[[actions]]\nname = "play"\npath = "game.sh"\n')
    validator = Mock()

    await ManifestResolver(validator=validator, platform="linux").resolve(str(tmp_path), None, chooser)

    validator.assert_called_once()
    assert validator.call_args.args[0]["actions"][0]["name"] == "play"


@pytest.mark.asyncio
async def test_legacy_type_hint_is_kept(tmp_path, chooser):
    write_manifest(tmp_path, '[[actions]]\nname = "play"\npath = "game"\ntype = "exe"\n')
    action = await ManifestResolver(platform="linux").resolve(str(tmp_path), None, chooser)
    assert action.type_hint.value == "native"
