"""
Tests for the JSON-backed cave registry.
"""
import json
import logging

import pytest

from cavelauncher.registry.caves_registry import CAVES, Cave, CavesRegistry


def test_get_entity_returns_independent_copies(registry, cave):
    first = registry.get_entity(CAVES, cave.id)
    first.executables.append("mutated")
    first.game["title"] = "Mutated"

    second = registry.get_entity(CAVES, cave.id)
    assert second.executables == ["test-game"]
    assert second.game["title"] == "Test Game"


def test_get_missing_entity_returns_none(registry):
    assert registry.get_entity(CAVES, "nope") is None


def test_save_entity_merges_partial_update(registry, cave):
    saved = registry.save_entity(CAVES, cave.id, {"seconds_run": 60})

    assert saved.seconds_run == 60
    assert saved.executables == ["test-game"]
    assert registry.get_entity(CAVES, cave.id).seconds_run == 60


def test_save_entity_persists_to_disk(registry, cave):
    registry.save_entity(CAVES, cave.id, {"last_touched": 1700000000000})

    with open(registry.path) as f:
        data = json.load(f)
    assert data[CAVES][cave.id]["last_touched"] == 1700000000000

    reloaded = CavesRegistry(registry.path)
    assert reloaded.get_entity(CAVES, cave.id).last_touched == 1700000000000


def test_save_unknown_entity_raises(registry):
    with pytest.raises(KeyError):
        registry.save_entity(CAVES, "nope", {"seconds_run": 1})


def test_unknown_kind_raises(registry):
    with pytest.raises(ValueError):
        registry.get_entity("games", "1")


def test_corrupt_file_loads_empty(tmp_path):
    path = tmp_path / "caves.json"
    path.write_text("{not json")

    registry = CavesRegistry(str(path))

    assert registry.count() == 0


def test_corrupt_file_is_backed_up_before_overwrite(tmp_path):
    path = tmp_path / "caves.json"
    path.write_text("{not json")

    registry = CavesRegistry(str(path))
    registry.register(Cave(id="new", game_id=2))

    assert (tmp_path / "caves.json.bak").read_text() == "{not json"
    assert list(json.loads(path.read_text())[CAVES]) == ["new"]


def test_broken_entry_does_not_lose_other_caves(tmp_path):
    path = tmp_path / "caves.json"
    path.write_text(json.dumps({CAVES: {
        "good": {"id": "good", "game_id": 1, "seconds_run": 3600},
        "bad": {"id": "bad"},
    }}))

    registry = CavesRegistry(str(path))
    registry.register(Cave(id="new", game_id=2))

    assert registry.get_entity(CAVES, "good").seconds_run == 3600
    assert registry.get_entity(CAVES, "bad") is None
    on_disk = json.loads(path.read_text())[CAVES]
    assert on_disk["good"]["seconds_run"] == 3600
    assert on_disk["bad"] == {"id": "bad"}
    assert "new" in on_disk


def test_missing_id_defaults_to_key(tmp_path):
    path = tmp_path / "caves.json"
    path.write_text(json.dumps({CAVES: {"c": {"game_id": 1}}}))

    registry = CavesRegistry(str(path))

    assert registry.get_entity(CAVES, "c").id == "c"


def test_save_entity_warns_about_unknown_fields(registry, cave, caplog):
    with caplog.at_level(logging.WARNING, logger="cavelauncher.registry.caves_registry"):
        saved = registry.save_entity(CAVES, cave.id, {"lastTouched": 5, "seconds_run": 10})

    assert saved.seconds_run == 10
    assert saved.last_touched is None
    assert "lastTouched" in caplog.text


def test_unknown_fields_are_dropped(tmp_path):
    path = tmp_path / "caves.json"
    path.write_text(json.dumps({CAVES: {"c": {"id": "c", "game_id": 1, "future_field": True}}}))

    registry = CavesRegistry(str(path))

    assert registry.get_entity(CAVES, "c") == Cave(id="c", game_id=1)


def test_remove(registry, cave):
    assert registry.remove(cave.id) is True
    assert registry.remove(cave.id) is False
    assert registry.get_entities(CAVES) == {}


def test_upload_property(cave):
    assert cave.upload == {"id": 7, "filename": "test-game.zip"}
    assert Cave(id="x", game_id=1).upload is None
