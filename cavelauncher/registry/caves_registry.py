"""
Cave registry with JSON storage.

Authoritative store for install records ("caves"). Callers never get a live
reference into the registry: get_entity() hands out copies and every change
goes through save_entity(), which merges a partial update into the stored
record and persists it right away.
"""
import json
import os
import logging
import threading
from dataclasses import dataclass, asdict, field, fields
from typing import Dict, Optional, Any, List

from ..utils.paths import CAVES_REGISTRY_PATH

logger = logging.getLogger(__name__)

CAVES = "caves"


@dataclass
class Cave:
    """Represents one installed copy of a game"""
    id: str
    game_id: int
    game: Optional[Dict[str, Any]] = None  # Cached game summary (title, classification, cover_url...)
    launch_type: str = "native"  # native, html, shell, external
    executables: List[str] = field(default_factory=list)  # Relative to the install root
    game_path: Optional[str] = None  # HTML content root, relative to the install root
    upload_id: Optional[int] = None
    uploads: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    download_key: Optional[Dict[str, Any]] = None
    seconds_run: int = 0
    last_touched: Optional[int] = None  # Epoch milliseconds
    installed_prereq: bool = False
    install_location: Optional[str] = None
    install_folder: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Cave':
        # Unknown keys come from newer versions; drop them instead of failing
        return cls(**{k: v for k, v in data.items() if k in CAVE_FIELDS})

    @property
    def upload(self) -> Optional[Dict[str, Any]]:
        """The upload this cave was installed from, if known"""
        if self.upload_id is None:
            return None
        return self.uploads.get(str(self.upload_id))


CAVE_FIELDS = frozenset(f.name for f in fields(Cave))


class CavesRegistry:
    """
    Manages install records with JSON storage.

    Exposes the entity-store surface used by the launch pipeline:
    get_entity / get_entities / save_entity, keyed by kind and id.
    Only the "caves" kind exists.
    """

    def __init__(self, path: str = CAVES_REGISTRY_PATH):
        self.path = path
        self._data: Dict[str, Dict[str, Any]] = {}
        # Entries that could not be read; written back untouched on save
        self._broken: Dict[str, Any] = {}
        self._lock = threading.Lock()
        self._load()

    def _load(self):
        """Load registry from disk"""
        if not os.path.exists(self.path):
            return
        try:
            with open(self.path, 'r') as f:
                data = json.load(f)
            entries = data.get(CAVES, {})
            if not isinstance(entries, dict):
                raise ValueError(f"'{CAVES}' is a {type(entries).__name__}, expected an object")
        except Exception as e:
            backup_path = self.path + ".bak"
            logger.error(f"[CaveRegistry] Failed to load registry: {e}, moving it to {backup_path}")
            self._data = {}
            try:
                os.replace(self.path, backup_path)
            except OSError as backup_error:
                logger.error(f"[CaveRegistry] Could not back up unreadable registry: {backup_error}")
            return

        for cave_id, entry in entries.items():
            try:
                entry = dict(entry)
                entry.setdefault('id', cave_id)
                self._data[cave_id] = Cave.from_dict(entry).to_dict()
            except (TypeError, ValueError) as e:
                logger.error(f"[CaveRegistry] Skipping unreadable cave {cave_id}: {e}")
                self._broken[cave_id] = entry
        logger.info(f"[CaveRegistry] Loaded {len(self._data)} caves from {self.path}")

    def _save(self):
        """Persist registry to disk"""
        os.makedirs(os.path.dirname(self.path), exist_ok=True)
        tmp_path = self.path + ".tmp"
        entries = dict(self._broken)
        entries.update(self._data)
        with open(tmp_path, 'w') as f:
            json.dump({CAVES: entries}, f, indent=2)
        os.replace(tmp_path, self.path)
        logger.debug(f"[CaveRegistry] Saved {len(self._data)} caves")

    @staticmethod
    def _check_kind(kind: str):
        if kind != CAVES:
            raise ValueError(f"Unknown entity kind: {kind}")

    def get_entity(self, kind: str, entity_id: str) -> Optional[Cave]:
        """Get a fresh copy of a record, or None if it does not exist"""
        self._check_kind(kind)
        with self._lock:
            entry = self._data.get(entity_id)
            if entry is None:
                return None
            return Cave.from_dict(json.loads(json.dumps(entry)))

    def get_entities(self, kind: str) -> Dict[str, Cave]:
        """Get fresh copies of all records of a kind"""
        self._check_kind(kind)
        with self._lock:
            return {
                cave_id: Cave.from_dict(json.loads(json.dumps(entry)))
                for cave_id, entry in self._data.items()
            }

    def save_entity(self, kind: str, entity_id: str, updates: Dict[str, Any]) -> Cave:
        """Merge a partial update into a record and persist it.

        Args:
            kind: Entity kind (only "caves")
            entity_id: Record id
            updates: Fields to overwrite

        Returns:
            The record as stored after the update
        """
        self._check_kind(kind)
        with self._lock:
            current = self._data.get(entity_id)
            if current is None:
                raise KeyError(f"No {kind} entity with id {entity_id}")
            unknown = sorted(set(updates) - CAVE_FIELDS)
            if unknown:
                logger.warning(f"[CaveRegistry] Ignoring unknown fields for {entity_id}: {', '.join(unknown)}")
            merged = dict(current)
            merged.update(updates)
            cave = Cave.from_dict(merged)
            self._data[entity_id] = cave.to_dict()
            self._save()
            return Cave.from_dict(json.loads(json.dumps(self._data[entity_id])))

    def register(self, cave: Cave) -> None:
        """Add or replace a cave"""
        with self._lock:
            self._broken.pop(cave.id, None)
            self._data[cave.id] = cave.to_dict()
            self._save()
        logger.info(f"[CaveRegistry] Registered cave {cave.id} (game {cave.game_id})")

    def remove(self, cave_id: str) -> bool:
        """Remove a cave"""
        with self._lock:
            if cave_id not in self._data:
                return False
            del self._data[cave_id]
            self._save()
        logger.info(f"[CaveRegistry] Removed cave {cave_id}")
        return True

    def count(self) -> int:
        """Get the number of registered caves"""
        return len(self._data)


# Global singleton instance
_registry_instance: Optional[CavesRegistry] = None


def get_registry() -> CavesRegistry:
    """Get the global registry instance (singleton)"""
    global _registry_instance
    if _registry_instance is None:
        _registry_instance = CavesRegistry()
    return _registry_instance
