"""Persistence port: a last-write-wins key-value store of JSON documents.

The settings resolver, stats engine and task list never touch files
directly; they receive a DocumentStore and read/write whole documents.
"""

from __future__ import annotations

import copy
import json
import logging
import re
from pathlib import Path
from typing import Any, Protocol

from pomo.fileio import read_json, write_json_atomic
from pomo.workspace import store_dir, workspace_root

logger = logging.getLogger(__name__)

SETTINGS_KEY = "settings"
STATS_KEY = "stats"
TASKS_KEY = "tasks"

_KEY_RE = re.compile(r"^[A-Za-z0-9_.-]+$")


class DocumentStore(Protocol):
    def get(self, key: str) -> Any | None: ...

    def put(self, key: str, document: Any) -> None: ...


class JsonFileStore:
    """One ``<key>.json`` file per key, written atomically."""

    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory)

    @classmethod
    def for_workspace(cls, root: Path | None = None) -> JsonFileStore:
        if root is None:
            root = workspace_root()
        return cls(store_dir(root))

    def _path(self, key: str) -> Path:
        if not _KEY_RE.match(key) or key.startswith("."):
            raise ValueError(f"Invalid store key: {key!r}")
        return self.directory / f"{key}.json"

    def get(self, key: str) -> Any | None:
        return read_json(self._path(key))

    def put(self, key: str, document: Any) -> None:
        write_json_atomic(self._path(key), document)
        logger.debug("Stored %s", key)


class MemoryStore:
    """In-process store; documents are round-tripped through JSON on put."""

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._docs: dict[str, str] = {}
        for key, doc in (initial or {}).items():
            self.put(key, doc)

    def get(self, key: str) -> Any | None:
        raw = self._docs.get(key)
        return None if raw is None else json.loads(raw)

    def put(self, key: str, document: Any) -> None:
        self._docs[key] = json.dumps(copy.deepcopy(document))

    def keys(self) -> list[str]:
        return list(self._docs)
