"""File I/O for the PomoFocus workspace.

Every write goes to a locked temp file in the target directory and is
renamed into place, so readers never see a half-written document.
"""

from __future__ import annotations

import fcntl
import json
import logging
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import IO, Any, Iterator

import yaml

logger = logging.getLogger(__name__)


def read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return ""


def read_json(path: Path) -> Any:
    """Parsed document at *path*, or None when missing, empty or malformed."""
    text = read_text(path)
    if not text.strip():
        return None
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        logger.warning("Ignoring malformed JSON in %s: %s", path, e)
        return None


def read_yaml(path: Path) -> dict[str, Any]:
    """Top-level YAML mapping at *path*; anything else reads as {}."""
    text = read_text(path)
    if not text.strip():
        return {}
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        logger.warning("Ignoring malformed YAML in %s: %s", path, e)
        return {}
    return data if isinstance(data, dict) else {}


@contextmanager
def _replacing(path: Path) -> Iterator[IO[str]]:
    """Yield a locked temp file that replaces *path* on clean exit."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            fcntl.flock(f, fcntl.LOCK_EX)
            yield f
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, path)
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise


def write_text_atomic(path: Path, content: str) -> None:
    with _replacing(path) as f:
        f.write(content)


def write_json_atomic(path: Path, data: Any) -> None:
    with _replacing(path) as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
        f.write("\n")


def write_yaml_atomic(path: Path, data: dict[str, Any]) -> None:
    with _replacing(path) as f:
        yaml.safe_dump(data, f, default_flow_style=False, allow_unicode=True, sort_keys=False)
