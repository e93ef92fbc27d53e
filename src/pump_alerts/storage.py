"""Shared markdown and JSON I/O for persistent data files.

Domain inputs (tasks, habits, timers, ...) are stored one per file as YAML
frontmatter with the entity's `name` as the markdown body. Ephemeral state
(preferences, today's completions) is plain JSON.
"""

import dataclasses
import json
import logging
import os
import re
import tempfile
from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import Any, TypeVar

import yaml

from pump_alerts.config import DATA_DIR as DATA_DIR
from pump_alerts.config import TZ as TZ

STATE_DIR = DATA_DIR / "state"
BODY_FIELD = "name"

T = TypeVar("T")
log = logging.getLogger(__name__)


def _atomic_write(target: Path, content: str) -> None:
    target.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=target.parent, suffix=".tmp")
    try:
        os.write(fd, content.encode())
    finally:
        os.close(fd)
    os.replace(tmp, target)


# --- Markdown I/O ---


def _slugify(text: str, max_len: int = 50) -> str:
    """Convert text to a filesystem-safe slug."""
    slug = text.lower()
    slug = re.sub(r"[^a-z0-9]+", "-", slug)
    slug = slug.strip("-")
    if len(slug) > max_len:
        slug = slug[:max_len].rstrip("-")
    return slug or "item"


def _yaml_value(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_yaml_value(v) for v in value]
    if dataclasses.is_dataclass(value):
        return {k: _yaml_value(v) for k, v in asdict(value).items()}  # type: ignore[arg-type]
    return value


def _serialize_md(item: Any) -> str:
    """Build YAML frontmatter + markdown body, omitting fields left at their default."""
    fields = dataclasses.fields(item)
    defaults = {f.name: f.default for f in fields if f.default is not dataclasses.MISSING}
    defaults.update(
        {f.name: f.default_factory() for f in fields if f.default_factory is not dataclasses.MISSING}
    )

    data: dict[str, Any] = {}
    for f in fields:
        if f.name == BODY_FIELD:
            continue
        value = getattr(item, f.name)
        if f.name in defaults and value == defaults[f.name]:
            continue
        data[f.name] = _yaml_value(value)

    frontmatter = yaml.safe_dump(data, sort_keys=False, allow_unicode=True).strip()
    return f"---\n{frontmatter}\n---\n{getattr(item, BODY_FIELD)}\n"


def _parse_md(text: str, cls: type[T]) -> T:
    """Parse a single markdown file with YAML frontmatter into a dataclass."""
    parts = text.split("---", 2)
    if len(parts) < 3:
        raise ValueError("Missing YAML frontmatter delimiters")
    data = yaml.safe_load(parts[1])
    if not isinstance(data, dict):
        raise ValueError("YAML frontmatter is not a mapping")

    known = {f.name for f in dataclasses.fields(cls)}  # type: ignore[arg-type]
    filtered = {k: v for k, v in data.items() if k in known}
    if "id" in filtered:
        filtered["id"] = str(filtered["id"])
    filtered[BODY_FIELD] = parts[2].strip()
    return cls(**filtered)


def read_md_dir(dir_path: Path, cls: type[T]) -> list[T]:
    """Read all .md files in a directory into dataclass instances."""
    if not dir_path.is_dir():
        return []
    result: list[T] = []
    for filepath in sorted(dir_path.glob("*.md")):
        try:
            result.append(_parse_md(filepath.read_text(), cls))
        except (ValueError, yaml.YAMLError, TypeError, KeyError):
            log.warning("Skipping corrupt file: %s", filepath)
    return result


def _file_id(filepath: Path) -> str | None:
    parts = filepath.read_text().split("---", 2)
    if len(parts) < 3:
        return None
    try:
        data = yaml.safe_load(parts[1])
    except yaml.YAMLError:
        return None
    if isinstance(data, dict) and "id" in data:
        return str(data["id"])
    return None


def write_md(dir_path: Path, item: Any) -> Path:
    """Write a single item as a .md file with a slug-based filename. Atomic write."""
    dir_path.mkdir(parents=True, exist_ok=True)
    slug = _slugify(getattr(item, BODY_FIELD))
    target = dir_path / f"{slug}.md"

    # Handle slug collisions: allow overwrite if same id, else bump suffix
    counter = 2
    while target.exists():
        if _file_id(target) == str(item.id):
            break
        target = dir_path / f"{slug}-{counter}.md"
        counter += 1

    # A renamed item gets a new slug; drop its old file
    for existing in dir_path.glob("*.md"):
        if existing != target and _file_id(existing) == str(item.id):
            existing.unlink()

    _atomic_write(target, _serialize_md(item))
    return target


def remove_md(dir_path: Path, item_id: str) -> bool:
    """Find and delete the .md file whose YAML id matches item_id."""
    if not dir_path.is_dir():
        return False
    for filepath in dir_path.glob("*.md"):
        if _file_id(filepath) == item_id:
            filepath.unlink()
            return True
    return False


# --- JSON state ---


def read_json(filepath: Path) -> dict[str, Any] | None:
    """Returns None for a missing or corrupt file."""
    if not filepath.exists():
        return None
    try:
        data = json.loads(filepath.read_text())
    except json.JSONDecodeError:
        log.warning("Ignoring corrupt state file: %s", filepath)
        return None
    return data if isinstance(data, dict) else None


def write_json(filepath: Path, data: dict[str, Any]) -> None:
    """Atomic write via tempfile + os.replace."""
    _atomic_write(filepath, json.dumps(data, indent=2))
