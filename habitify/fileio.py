"""File I/O for the Habitify workspace: YAML reads and atomic writes."""

from __future__ import annotations

import fcntl
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)


def read_text(path: Path) -> str:
    """Read a text file, returning empty string if missing."""
    if not path.exists():
        return ""
    return path.read_text(encoding="utf-8")


def read_yaml(path: Path) -> dict[str, Any]:
    """Read a YAML mapping, returning {} if the file is missing or empty.

    Malformed YAML is logged and re-raised; a top-level value that is not a
    mapping is treated as empty.
    """
    text = read_text(path)
    if not text.strip():
        return {}
    try:
        result = yaml.safe_load(text)
    except yaml.YAMLError:
        logger.error("could not parse %s", path)
        raise
    if not isinstance(result, dict):
        logger.warning("%s does not hold a mapping, ignoring it", path)
        return {}
    return result


def write_yaml_atomic(path: Path, data: dict[str, Any]) -> None:
    """Dump *data* next to *path* under an exclusive lock, then swap it in.

    Readers see either the previous file or the complete new one.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = tempfile.NamedTemporaryFile(
        "w", encoding="utf-8", dir=path.parent, prefix=".tmp_", suffix=".yaml", delete=False
    )
    try:
        with tmp:
            fcntl.flock(tmp.fileno(), fcntl.LOCK_EX)
            yaml.safe_dump(data, tmp, default_flow_style=False, allow_unicode=True, sort_keys=False)
            tmp.flush()
            os.fsync(tmp.fileno())
        os.replace(tmp.name, path)
    except Exception:
        Path(tmp.name).unlink(missing_ok=True)
        raise
    logger.debug("wrote %s", path)
