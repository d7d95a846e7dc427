"""Atomic file output helpers."""

from __future__ import annotations

import os
import tempfile
from collections.abc import Callable
from pathlib import Path
from typing import BinaryIO

from mapforge.utils.errors import MappingIOError


def atomic_write(path: Path, write: Callable[[BinaryIO], None]) -> None:
    """Write ``path`` through a temporary sibling file and replace it in one step.

    The destination is either fully replaced or left unchanged.
    """

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, raw_tmp_path = tempfile.mkstemp(
            dir=path.parent,
            prefix=f"{path.name}.",
            suffix=".tmp",
        )
    except OSError as exc:
        raise MappingIOError(f"Could not create output directory for {path}", path=path) from exc

    tmp_path = Path(raw_tmp_path)
    try:
        with os.fdopen(fd, "wb") as handle:
            write(handle)
        tmp_path.replace(path)
    except OSError as exc:
        tmp_path.unlink(missing_ok=True)
        raise MappingIOError(f"Could not write {path}: {exc}", path=path) from exc
    except Exception:
        tmp_path.unlink(missing_ok=True)
        raise
