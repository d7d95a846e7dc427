"""Input fingerprint store gating recomputation of derived artifacts.

A ``HashStore`` collects named inputs (files or literal strings), digests them
and compares the result with the record written by the last successful run.
Callers must check :meth:`HashStore.is_valid` before doing expensive work and
call :meth:`HashStore.commit` only after the produced output is on disk.
"""

from __future__ import annotations

import json
import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from mapforge.cache.models import FingerprintRecord
from mapforge.utils.errors import MappingIOError
from mapforge.utils.files import atomic_write
from mapforge.utils.hashing import sha1_file, sha1_text
from mapforge.utils.log import log_event

logger = logging.getLogger("mapforge.cache")

_RECORD_VERSION = 1
_RECORD_SUFFIX = ".input"
_MISSING_DIGEST = "missing"
_TEXT_PREFIX = "text:"

_LOCKS: dict[tuple[str, str], threading.Lock] = {}
_LOCKS_GUARD = threading.Lock()


class HashStore:
    """Track inputs for one logical resource under a cache root."""

    def __init__(self, cache_root: Path, resource: str) -> None:
        self._cache_root = cache_root
        self._resource = resource
        self._record_path = cache_root / f"{resource}{_RECORD_SUFFIX}"
        self._inputs: dict[str, Path | str] = {}

    @property
    def record_path(self) -> Path:
        return self._record_path

    def track(self, label: str, source: Path | str) -> HashStore:
        """Register an input; a ``str`` is digested as text, a ``Path`` by content."""

        self._inputs[label] = source
        return self

    def current(self) -> FingerprintRecord:
        """Digest every tracked input."""

        entries = {label: _digest(source) for label, source in self._inputs.items()}
        return FingerprintRecord(version=_RECORD_VERSION, entries=entries)

    def is_valid(self) -> bool:
        previous = self._read_record()
        if previous is None:
            log_event(logger, logging.DEBUG, "hash_store.no_record", resource=self._resource)
            return False

        current = self.current()
        if _MISSING_DIGEST in current.entries.values():
            log_event(logger, logging.DEBUG, "hash_store.missing_input", resource=self._resource)
            return False

        if set(previous.entries) != set(current.entries):
            log_event(
                logger,
                logging.INFO,
                "hash_store.labels_changed",
                resource=self._resource,
                added=sorted(set(current.entries) - set(previous.entries)),
                removed=sorted(set(previous.entries) - set(current.entries)),
            )
            return False

        changed = sorted(
            label
            for label, digest in current.entries.items()
            if previous.entries[label] != digest
        )
        if changed:
            log_event(
                logger,
                logging.INFO,
                "hash_store.inputs_changed",
                resource=self._resource,
                changed=changed,
            )
            return False
        return True

    def commit(self) -> None:
        """Persist current digests, replacing the previous record atomically."""

        record = self.current()
        payload = json.dumps(
            {"version": record.version, "entries": record.entries},
            ensure_ascii=False,
            sort_keys=True,
            separators=(",", ":"),
        ).encode("utf-8")
        atomic_write(self._record_path, lambda handle: handle.write(payload))

        log_event(logger, logging.DEBUG, "hash_store.committed", resource=self._resource)

    def _read_record(self) -> FingerprintRecord | None:
        if not self._record_path.is_file():
            return None

        try:
            raw = json.loads(self._record_path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError):
            log_event(
                logger, logging.WARNING, "hash_store.unreadable_record", path=str(self._record_path)
            )
            return None

        if not isinstance(raw, dict) or not isinstance(raw.get("entries"), dict):
            return None
        if raw.get("version", _RECORD_VERSION) != _RECORD_VERSION:
            return None

        entries = {str(key): str(value) for key, value in raw["entries"].items()}
        return FingerprintRecord(version=_RECORD_VERSION, entries=entries)


@contextmanager
def resource_lock(cache_root: Path, resource: str) -> Iterator[None]:
    """Hold an in-process exclusive lock for one (cache root, resource) pair."""

    key = (str(cache_root.resolve()), resource)
    with _LOCKS_GUARD:
        lock = _LOCKS.setdefault(key, threading.Lock())
    with lock:
        yield


def write_checksum_sidecar(path: Path) -> Path:
    """Write ``<path>.sha1`` holding the artifact's digest."""

    sidecar = path.with_name(f"{path.name}.sha1")
    try:
        sidecar.write_text(sha1_file(path), encoding="utf-8")
    except OSError as exc:
        raise MappingIOError(f"Could not write checksum file: {sidecar}", path=sidecar) from exc
    return sidecar


def _digest(source: Path | str) -> str:
    # Text digests are tagged so a literal never matches a file with the same bytes.
    if isinstance(source, str):
        return _TEXT_PREFIX + sha1_text(source)
    if not source.is_file():
        return _MISSING_DIGEST
    try:
        return sha1_file(source)
    except OSError:
        log_event(logger, logging.WARNING, "hash_store.unreadable_input", path=str(source))
        return _MISSING_DIGEST
