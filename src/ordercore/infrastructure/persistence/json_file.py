"""Shared plumbing for the JSON-file repositories.

A load-check-write sequence done under ``locked()`` cannot interleave
with another one on the same file, whether it comes from another thread
or from another process.  Threads of one process share a re-entrant lock
per path.  The outermost holder also takes an exclusive ``flock`` on a
sidecar ``<name>.lock`` file, which other processes (every ``ordercore``
CLI call is one) wait on.

Writes go to a temporary file that is then renamed over the original,
so a reader never sees a half-written document.
"""

from __future__ import annotations

import fcntl
import json
import os
import tempfile
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator

from ordercore.domain.exceptions import StorageError


class _PathLock:

    def __init__(self, lock_path: Path) -> None:
        self._lock_path = lock_path
        self._thread_lock = threading.RLock()
        self._depth = 0
        self._fd: int | None = None

    @contextmanager
    def hold(self) -> Iterator[None]:
        with self._thread_lock:
            if self._depth == 0:
                self._fd = self._acquire()
            self._depth += 1
            try:
                yield
            finally:
                self._depth -= 1
                if self._depth == 0:
                    self._release()

    def _acquire(self) -> int:
        try:
            fd = os.open(self._lock_path, os.O_RDWR | os.O_CREAT, 0o644)
        except OSError as exc:
            raise StorageError(f"Cannot open {self._lock_path.name}: {exc}") from exc
        try:
            fcntl.flock(fd, fcntl.LOCK_EX)
        except OSError as exc:
            os.close(fd)
            raise StorageError(f"Cannot lock {self._lock_path.name}: {exc}") from exc
        return fd

    def _release(self) -> None:
        fd, self._fd = self._fd, None
        try:
            fcntl.flock(fd, fcntl.LOCK_UN)
        finally:
            os.close(fd)


_locks: dict[Path, _PathLock] = {}
_locks_guard = threading.Lock()


def _lock_for(path: Path) -> _PathLock:
    with _locks_guard:
        lock = _locks.get(path)
        if lock is None:
            lock = _locks[path] = _PathLock(path.with_name(path.name + ".lock"))
        return lock


class JsonFile:

    def __init__(self, path: Path, empty: Any) -> None:
        self._path = path.resolve()
        self._empty = empty
        self._lock = _lock_for(self._path)
        self._ensure_file()

    @property
    def path(self) -> Path:
        return self._path

    @contextmanager
    def locked(self) -> Iterator[None]:
        with self._lock.hold():
            yield

    def load(self) -> Any:
        try:
            return json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise StorageError(f"Cannot read {self._path.name}: {exc}") from exc

    def persist(self, data: Any) -> None:
        text = json.dumps(data, indent=2) + "\n"
        try:
            fd, tmp_name = tempfile.mkstemp(
                dir=self._path.parent, prefix=f".{self._path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    fh.write(text)
                os.replace(tmp_name, self._path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise StorageError(f"Cannot write {self._path.name}: {exc}") from exc

    def _ensure_file(self) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageError(f"Cannot create {self._path.parent}: {exc}") from exc
        with self.locked():
            if not self._path.exists():
                self.persist(self._empty)
