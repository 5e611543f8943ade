"""In-memory application and call state with optional JSON-file persistence.

Writes go through :meth:`LiaisonStore.commit`, which persists the complete new
state before swapping it in, so a failed write leaves the store untouched.
Callers serialise work on one application with :meth:`application_lock`; the
store-wide lock is held only while committing.
"""

from __future__ import annotations

import json
import logging
import threading
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from pathlib import Path

from grant_liaison.liaison.models import GrantApplication, ScheduledCall

logger = logging.getLogger(__name__)


class LiaisonStore:
    def __init__(self, path: Path | None = None) -> None:
        self._path = path
        self._lock = threading.Lock()
        self._locks_guard = threading.Lock()
        self._application_locks: dict[str, tuple[threading.RLock, int]] = {}
        self._applications: dict[str, GrantApplication] = {}
        self._calls: dict[str, ScheduledCall] = {}
        self._load()

    @property
    def path(self) -> Path | None:
        return self._path

    def _load(self) -> None:
        if self._path is None or not self._path.exists():
            return

        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            logger.warning(
                "Liaison state file is not valid JSON; treating as empty",
                extra={"path": str(self._path)},
            )
            return

        if not isinstance(raw, dict):
            logger.warning(
                "Liaison state file has unexpected shape; treating as empty",
                extra={"path": str(self._path)},
            )
            return

        for item in raw.get("applications") or []:
            app = GrantApplication.model_validate(item)
            self._applications[app.id] = app
        for item in raw.get("calls") or []:
            call = ScheduledCall.model_validate(item)
            self._calls[call.id] = call

        logger.info(
            "Liaison state loaded",
            extra={
                "path": str(self._path),
                "applications": len(self._applications),
                "calls": len(self._calls),
            },
        )

    def _save_unlocked(
        self,
        applications: dict[str, GrantApplication],
        calls: dict[str, ScheduledCall],
    ) -> None:
        if self._path is None:
            return
        self._path.parent.mkdir(parents=True, exist_ok=True)
        payload = {
            "applications": [a.model_dump(mode="json") for a in applications.values()],
            "calls": [c.model_dump(mode="json") for c in calls.values()],
        }
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp.write_text(json.dumps(payload, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
        tmp.replace(self._path)

    def applications(self) -> list[GrantApplication]:
        with self._lock:
            return list(self._applications.values())

    def calls(self) -> list[ScheduledCall]:
        with self._lock:
            return list(self._calls.values())

    def get_application(self, application_id: str) -> GrantApplication | None:
        with self._lock:
            return self._applications.get(application_id)

    def get_call(self, call_id: str) -> ScheduledCall | None:
        with self._lock:
            return self._calls.get(call_id)

    @contextmanager
    def application_lock(self, application_id: str) -> Iterator[None]:
        """Serialise mutations of a single application (and its calls).

        A lock lives only while someone holds or waits on it.
        """

        with self._locks_guard:
            lock, users = self._application_locks.get(application_id, (threading.RLock(), 0))
            self._application_locks[application_id] = (lock, users + 1)
        try:
            with lock:
                yield
        finally:
            with self._locks_guard:
                lock, users = self._application_locks[application_id]
                if users <= 1:
                    del self._application_locks[application_id]
                else:
                    self._application_locks[application_id] = (lock, users - 1)

    def held_lock_count(self) -> int:
        with self._locks_guard:
            return len(self._application_locks)

    def commit(
        self,
        *,
        applications: Iterable[GrantApplication] = (),
        calls: Iterable[ScheduledCall] = (),
        delete_application_ids: Iterable[str] = (),
    ) -> None:
        """Apply upserts and deletions as one unit."""

        with self._lock:
            next_apps = dict(self._applications)
            next_calls = dict(self._calls)

            for app_id in delete_application_ids:
                next_apps.pop(app_id, None)
                next_calls = {k: c for k, c in next_calls.items() if c.application_id != app_id}
            for app in applications:
                next_apps[app.id] = app
            for call in calls:
                next_calls[call.id] = call

            self._save_unlocked(next_apps, next_calls)
            self._applications = next_apps
            self._calls = next_calls
