"""Key/value repositories and the per-step draft store."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from .exceptions import DraftStoreError, ValidationError
from .steps import StepData, step_from_dict

_LOGGER = logging.getLogger(__name__)

DEFAULT_NAMESPACE = "radsasfun"
STEP_KEYS: dict[str, int] = {"step1": 1, "step2": 2, "step3": 3, "step4": 4}
RESERVATION_STATE_KEY = "reservation_state"


class KeyValueStore(ABC):
    """Minimal string key/value repository backing drafts and auth data."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the stored value or None."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store a value, replacing any previous one."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove a key if present."""

    @abstractmethod
    def clear(self) -> None:
        """Remove every key."""

    @abstractmethod
    def keys(self) -> list[str]:
        """Return the stored keys."""


class MemoryStore(KeyValueStore):
    """Process-lifetime store, the equivalent of a browser tab session."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def clear(self) -> None:
        self._data.clear()

    def keys(self) -> list[str]:
        return list(self._data)


class JsonFileStore(KeyValueStore):
    """Store persisted to a single JSON object on disk."""

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _read(self) -> dict[str, str]:
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as exc:
            raise DraftStoreError("Draft file could not be read.") from exc
        if not raw.strip():
            return {}
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            _LOGGER.warning("Draft file %s is not valid JSON; starting empty", self._path)
            return {}
        if not isinstance(data, dict):
            _LOGGER.warning("Draft file %s does not contain an object; starting empty", self._path)
            return {}
        return {str(key): value for key, value in data.items() if isinstance(value, str)}

    def _write(self, data: dict[str, str]) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self._path.name}.",
                dir=self._path.parent,
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    json.dump(data, handle, ensure_ascii=False)
                os.replace(tmp_name, self._path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise DraftStoreError("Draft file could not be written.") from exc

    def get(self, key: str) -> str | None:
        return self._read().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def delete(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)

    def clear(self) -> None:
        self._write({})

    def keys(self) -> list[str]:
        return list(self._read())


class DraftStore:
    """Per-step draft persistence on top of a ``KeyValueStore``.

    Saving replaces the whole slice; callers merge before they save.
    """

    def __init__(self, store: KeyValueStore, *, namespace: str = DEFAULT_NAMESPACE) -> None:
        if not isinstance(namespace, str) or not namespace.strip():
            raise ValidationError("namespace must be a non-empty string.")
        self._store = store
        self._namespace = namespace.strip()

    @property
    def store(self) -> KeyValueStore:
        return self._store

    def storage_key(self, step_key: str) -> str:
        if step_key == RESERVATION_STATE_KEY:
            return f"{self._namespace}_{RESERVATION_STATE_KEY}"
        if step_key not in STEP_KEYS:
            raise ValidationError(f"Unknown draft key: {step_key}.")
        return f"{self._namespace}_{step_key}_form_data"

    def load(self, step_key: str) -> StepData | None:
        data = self.load_raw(step_key)
        if data is None:
            return None
        return step_from_dict(STEP_KEYS[step_key], data)

    def save(self, step_key: str, data: StepData) -> None:
        if step_key not in STEP_KEYS:
            raise ValidationError(f"Unknown draft key: {step_key}.")
        self.save_raw(step_key, data.to_dict())

    def load_raw(self, step_key: str) -> dict[str, Any] | None:
        raw = self._store.get(self.storage_key(step_key))
        if raw is None:
            return None
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            _LOGGER.warning("Stored draft %s is not valid JSON; ignoring it", step_key)
            return None
        if not isinstance(data, dict):
            _LOGGER.warning("Stored draft %s is not an object; ignoring it", step_key)
            return None
        return data

    def save_raw(self, step_key: str, data: dict[str, Any]) -> None:
        self._store.set(self.storage_key(step_key), json.dumps(data, ensure_ascii=False))

    def clear(self, step_key: str) -> None:
        self._store.delete(self.storage_key(step_key))

    def clear_all(self) -> None:
        for step_key in STEP_KEYS:
            self.clear(step_key)
        self.clear(RESERVATION_STATE_KEY)
        _LOGGER.debug("Drafts in namespace %s cleared", self._namespace)
