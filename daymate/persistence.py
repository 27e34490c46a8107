"""Durable timer snapshots over a simple key-value store."""

import json
import logging
from pathlib import Path
from typing import Any, Protocol

from .errors import PersistenceCorrupt
from .models import TimerMode, TimerState

logger = logging.getLogger(__name__)

KEY_REMAINING = "remaining"
KEY_MODE = "mode"


class KeyValueStore(Protocol):
    """Synchronous key-value storage used for timer snapshots."""

    def get(self, key: str, default: Any = None) -> Any:
        ...

    def put(self, key: str, value: Any) -> None:
        ...


class JsonFileStore:
    """Key-value store backed by a single JSON file.

    Each put rewrites the whole file, so writes of separate keys are not atomic
    as a group.
    """

    def __init__(self, path: Path):
        """Initialize store.

        Args:
            path: JSON file holding the values
        """
        self.path = path

    def _read(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            with open(self.path) as f:
                data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.warning(f"Ignoring unreadable state file {self.path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def get(self, key: str, default: Any = None) -> Any:
        return self._read().get(key, default)

    def put(self, key: str, value: Any) -> None:
        data = self._read()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w") as f:
            json.dump(data, f, indent=2)


def _decode_mode(raw: Any) -> TimerMode:
    try:
        return TimerMode[str(raw)]
    except KeyError:
        raise PersistenceCorrupt(f"Unknown timer mode {raw!r}") from None


def _decode_count(raw: Any, name: str) -> int:
    try:
        value = int(raw)
    except (TypeError, ValueError, OverflowError):
        raise PersistenceCorrupt(f"Unreadable {name} {raw!r}") from None
    if value < 0:
        raise PersistenceCorrupt(f"Negative {name} {value}")
    return value


class TimerPersistence:
    """Saves and restores TimerState as a (mode, remaining) snapshot.

    Neither operation raises: save failures are logged, and load degrades to a
    paused state when the snapshot is missing or corrupt.
    """

    def __init__(self, store: KeyValueStore):
        self.store = store

    def save(self, state: TimerState) -> None:
        """Persist the mode and remaining time of state."""
        try:
            self.store.put(KEY_REMAINING, state.remaining_millis)
            self.store.put(KEY_MODE, state.mode.name)
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Failed to save timer state: {e}")

    def load(self) -> TimerState:
        """Restore the last snapshot.

        Returns:
            Stored state with total equal to remaining and the timer stopped
        """
        try:
            raw_remaining = self.store.get(KEY_REMAINING, 0)
            raw_mode = self.store.get(KEY_MODE, TimerMode.PAUSED.name)
        except OSError as e:
            logger.error(f"Failed to load timer state: {e}")
            return TimerState()

        try:
            remaining = _decode_count(raw_remaining, KEY_REMAINING)
        except PersistenceCorrupt as e:
            logger.warning(f"{e}; resetting remaining time to 0")
            remaining = 0

        try:
            mode = _decode_mode(raw_mode)
        except PersistenceCorrupt as e:
            logger.warning(f"{e}; falling back to PAUSED")
            mode = TimerMode.PAUSED

        return TimerState(
            mode=mode,
            total_millis=remaining,
            remaining_millis=remaining,
            is_running=False,
        )

    def get_counter(self, key: str) -> int:
        """Read a non-negative integer counter, 0 when missing or corrupt."""
        try:
            return _decode_count(self.store.get(key, 0), key)
        except (OSError, PersistenceCorrupt) as e:
            logger.warning(f"Failed to read {key}: {e}")
            return 0

    def set_counter(self, key: str, value: int) -> None:
        try:
            self.store.put(key, int(value))
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Failed to save {key}: {e}")

