#!/usr/bin/env python3
"""
🔐 Thread-Safe Credential Store for SpotiKeep
Single durable record shared by:
- Flask request handlers (control surface)
- The reconciliation monitor (background thread)
- The token manager (code exchange / refresh)

Every mutation is one patch applied wholesale and written through to disk
before it becomes visible to readers.
"""

import copy
import json
import logging
import os
import threading
from pathlib import Path
from typing import Any, Dict, Union

from ..config_schema import validate_record_dict


class CredentialStore:
    """
    Durable key/value record with read-modify-write semantics.

    Features:
    - Snapshot reads (deep copies, never shared with callers)
    - Atomic whole-record writes (temp file + ``os.replace``)
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._lock = threading.RLock()
        self._record: Dict[str, Any] = {}
        self._logger = logging.getLogger('spotikeep.state_store')
        self.reload()

    def reload(self) -> Dict[str, Any]:
        """Re-read the record from disk, starting empty if it is missing or unreadable."""
        with self._lock:
            self._record = self._load_from_disk()
            return copy.deepcopy(self._record)

    def _load_from_disk(self) -> Dict[str, Any]:
        try:
            with self.path.open("r", encoding="utf-8") as handle:
                data = json.load(handle)
        except FileNotFoundError:
            self._logger.debug("No state file at %s, starting with an empty record", self.path)
            return {}
        except (json.JSONDecodeError, OSError) as exc:
            self._logger.warning("Ignoring unreadable state file at %s: %s", self.path, exc)
            return {}

        try:
            return validate_record_dict(data)
        except ValueError as exc:
            self._logger.warning("Ignoring invalid state file at %s: %s", self.path, exc)
            return {}

    def _write_to_disk(self, record: Dict[str, Any]) -> None:
        """Persist the full record atomically to avoid corruption."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        with tmp_path.open("w", encoding="utf-8") as handle:
            json.dump(record, handle, indent=2, sort_keys=True)
        os.replace(tmp_path, self.path)

    def snapshot(self) -> Dict[str, Any]:
        """Return a deep copy of the latest record."""
        with self._lock:
            return copy.deepcopy(self._record)

    def get(self, key: str, default: Any = None) -> Any:
        """Get a single field from the latest record."""
        with self._lock:
            value = self._record.get(key, default)
            return copy.deepcopy(value)

    def patch(self, **fields: Any) -> Dict[str, Any]:
        """
        Merge ``fields`` into the record and persist the result.

        The in-memory record is swapped only after the write succeeded, so a
        failed write leaves both disk and memory on the previous version.

        Returns:
            Snapshot of the new record

        Raises:
            OSError: If the record could not be written
        """
        with self._lock:
            updated = copy.deepcopy(self._record)
            updated.update(fields)
            self._write_to_disk(updated)
            self._record = updated
            new_snapshot = copy.deepcopy(updated)

        self._logger.debug("💾 State patched: %s", sorted(fields))
        return new_snapshot


def is_authenticated(record: Dict[str, Any]) -> bool:
    """A record is authenticated once it holds a refresh token."""
    return bool(record.get("refresh_token"))


def resolve_flag(record: Dict[str, Any], key: str) -> bool:
    """Read a boolean flag, treating absent values as False."""
    return bool(record.get(key) or False)


__all__ = ["CredentialStore", "is_authenticated", "resolve_flag"]

