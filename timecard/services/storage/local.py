"""
Local Key-Value Stores

Two implementations of KeyValueStore:

- InMemoryKeyValueStore: a dict, for tests and throwaway sessions
- JsonFileStore: one UTF-8 file per record inside a directory

JsonFileStore writes through a temporary file and os.replace, so a crash
mid-write leaves the previous record intact rather than a truncated one.
"""

import os
import re
import tempfile
from pathlib import Path
from typing import Optional, Union

from timecard.services.storage.interface import (
    ConnectionError,
    KeyValueStore,
    StorageError,
)


_SAFE_KEY = re.compile(r"^[A-Za-z0-9_.-]+$")


class InMemoryKeyValueStore(KeyValueStore):
    """Dict-backed store."""

    def __init__(self):
        self._data: dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileStore(KeyValueStore):
    """
    Directory-backed store: record `entries` lives in `<dir>/entries.json`.
    """

    def __init__(self, directory: Union[str, Path]):
        self._directory = Path(directory)

    def _path(self, key: str) -> Path:
        if not _SAFE_KEY.match(key):
            raise StorageError(f"Invalid record name: {key!r}")
        return self._directory / f"{key}.json"

    def get(self, key: str) -> Optional[str]:
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except UnicodeDecodeError as e:
            raise StorageError(f"Record '{key}' is not valid UTF-8: {e}")
        except OSError as e:
            raise ConnectionError(f"Could not read {path}: {e}")

    def set(self, key: str, value: str) -> None:
        path = self._path(key)
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self._directory,
                prefix=f".{key}.",
                suffix=".tmp",
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(value)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise ConnectionError(f"Could not write {path}: {e}")

    def delete(self, key: str) -> None:
        try:
            self._path(key).unlink(missing_ok=True)
        except OSError as e:
            raise ConnectionError(f"Could not delete record '{key}': {e}")
