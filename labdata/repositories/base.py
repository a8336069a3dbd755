"""Repository base class used by all concrete repositories."""
import json
import logging
import os
import tempfile
from typing import Any

from ..errors import StorageError


class BaseRepository:
    """Provides JSON-backed persistence for a single data file.

    :meth:`_load` reads the file and falls back to a default on a missing or
    corrupt file (logging a warning for the latter).  :meth:`_save` writes
    atomically with a write-then-rename strategy so the file is never left in
    a partially-written state, and raises :class:`StorageError` on failure so
    the caller decides whether to log, retry, or surface it.
    """

    def __init__(self, file_path: str) -> None:
        self._path = file_path
        self._log = logging.getLogger(f'labkit.repository.{type(self).__name__}')

    @property
    def path(self) -> str:
        return self._path

    def _load(self, default: Any, path: str = None) -> Any:
        """Load JSON from *path* (default: ``self._path``), returning *default* on missing/corrupt file."""
        path = path or self._path
        if os.path.exists(path):
            try:
                with open(path, 'r', encoding='utf-8') as fh:
                    return json.load(fh)
            except (json.JSONDecodeError, UnicodeDecodeError, OSError) as exc:
                self._log.warning("Could not load %s: %s", path, exc)
        return default

    def _save(self, data: Any, path: str = None) -> None:
        """Atomically write *data* as JSON to *path* (default: ``self._path``).

        Raises:
            StorageError: If the data is not serialisable or the write fails.
        """
        path = path or self._path
        dir_name = os.path.dirname(os.path.abspath(path))
        try:
            os.makedirs(dir_name, exist_ok=True)
            payload = json.dumps(data, indent=2, ensure_ascii=False)
        except (TypeError, ValueError, OSError) as exc:
            raise StorageError(f"Could not serialise data for {path}: {exc}", path) from exc

        try:
            fd, tmp_path = tempfile.mkstemp(dir=dir_name, suffix='.tmp')
        except OSError as exc:
            raise StorageError(f"Could not write {path}: {exc}", path) from exc
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as fh:
                fh.write(payload)
            os.replace(tmp_path, path)
        except OSError as exc:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise StorageError(f"Could not write {path}: {exc}", path) from exc

    def _remove(self, path: str = None) -> bool:
        """Delete the backing file.  Returns ``False`` if it did not exist.

        Raises:
            StorageError: If the file exists but cannot be removed.
        """
        path = path or self._path
        try:
            os.remove(path)
            return True
        except FileNotFoundError:
            return False
        except OSError as exc:
            raise StorageError(f"Could not delete {path}: {exc}", path) from exc
