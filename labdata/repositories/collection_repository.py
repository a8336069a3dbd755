"""Repository for named record collections ([record, ...] per file)."""
import os
from typing import Any, Callable, Dict, List, Sequence

from ..errors import ClientError, StorageError
from .base import BaseRepository


class CollectionRepository(BaseRepository):
    """Stores ordered record collections as JSON arrays, one file per name.

    Schema of ``<directory>/<name>``::

        [{"id": 1, "quote": "...", "author": "..."}, ...]

    Every call to :meth:`save` rewrites the whole file; collections are
    expected to stay favorites-sized.  A missing or unreadable file loads as an
    empty list.

    Args:
        directory: Directory every *name* resolves against; created on first
                   write.
        encode:    Converts one record to a JSON-serialisable dict.
        decode:    Converts one dict back to a record; may raise
                   :class:`~labdata.errors.DecodeError`.
    """

    def __init__(self, directory: str,
                 encode: Callable[[Any], Dict[str, Any]],
                 decode: Callable[[Any], Any]) -> None:
        super().__init__(directory)
        self._encode = encode
        self._decode = decode

    def resolve(self, name: str) -> str:
        """Return the absolute path for *name*.

        Raises:
            StorageError: If *name* is empty or points outside the directory.
        """
        if not name or name in ('.', '..') or os.sep in name or '/' in name \
                or (os.altsep and os.altsep in name):
            raise StorageError(f"Invalid collection name: {name!r}")
        return os.path.join(os.path.abspath(self._path), name)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def save(self, items: Sequence[Any], name: str) -> bool:
        """Persist *items* to *name*.  Returns ``False`` (and logs) on failure."""
        try:
            path = self.resolve(name)
            self._save([self._encode(item) for item in items], path)
        except StorageError as exc:
            self._log.warning("Could not save collection %s: %s", name, exc)
            return False
        self._log.debug("Saved %d record(s) to %s", len(items), path)
        return True

    def load(self, name: str) -> List[Any]:
        """Return the records stored in *name*; ``[]`` on any failure."""
        try:
            path = self.resolve(name)
        except StorageError as exc:
            self._log.warning("Could not load collection: %s", exc)
            return []
        raw = self._load(None, path)
        if raw is None:
            return []
        if not isinstance(raw, list):
            self._log.warning("Ignoring %s: expected a JSON array", path)
            return []
        try:
            items = [self._decode(entry) for entry in raw]
        except ClientError as exc:
            self._log.warning("Could not decode %s: %s", path, exc)
            return []
        self._log.debug("Loaded %d record(s) from %s", len(items), path)
        return items

    def exists(self, name: str) -> bool:
        try:
            return os.path.isfile(self.resolve(name))
        except StorageError:
            return False

    def delete(self, name: str) -> bool:
        """Delete *name*.  Returns ``False`` if it was missing or removal failed."""
        try:
            removed = self._remove(self.resolve(name))
        except StorageError as exc:
            self._log.warning("Could not delete collection %s: %s", name, exc)
            return False
        if removed:
            self._log.debug("Deleted collection %s", name)
        return removed
