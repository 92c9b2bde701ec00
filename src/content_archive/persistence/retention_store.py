import logging
import os
from pathlib import Path
from typing import List, Optional, Tuple

from ..config import settings
from ..exceptions import InvalidInput, MalformedArtifact, NotFound, StorageFailed
from ..models.document import Document, DocumentSummary
from ..utils.logging import AuditLogger
from . import codec

logger = logging.getLogger(__name__)

class RetentionStore:
    """
    Flat-file archive of documents, one artifact per file, capped at `capacity` items.

    Only files ending in `suffix` are treated as archived items, so transient
    working files (subtitle tracks, temp writes) can share the directory.
    """

    def __init__(
        self,
        data_dir: Optional[Path] = None,
        capacity: Optional[int] = None,
        suffix: Optional[str] = None,
        audit: Optional[AuditLogger] = None,
    ) -> None:
        self.data_dir = Path(data_dir if data_dir is not None else settings.data_dir)
        self.capacity = capacity if capacity is not None else settings.max_history_items
        self.suffix = suffix if suffix is not None else settings.file_suffix
        self.audit = audit

        if self.capacity < 1:
            raise ValueError("capacity must be at least 1")

    def key_for(self, doc: Document) -> str:
        return f"{doc.id}{self.suffix}"

    def _path(self, key: str) -> Path:
        if not key or key in (".", "..") or "/" in key or "\\" in key or "\x00" in key:
            raise InvalidInput(f"Invalid storage key: {key!r}")
        return self.data_dir / key

    def _item_path(self, key: str) -> Path:
        """Path of an archived item; keys that list() would never return are not items."""
        path = self._path(key)
        if key.startswith(".") or not key.endswith(self.suffix):
            raise NotFound(f"Not an archived item: {key}")
        return path

    def save(self, doc: Document) -> str:
        """
        Write a document and evict the oldest items if the store is over capacity.

        Returns:
            The storage key (file name) of the new artifact

        Raises:
            StorageFailed: Directory/file could not be written, or the key already exists
        """
        key = self.key_for(doc)
        path = self._path(key)
        tmp_path = self.data_dir / f".{key}.tmp"

        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            if path.exists():
                raise StorageFailed(f"Refusing to overwrite existing artifact {key}")
            tmp_path.write_bytes(codec.encode(doc).encode("utf-8"))
            os.replace(tmp_path, path)
        except (OSError, UnicodeError) as e:
            try:
                tmp_path.unlink(missing_ok=True)
            except OSError:
                logger.warning(f"Could not remove temporary file {tmp_path}")
            raise StorageFailed(f"Failed to write {key}: {e}") from e

        logger.info(f"💾 Saved {key}")
        self.prune()
        return key

    def _entries(self) -> List[Tuple[float, str]]:
        """(mtime, key) for every archived item, newest first."""
        if not self.data_dir.is_dir():
            return []

        entries = []
        with os.scandir(self.data_dir) as it:
            for entry in it:
                if not entry.name.endswith(self.suffix) or entry.name.startswith("."):
                    continue
                try:
                    if not entry.is_file():
                        continue
                    entries.append((entry.stat().st_mtime_ns, entry.name))
                except FileNotFoundError:
                    # Removed between scandir and stat
                    continue

        entries.sort(reverse=True)
        return entries

    def list(self) -> List[str]:
        """Keys ordered by modification time, most recent first."""
        return [key for _, key in self._entries()]

    def prune(self) -> List[str]:
        """
        Remove every item beyond the `capacity` most recent.

        Failures are logged and skipped; this never raises for a single bad file.

        Returns:
            Keys that were actually deleted
        """
        entries = self._entries()
        if len(entries) <= self.capacity:
            return []

        evicted = []
        for _, key in entries[self.capacity:]:
            try:
                (self.data_dir / key).unlink()
                evicted.append(key)
                logger.info(f"🗑️ Evicted old history file: {key}")
                if self.audit:
                    self.audit.log_event("DOCUMENT_EVICTED", "INFO", details={"key": key})
            except OSError as e:
                logger.error(f"Failed to evict {key}: {e}")

        return evicted

    def get(self, key: str) -> Document:
        """
        Load one document.

        Raises:
            NotFound: Key missing or unreadable
            MalformedArtifact: File exists but cannot be decoded
        """
        path = self._item_path(key)
        try:
            raw = path.read_bytes()
        except OSError as e:
            raise NotFound(f"File not found or cannot be read: {key}") from e

        try:
            artifact = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedArtifact(f"{key}: not valid UTF-8") from e

        return codec.decode(artifact, key)

    def summaries(self) -> Tuple[List[DocumentSummary], List[str]]:
        """
        Decode every item for a history view.

        Returns:
            (summaries in list() order, keys that could not be read)
        """
        items: List[DocumentSummary] = []
        unreadable: List[str] = []

        for key in self.list():
            try:
                doc = self.get(key)
            except (NotFound, MalformedArtifact) as e:
                logger.warning(f"Skipping unreadable item {key}: {e}")
                unreadable.append(key)
                continue

            items.append(DocumentSummary(
                key=key,
                title=doc.title,
                kind=doc.kind,
                created_at=doc.created_at,
                source_url=doc.source_url,
            ))

        return items, unreadable

    def delete(self, key: str) -> None:
        """
        Raises:
            NotFound: Key does not exist (including a second delete)
            StorageFailed: File exists but could not be removed
        """
        path = self._item_path(key)
        if not path.is_file():
            raise NotFound(f"File not found: {key}")

        try:
            path.unlink()
        except FileNotFoundError as e:
            raise NotFound(f"File not found: {key}") from e
        except OSError as e:
            raise StorageFailed(f"Failed to delete {key}: {e}") from e

        logger.info(f"Deleted {key}")
        if self.audit:
            self.audit.log_event("DOCUMENT_DELETED", "INFO", details={"key": key})
