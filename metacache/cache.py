"""
Write-through metadata cache

MetadataCache keeps an in-memory HashTable of FileMetadata keyed by storage path in front of a RecordStore:
- bootstrap() loads all active records once, before the cache is used
- register_write() persists a new record first, and only then puts it in the table
- lookup() checks the table first, and on a miss reads the store and puts the result in the table

The record store is always the source of truth. Changes made to the store directly (not through the cache)
are only seen after a cache miss for that key or a new bootstrap. Entries are never evicted or expired,
and deactivating a record does not remove it from the table.

All table operations are guarded by a single lock, store I/O is done outside of it.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Iterator, Optional

from metacache.config import Settings, get_settings
from metacache.errors import NotFoundError, StartupError
from metacache.hashtable import HashTable
from metacache.models import FileMetadata, NewFile
from metacache.store import Record, RecordStore, SqliteRecordStore


def to_file_metadata(record: Record) -> FileMetadata:
    return FileMetadata(
        id=str(record.id),
        owner_id=record.owner_id,
        original_name=record.original_name,
        filename=record.filename,
        mime_type=record.mime_type,
        size=int(record.size),
        path=record.path,
        url=record.url,
        checksum=record.checksum,
        metadata=record.metadata,
        created_at=record.created_at,
    )


class MetadataCache:
    def __init__(self, store: RecordStore, table: Optional[HashTable[str, FileMetadata]] = None):
        self.store = store
        self.table: HashTable[str, FileMetadata] = table if table is not None else HashTable()
        self._lock = threading.RLock()

    @property
    def size(self) -> int:
        with self._lock:
            return self.table.size

    def cached_keys(self) -> list[str]:
        with self._lock:
            return self.table.keys()

    def bootstrap(self) -> int:
        """
        Load all active records from the store into the table, returning the number of records loaded
        :raises StartupError: if the records could not be read
        """
        try:
            records = self.store.find_all_active()
        except Exception as e:
            raise StartupError(f"Could not bootstrap metadata cache: {e}") from e
        values = [to_file_metadata(r) for r in records]
        with self._lock:
            for value in values:
                self.table.set(value.path, value)
        logging.info(f"Bootstrapped metadata cache with {len(values)} records")
        return len(values)

    def register_write(self, new_file: NewFile) -> FileMetadata:
        """
        Persist a new file record and add it to the cache. If the store fails, the cache is not changed.
        """
        record = self.store.create(new_file.model_dump())
        value = to_file_metadata(record)
        with self._lock:
            self.table.set(value.path, value)
        logging.debug(f"Registered {value.path!r} as {value.id}")
        return value

    def lookup(self, key: str) -> FileMetadata:
        """
        Get the metadata for this storage path, from the cache if possible
        :raises NotFoundError: if there is no record for this path
        """
        with self._lock:
            value = self.table.get(key)
        if value is not None:
            return value
        logging.debug(f"Cache miss for {key!r}")
        record = self.store.find_by_path(key)
        if record is None:
            raise NotFoundError(f"File {key!r} does not exist")
        value = to_file_metadata(record)
        with self._lock:
            self.table.set(key, value)
        return value

    def list_by_owner(self, owner_id: str) -> list[FileMetadata]:
        """List the active files of an owner from the store, refreshing their cache entries"""
        values = [to_file_metadata(r) for r in self.store.find_by_owner(owner_id)]
        with self._lock:
            for value in values:
                self.table.set(value.path, value)
        return values

    def deactivate(self, record_id: str) -> bool:
        """Mark a record as deleted in the store. The cached entry (if any) is kept."""
        return self.store.mark_inactive(record_id)


def create_table(settings: Settings) -> HashTable[str, FileMetadata]:
    return HashTable(initial_capacity=settings.initial_capacity, load_factor=settings.load_factor)


@contextmanager
def open_metadata_cache(settings: Settings | None = None) -> Iterator[MetadataCache]:
    """
    Open the record store, bootstrap a new metadata cache from it and close the store afterwards.
    Use this once around the lifetime of the application (or of a CLI command or test).
    """
    if settings is None:
        settings = get_settings()
    settings.uploads_dir.mkdir(parents=True, exist_ok=True)
    store = SqliteRecordStore(settings.db_name)
    try:
        cache = MetadataCache(store, create_table(settings))
        cache.bootstrap()
        yield cache
    finally:
        store.close()
